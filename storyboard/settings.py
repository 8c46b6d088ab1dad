"""
Settings: YAML configuration plus API credentials from the environment.

Non-secret settings (models, timeouts, server address) live in config.yaml.
API keys are read from ANTHROPIC_API_KEY and GEMINI_API_KEY only.
"""

import copy
import os

import yaml

from storyboard.errors import UpstreamCallFault


CONFIG_PATH = os.environ.get("STORYBOARD_CONFIG", "config.yaml")

# Config key -> environment variable holding the credential
API_KEY_ENV = {
    "anthropic_key": "ANTHROPIC_API_KEY",
    "gemini_key": "GEMINI_API_KEY",
}

DEFAULTS = {
    "script": {
        "model": "claude-sonnet-4-20250514",
        "max_tokens": 4096,
    },
    "images": {
        "model": "gemini-2.5-flash-image",
        "api_url": "https://generativelanguage.googleapis.com/v1beta",
        "request_timeout": 90,
    },
    "generation": {
        "timeout_seconds": 120,
    },
    "server": {
        "host": "0.0.0.0",
        "port": 8080,
    },
}

_PLACEHOLDER_PREFIXES = ("your-", "PASTE")


def _merge(base, override):
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path=None, environ=None):
    """
    Load settings from YAML and inject API keys from the environment.

    A missing config file is not an error: the defaults are used as-is.
    """
    path = path or os.environ.get("STORYBOARD_CONFIG", CONFIG_PATH)
    environ = os.environ if environ is None else environ

    file_config = {}
    if path and os.path.exists(path):
        with open(path, "r") as f:
            file_config = yaml.safe_load(f) or {}

    config = _merge(DEFAULTS, file_config)

    # Credentials are environment-only; anything under apis: in the file is ignored
    config["apis"] = {key: environ.get(env_var) for key, env_var in API_KEY_ENV.items()}
    return config


def is_configured(value):
    """True if a credential looks like a real key rather than a blank/placeholder."""
    if not value or len(value.strip()) <= 10:
        return False
    return not value.strip().startswith(_PLACEHOLDER_PREFIXES)


def get_api_key(config, name):
    """Return the named API key, or raise UpstreamCallFault if it is unusable."""
    value = config.get("apis", {}).get(name)
    if not is_configured(value):
        raise UpstreamCallFault(f"{API_KEY_ENV.get(name, name)} not found")
    return value.strip()
