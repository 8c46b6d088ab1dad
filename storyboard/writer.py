"""
Writer Agent: turns a creative brief into a scene-by-scene script via Claude.

One Messages API call per brief. The reply is expected to be a JSON document
({"title": ..., "frames": [...]}) but is treated as untrusted text: the parser
tries the whole reply first, then the outermost {...} span, and gives up with
ScriptParseError after that.
"""

import json
import re

import anthropic

from storyboard.brief import resolve_duration
from storyboard.errors import ScriptParseError, TimeoutFault, UpstreamCallFault
from storyboard.prompts import build_message_content, build_system_prompt
from storyboard.settings import get_api_key


SCENE_FIELDS = (
    "sceneNumber",
    "timestamp",
    "sceneDescription",
    "dialogue",
    "cameraWork",
    "sound",
    "directionNotes",
    "imagePrompt",
)

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def generate_script(brief, config, timeout=None):
    """
    Generate the storyboard script for a validated brief.

    Args:
        brief: creative brief dict (productName already validated)
        config: settings from storyboard.settings.load_config
        timeout: seconds left in the request budget, or None

    Returns a ScriptDocument dict: {"title": str, "frames": [scene dicts]}.
    """
    api_key = get_api_key(config, "anthropic_key")
    script_config = config.get("script", {})
    duration = resolve_duration(brief)

    # One request per brief: no SDK-level retries
    client = anthropic.Anthropic(api_key=api_key, max_retries=0)
    request = {
        "model": script_config.get("model", "claude-sonnet-4-20250514"),
        "max_tokens": script_config.get("max_tokens", 4096),
        "system": build_system_prompt(duration),
        "messages": [{"role": "user", "content": build_message_content(brief)}],
    }
    if timeout is not None:
        request["timeout"] = timeout

    try:
        message = client.messages.create(**request)
    except anthropic.APITimeoutError as e:
        raise TimeoutFault("Script generation timed out") from e
    except anthropic.APIError as e:
        raise UpstreamCallFault(f"Script generation failed: {e}") from e

    script = parse_script_response(_response_text(message))
    print(f"  Script generated: \"{script['title']}\" ({len(script['frames'])} frames)")
    return script


def _response_text(message):
    """Text of the first text block in a Messages API reply."""
    for block in getattr(message, "content", None) or []:
        if getattr(block, "type", None) == "text":
            return block.text
    return ""


def parse_script_response(text):
    """
    Parse a script reply into a ScriptDocument.

    Attempt 1 reads the whole text as JSON. Attempt 2 reads the span from the
    first "{" to the last "}". Either attempt must produce a title and a list
    of frames carrying every scene field.
    """
    script = _parse_attempt(text)
    if script is not None:
        return script

    match = _JSON_OBJECT_RE.search(text or "")
    if match:
        script = _parse_attempt(match.group(0))
        if script is not None:
            return script

    raise ScriptParseError("Failed to parse Claude response as JSON")


def _parse_attempt(candidate):
    try:
        data = json.loads(candidate)
    except (TypeError, ValueError):
        return None
    return _as_script_document(data)


def _as_script_document(data):
    """Return a normalized ScriptDocument, or None if data has the wrong shape."""
    if not isinstance(data, dict):
        return None
    title = data.get("title")
    frames = data.get("frames")
    if not isinstance(title, str) or not isinstance(frames, list):
        return None

    scenes = []
    for frame in frames:
        if not isinstance(frame, dict) or any(field not in frame for field in SCENE_FIELDS):
            return None
        scenes.append({field: frame[field] for field in SCENE_FIELDS})

    return {"title": title, "frames": scenes}
