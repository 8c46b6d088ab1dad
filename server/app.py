"""
Storyboard Studio: HTTP API.

POST a creative brief to /generate and get back a storyboard: a Claude-written
scene script with one Gemini illustration per scene.

Run standalone:  python -m server.app
Or via main.py:  python main.py serve
"""

from flask import Flask, jsonify, request

from storyboard.errors import ValidationError
from storyboard.orchestrator import generate_storyboard
from storyboard.settings import is_configured, load_config


app = Flask(__name__)

# Reference images arrive inline as data URLs
app.config["MAX_CONTENT_LENGTH"] = 50 * 1024 * 1024


def _error(message, status):
    return jsonify({"error": message}), status


@app.errorhandler(413)
def request_too_large(e):
    limit_mb = app.config["MAX_CONTENT_LENGTH"] // (1024 * 1024)
    return _error(f"Request body is too large (max {limit_mb} MB)", 413)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.route("/generate", methods=["POST"])
@app.route("/api/generate", methods=["POST"])
def api_generate():
    """Generate a storyboard from the JSON brief in the request body."""
    max_length = app.config.get("MAX_CONTENT_LENGTH")
    if max_length and (request.content_length or 0) > max_length:
        return request_too_large(None)

    brief = request.get_json(silent=True)
    if not isinstance(brief, dict):
        return _error("Request body must be a JSON object", 400)

    try:
        storyboard = generate_storyboard(brief, load_config())
    except ValidationError as e:
        return _error(str(e), 400)
    except Exception as e:
        print(f"Generation error: {e!r}")
        return _error(str(e) or "An unexpected error occurred", 500)

    return jsonify(storyboard)


@app.route("/api/status")
def api_status():
    """Health check: reports which credentials are configured."""
    apis = load_config().get("apis", {})
    return jsonify({
        "ok": True,
        "anthropic_configured": is_configured(apis.get("anthropic_key")),
        "gemini_configured": is_configured(apis.get("gemini_key")),
    })


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

def start_server(host=None, port=None, debug=False):
    server_config = load_config().get("server", {})
    app.run(
        host=host or server_config.get("host", "0.0.0.0"),
        port=port or server_config.get("port", 8080),
        debug=debug,
        use_reloader=False,
        threaded=True,
    )


if __name__ == "__main__":
    start_server(debug=True)
