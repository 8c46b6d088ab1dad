#!/usr/bin/env python3
"""
Storyboard Studio: turns an advertising brief into an illustrated storyboard.

Usage:
    python main.py serve                                  # Run the HTTP API
    python main.py serve --port 9000
    python main.py generate brief.json                    # Writes storyboard.json
    python main.py generate brief.json --out board.json --images-dir frames/
"""

import argparse
import base64
import json
import os
import sys

from storyboard.errors import StoryboardError
from storyboard.orchestrator import generate_storyboard
from storyboard.prompts import parse_data_url
from storyboard.settings import load_config


# MIME type -> file extension for saved frames; anything else is saved as .png
IMAGE_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


def load_brief(path):
    """Load a creative brief from a JSON file."""
    if not os.path.exists(path):
        print(f"ERROR: Brief not found at {path}")
        sys.exit(1)
    with open(path, "r") as f:
        return json.load(f)


def save_frame_images(storyboard, images_dir):
    """
    Decode each frame's data URL into images_dir/frame_<NN>.<ext>.

    Frames without an image are skipped. Returns the written paths.
    """
    os.makedirs(images_dir, exist_ok=True)
    written = []
    for index, frame in enumerate(storyboard["frames"]):
        image_url = frame.get("imageUrl")
        if not image_url:
            print(f"  WARNING: Frame {index + 1} has no image, skipping.")
            continue
        mime_type, data = parse_data_url(image_url)
        ext = IMAGE_EXTENSIONS.get(mime_type, "png")
        path = os.path.join(images_dir, f"frame_{index + 1:02d}.{ext}")
        with open(path, "wb") as f:
            f.write(base64.b64decode(data))
        written.append(path)
    return written


def run_generate(args):
    """Generate one storyboard from a brief file."""
    config = load_config(args.config)
    brief = load_brief(args.brief)

    try:
        storyboard = generate_storyboard(brief, config)
    except (StoryboardError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    with open(args.out, "w") as f:
        json.dump(storyboard, f, indent=2)
    print(f"  Storyboard saved: {args.out} ({storyboard['totalFrames']} frames)")

    if args.images_dir:
        paths = save_frame_images(storyboard, args.images_dir)
        print(f"  Saved {len(paths)} frame images to {args.images_dir}")
    return 0


def run_serve(args):
    """Run the HTTP API."""
    if args.config:
        os.environ["STORYBOARD_CONFIG"] = args.config
    from server.app import start_server
    start_server(host=args.host, port=args.port, debug=args.debug)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Storyboard Studio")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    sub = parser.add_subparsers(dest="mode", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.add_argument("--debug", action="store_true")
    serve.set_defaults(func=run_serve)

    generate = sub.add_parser("generate", help="Generate a storyboard from a brief file")
    generate.add_argument("brief", help="Path to a JSON creative brief")
    generate.add_argument("--out", default="storyboard.json", help="Where to write the storyboard JSON")
    generate.add_argument("--images-dir", default=None, help="Also save frame images here")
    generate.set_defaults(func=run_generate)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
