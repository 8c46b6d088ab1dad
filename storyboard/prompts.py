"""
Prompt Builder: renders a creative brief into the script-writer request.

Produces the system instruction (JSON schema + frame count), the main text
prompt, and the message content sent to Claude. When reference images are
attached, the content becomes a list of image blocks grouped by purpose,
followed by the text prompt.
"""

import re

from storyboard.brief import REFERENCE_PURPOSES, reference_images, resolve_duration


FRAME_COUNTS = {
    "15": "3 to 4",
    "30": "5 to 6",
    "60": "7 to 8",
}

# (brief key, label) in the order they appear in the prompt
_BRIEF_FIELDS = [
    ("talent", "Talent/Cast"),
    ("creativeTone", "Creative Tone"),
    ("targetAudience", "Target Audience"),
    ("keyMessage", "Key Message"),
    ("setting", "Setting/Location"),
    ("storyline", None),
    ("additionalNotes", "Additional Notes"),
]

# Marker placed before each group of images in multimodal content
GROUP_MARKERS = {
    "product": "Product/Service Reference Photos:",
    "talent": "Talent/Cast Reference Photos:",
    "visual-tone": "Visual Tone / Mood Reference Images:",
}

# How the model should use each group of images
GROUP_INSTRUCTIONS = {
    "product": (
        "[PRODUCT/SERVICE REFERENCE IMAGES ATTACHED] Use these images to understand the "
        "product's actual appearance, packaging, logo, and branding. Accurately describe the "
        "product's visual details in each scene's imagePrompt so the image generator can "
        "reproduce the product faithfully."
    ),
    "talent": (
        "[TALENT REFERENCE IMAGES ATTACHED] Use these images as visual reference for the "
        "talent/cast appearance. Describe the person's look in each scene's imagePrompt so "
        "the image generator can reproduce a similar appearance."
    ),
    "visual-tone": (
        "[VISUAL TONE REFERENCE IMAGES ATTACHED] Use these images as reference for the overall "
        "visual style, color palette, mood, and atmosphere. Incorporate this aesthetic into "
        "each scene's imagePrompt."
    ),
}

_DATA_URL_RE = re.compile(r"^data:(image/[\w.+-]+);base64,(.+)$", re.DOTALL)


def get_frame_count(duration):
    """Frame count instruction for a duration; unknown values use the 30s range."""
    return FRAME_COUNTS.get(str(duration), FRAME_COUNTS["30"])


def parse_data_url(data_url):
    """Split a base64 image data URL into (media_type, data)."""
    if not isinstance(data_url, str):
        raise ValueError("Invalid data URL")
    match = _DATA_URL_RE.match(data_url)
    if not match:
        raise ValueError("Invalid data URL")
    return match.group(1), match.group(2)


def group_reference_images(brief):
    """Map each known purpose to its reference images, keeping submission order."""
    groups = {purpose: [] for purpose in REFERENCE_PURPOSES}
    for ref in reference_images(brief):
        purpose = ref.get("purpose")
        if purpose in groups:
            groups[purpose].append(ref)
    return groups


def _field(brief, key):
    value = brief.get(key)
    if isinstance(value, str):
        value = value.strip()
    return value or None


def build_system_prompt(duration):
    """System instruction: persona, output JSON schema and frame count."""
    frame_count = get_frame_count(duration)

    return f"""You are a senior creative director at a top advertising agency. You create compelling, visually rich storyboards for TV commercials.

You must respond with valid JSON only, no markdown, no code fences, no explanation. The JSON must follow this exact structure:

{{
  "title": "A creative title for the storyboard",
  "frames": [
    {{
      "sceneNumber": 1,
      "timestamp": "0:00 - 0:05",
      "sceneDescription": "Detailed description of what's happening visually in this scene",
      "dialogue": "Any spoken dialogue or narration. Use '(No dialogue)' if none",
      "cameraWork": "Camera angle, movement, and framing instructions",
      "sound": "Sound effects, music, or ambient audio notes",
      "directionNotes": "Additional creative direction for this scene",
      "imagePrompt": "A detailed, visual prompt for generating an illustration of this scene. Describe the composition, lighting, colors, characters, and setting. Style: advertising storyboard illustration, clean pencil sketch style with light watercolor wash. If talent reference photos were provided, describe the person's physical appearance (hair, build, clothing style) in detail so the image generator can reproduce a similar look. If visual tone references were provided, incorporate that color palette, mood, and style."
    }}
  ]
}}

Generate exactly {frame_count} frames for a {duration}-second commercial. Number scenes sequentially from 1 and make sure the timestamps cover the full duration. Make the imagePrompt highly descriptive and visual for each frame.

IMPORTANT:
- If a "Storyline / Prompt" is provided, follow it closely as the narrative backbone. Structure your frames to match the story arc described. If specific scenes are mentioned, use them as the basis for your frames.
- If reference images are attached, carefully analyze them and incorporate their visual details into your imagePrompt for each frame. For product images, describe the exact product appearance, packaging, colors, and logo. For talent images, describe their physical features. For visual tone images, match the mood, palette, and style."""


def build_text_prompt(brief):
    """
    The main user prompt: one labeled line per populated brief field.

    Absent or blank fields are left out entirely. Reference image groups add
    an instruction paragraph even if the images themselves are not sent.
    """
    duration = resolve_duration(brief)
    parts = [
        f"Create a storyboard for a {duration}-second commercial advertisement.",
        f"Product/Service: {brief['productName'].strip()}",
    ]

    for key, label in _BRIEF_FIELDS:
        value = _field(brief, key)
        if value is None:
            continue
        if key == "storyline":
            parts.append(
                "\nStoryline / Prompt (IMPORTANT: follow this storyline closely as the "
                "narrative backbone and structure the frames around it):\n"
                f"{value}"
            )
        else:
            parts.append(f"{label}: {value}")

    groups = group_reference_images(brief)
    for purpose in REFERENCE_PURPOSES:
        if groups[purpose]:
            parts.append(f"\n{GROUP_INSTRUCTIONS[purpose]}")

    return "\n".join(parts)


def build_message_content(brief):
    """
    User message content for the Messages API.

    Text only when no reference images exist; otherwise labeled image blocks
    grouped product, talent, visual-tone, then the text prompt.
    """
    text_prompt = build_text_prompt(brief)
    groups = group_reference_images(brief)
    if not any(groups.values()):
        return text_prompt

    content = []
    for purpose in REFERENCE_PURPOSES:
        refs = groups[purpose]
        if not refs:
            continue
        content.append({"type": "text", "text": GROUP_MARKERS[purpose]})
        for ref in refs:
            media_type, data = parse_data_url(ref.get("base64"))
            content.append({
                "type": "image",
                "source": {"type": "base64", "media_type": media_type, "data": data},
            })

    content.append({"type": "text", "text": text_prompt})
    return content
