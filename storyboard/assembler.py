"""
Storyboard Assembler: merges the script and its images into the final document.

Frames are matched by position only. A scene whose image failed still gets a
frame, with an empty imageUrl.
"""

FRAME_FIELDS = (
    "sceneNumber",
    "timestamp",
    "sceneDescription",
    "dialogue",
    "cameraWork",
    "sound",
    "directionNotes",
)


def assemble_storyboard(script, images, product_name, duration):
    """Build the StoryboardDocument for one generation request."""
    frames = []
    for index, scene in enumerate(script["frames"]):
        image = images[index] if index < len(images) else None
        frame = {field: scene.get(field) for field in FRAME_FIELDS}
        frame["imageUrl"] = image or ""
        frames.append(frame)

    return {
        "title": script["title"],
        "productName": product_name,
        "duration": f"{duration}s",
        "totalFrames": len(frames),
        "frames": frames,
    }
