"""
Brief checks run before any upstream API is touched.
"""

from storyboard.errors import ValidationError


MAX_PRODUCT_NAME_LENGTH = 200
DURATIONS = ("15", "30", "60")
DEFAULT_DURATION = "30"

REFERENCE_PURPOSES = ("product", "talent", "visual-tone")


def validate_brief(brief):
    """
    Reject a brief whose product name is missing, blank or too long.

    All other fields are optional. Raises ValidationError with the message
    shown to the caller.
    """
    if not isinstance(brief, dict):
        raise ValidationError("Request body must be a JSON object")

    name = brief.get("productName")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Product/Service Name is required")
    if len(name) > MAX_PRODUCT_NAME_LENGTH:
        raise ValidationError(
            f"Product/Service Name is too long (max {MAX_PRODUCT_NAME_LENGTH} characters)"
        )


def resolve_duration(brief):
    """Return the brief's duration as "15", "30" or "60" (default "30")."""
    raw = brief.get("duration")
    if raw is None or raw == "":
        return DEFAULT_DURATION

    duration = str(raw).strip()
    return duration if duration in DURATIONS else DEFAULT_DURATION


def reference_images(brief):
    """The brief's reference images, in submission order."""
    return [ref for ref in brief.get("referenceImages") or [] if isinstance(ref, dict)]
