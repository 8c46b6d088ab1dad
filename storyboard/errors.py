"""
Errors raised while turning a creative brief into a storyboard.

Only ValidationError is the caller's fault (HTTP 400). Everything else is
reported as a 500 with the exception message.
"""


class StoryboardError(Exception):
    """Base class for every failure surfaced to the caller."""


class ValidationError(StoryboardError):
    """The brief is missing or has an invalid required field."""


class ScriptParseError(StoryboardError):
    """The script response could not be read as a storyboard JSON document."""


class UpstreamCallFault(StoryboardError):
    """Network, credential or quota failure talking to a generative API."""


class TimeoutFault(StoryboardError):
    """The whole-request time budget ran out."""
