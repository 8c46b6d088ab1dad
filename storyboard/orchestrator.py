"""
Orchestrator: runs one brief through validate, script, images and assembly.

Each request gets its own run state, a plain dict threaded through the
stages:

    idle -> validating -> generating-script -> generating-images
         -> assembling -> complete

Any fatal failure moves the run to "error" with its message before the
exception is re-raised. Individual image failures are not fatal.
"""

import time

from storyboard.assembler import assemble_storyboard
from storyboard.brief import reference_images, resolve_duration, validate_brief
from storyboard.errors import TimeoutFault
from storyboard.image_gen import generate_images
from storyboard.writer import generate_script


IDLE = "idle"
VALIDATING = "validating"
GENERATING_SCRIPT = "generating-script"
GENERATING_IMAGES = "generating-images"
ASSEMBLING = "assembling"
COMPLETE = "complete"
ERROR = "error"

_NEXT_PHASE = {
    IDLE: VALIDATING,
    VALIDATING: GENERATING_SCRIPT,
    GENERATING_SCRIPT: GENERATING_IMAGES,
    GENERATING_IMAGES: ASSEMBLING,
    ASSEMBLING: COMPLETE,
}

DEFAULT_BUDGET_SECONDS = 120


def new_run(budget=DEFAULT_BUDGET_SECONDS, clock=time.monotonic):
    """Fresh run state for one request."""
    started = clock()
    return {
        "phase": IDLE,
        "started_at": started,
        "deadline": started + budget,
        "error": None,
        "history": [IDLE],
        "clock": clock,
    }


def advance(run, phase):
    """Move the run to phase, refusing anything but the next step or error."""
    current = run["phase"]
    if phase == ERROR:
        if current in (IDLE, COMPLETE, ERROR):
            raise RuntimeError(f"Cannot fail a run in phase {current!r}")
    elif _NEXT_PHASE.get(current) != phase:
        raise RuntimeError(f"Illegal transition {current!r} -> {phase!r}")
    run["phase"] = phase
    run["history"].append(phase)
    return run


def remaining(run):
    """Seconds left in the run's budget; TimeoutFault once it is spent."""
    left = run["deadline"] - run["clock"]()
    if left <= 0:
        raise TimeoutFault("Storyboard generation timed out")
    return left


def fail(run, error):
    """Record error on the run and move it to the error phase."""
    run["error"] = str(error) or error.__class__.__name__
    if run["phase"] not in (IDLE, COMPLETE, ERROR):
        advance(run, ERROR)
    return run


def generate_storyboard(brief, config, run=None):
    """
    Generate a complete storyboard for a brief.

    Returns the StoryboardDocument dict. Raises ValidationError,
    ScriptParseError, UpstreamCallFault or TimeoutFault; the run is left in
    the "error" phase when that happens.
    """
    if run is None:
        budget = config.get("generation", {}).get("timeout_seconds", DEFAULT_BUDGET_SECONDS)
        run = new_run(budget)

    try:
        advance(run, VALIDATING)
        validate_brief(brief)
        duration = resolve_duration(brief)
        raw_duration = brief.get("duration")
        if raw_duration not in (None, "") and str(raw_duration).strip() != duration:
            print(f"  WARNING: Unknown duration {raw_duration!r}, using {duration}s")

        advance(run, GENERATING_SCRIPT)
        print(f"[1/3] Writing script for {brief['productName'].strip()!r} ({duration}s)...")
        script = generate_script(brief, config, timeout=remaining(run))

        advance(run, GENERATING_IMAGES)
        prompts = [scene["imagePrompt"] for scene in script["frames"]]
        print(f"[2/3] Generating {len(prompts)} images...")
        images = generate_images(
            prompts, reference_images(brief), config, timeout=remaining(run)
        )

        advance(run, ASSEMBLING)
        print("[3/3] Assembling storyboard...")
        storyboard = assemble_storyboard(script, images, brief["productName"], duration)

        advance(run, COMPLETE)
        return storyboard
    except Exception as e:
        fail(run, e)
        raise
