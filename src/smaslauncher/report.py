from __future__ import annotations

from .core.errors import (
    ChecksumMismatchError,
    LayoutMismatchError,
    LauncherError,
    MissingFileError,
)
from .orchestrator import LaunchOutcome, Stage

STAGE_LABELS = {
    Stage.IDLE: "Ready",
    Stage.LOCATING: "Looking for ROM files...",
    Stage.VALIDATING: "Checking ROM files...",
    Stage.COMPOSING: "Building game image...",
    Stage.BOOTSTRAPPING: "Starting display, audio and input...",
    Stage.LAUNCHING: "Launching...",
    Stage.RUNNING: "Game running",
    Stage.FAILED: "Launch failed",
}


def _error_lines(e: LauncherError) -> list[str]:
    if isinstance(e, MissingFileError):
        lines = [f"- Missing: {e.canonical_name}"]
        searched = e.details.get("searched") or []
        if searched:
            lines.append("  looked for: " + ", ".join(searched))
        return lines
    if isinstance(e, ChecksumMismatchError):
        lines = [
            f"- Wrong file: {e.canonical_name}",
            f"  expected sha1: {' or '.join(e.expected)}",
            f"  actual sha1:   {e.actual}",
        ]
        if e.hint:
            lines.append(f"  hint: {e.hint}")
        return lines
    if isinstance(e, LayoutMismatchError):
        return [f"- Bad size: {e.canonical_name} is {e.actual_size} bytes, expected {e.expected_size}"]
    return [f"- {e}"]


def format_outcome(outcome: LaunchOutcome) -> str:
    """Human-readable summary: which stage stopped the launch, and why."""
    lines: list[str] = []
    if outcome.ok:
        lines.append(STAGE_LABELS[Stage.RUNNING])
        if outcome.image_path is not None:
            lines.append(f"Image: {outcome.image_path}")
        if outcome.exit_code is not None:
            lines.append(f"Engine exited with code {outcome.exit_code}")
    else:
        failed = outcome.failed_stage
        where = f" while {failed.value}" if failed else ""
        lines.append(f"{STAGE_LABELS[Stage.FAILED]}{where}:")
        for e in outcome.errors:
            lines.extend(_error_lines(e))

    for d in outcome.degraded:
        lines.append(f"Warning: {d}")
    return "\n".join(lines)
