# Actions that modify the status window state

from __future__ import annotations
from .state import AppState
from .orchestrator import LaunchOutcome, Stage
from .report import STAGE_LABELS, format_outcome

def set_stage(state: AppState, stage: Stage) -> None:
    state.stage = stage.value
    state.status_text = STAGE_LABELS[stage]

def set_outcome(state: AppState, outcome: LaunchOutcome) -> None:
    set_stage(state, outcome.stage)
    state.details = format_outcome(outcome)
    state.busy = False
