"""
Session State Machine transitions.

States: Uninitialized -> Active -> Completed. Pausing is client-local: the
client simply stops reporting elapsed time.

Progress calls carry exactly one action:
- Skip: the user moved past the problem without answering
- Answer: the user recorded an outcome (correct / incorrect)
- Heartbeat: periodic position/timer save with no outcome

The transition function here is pure so the browser driver and the server
apply the same rules to the same state.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from wqn.review.models import SessionState


class ActionKind(str, Enum):
    """Kind of progress action."""
    SKIP = "skip"
    ANSWER = "answer"
    HEARTBEAT = "heartbeat"


@dataclass(frozen=True)
class ProgressAction:
    """A progress action; was_correct is only set for answers."""

    kind: ActionKind
    was_correct: bool | None = None

    @property
    def records_result(self) -> bool:
        """Skips and answers go to the result log, heartbeats never do."""
        return self.kind != ActionKind.HEARTBEAT

    @classmethod
    def skip(cls) -> "ProgressAction":
        return cls(ActionKind.SKIP)

    @classmethod
    def answer(cls, was_correct: bool) -> "ProgressAction":
        return cls(ActionKind.ANSWER, bool(was_correct))

    @classmethod
    def heartbeat(cls) -> "ProgressAction":
        return cls(ActionKind.HEARTBEAT)


def derive_action(was_skipped: object, was_correct: object) -> ProgressAction:
    """
    Map raw caller input to an action.

    wasSkipped=true -> Skip; otherwise a boolean wasCorrect -> Answer;
    anything else -> Heartbeat.
    """
    if was_skipped is True:
        return ProgressAction.skip()
    if isinstance(was_correct, bool):
        return ProgressAction.answer(was_correct)
    return ProgressAction.heartbeat()


def apply_progress(
    state: SessionState,
    problem_id: str,
    action: ProgressAction,
    next_index: int | None = None,
    elapsed_ms: int | None = None,
) -> SessionState:
    """
    Apply one progress action to a session state.

    Position and timer are updated for every action when provided. Repeated
    or out-of-order delivery of the same action leaves the sets unchanged.
    """
    if action.kind == ActionKind.SKIP:
        state = state.mark_skipped(problem_id)
    elif action.kind == ActionKind.ANSWER:
        state = state.mark_answered(problem_id)
    return state.move_to(next_index, elapsed_ms)


def is_at_foremost(state: SessionState, index: int | None = None) -> bool:
    """
    Whether the user is at the furthest problem reached.

    True when there is no next problem or the next problem has not been
    answered yet.
    """
    index = state.current_index if index is None else index
    if index + 1 >= len(state.problem_ids):
        return True
    return state.problem_ids[index + 1] not in state.completed_problem_ids
