import threading
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from .records import Company, FinancialRecord


@dataclass(frozen=True)
class SessionState:
    """What the analyst is currently looking at.

    ``generation`` increases on every selection; results produced for an
    older generation are stale and must not be displayed.
    """

    company: Optional[Company] = None
    records: Tuple[FinancialRecord, ...] = ()
    charts: Tuple[Dict[str, Any], ...] = ()
    generation: int = 0


def select_company(
    state: SessionState,
    company: Company,
    records: Sequence[FinancialRecord],
    charts: Sequence[Dict[str, Any]] = (),
    release: Optional[Callable[[Dict[str, Any]], None]] = None,
) -> SessionState:
    if release is not None:
        for chart in state.charts:
            release(chart)
    return replace(
        state,
        company=company,
        records=tuple(records),
        charts=tuple(charts),
        generation=state.generation + 1,
    )


def is_current(state: SessionState, generation: int) -> bool:
    return state.company is not None and state.generation == generation


def accept_outcome(state: SessionState, outcome: Mapping[str, Any]) -> bool:
    return is_current(state, outcome.get("generation", -1))


class SessionStore:
    def __init__(self, state: Optional[SessionState] = None) -> None:
        self._state = state or SessionState()
        self._lock = threading.Lock()

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    def update(self, fn: Callable[[SessionState], SessionState]) -> SessionState:
        with self._lock:
            self._state = fn(self._state)
            return self._state
