"""Hover tooltip state machine for heatmap cells.

Two states: ``HIDDEN`` and ``SHOWN`` (with the hovered record). Transitions
run synchronously inside the pointer handler that triggers them:

    HIDDEN  --enter(r)--> SHOWN(r)
    SHOWN(r) --enter(r')--> SHOWN(r')   re-anchored in place
    SHOWN(r) --leave(q)--> SHOWN(r)     q is not the shown record
    SHOWN(r) --leave-->    HIDDEN

One controller is created by the host and passed to the render pass; it is
never stored at module level. Observers (the drawing backend) subscribe to
receive a snapshot after every transition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from domain.models import VarianceRecord, month_name
from .surface import PointerEvent

log = logging.getLogger(__name__)

__all__ = ["TooltipPhase", "TooltipState", "TooltipController", "format_tooltip"]


class TooltipPhase(str, Enum):
    HIDDEN = "hidden"
    SHOWN = "shown"


@dataclass(frozen=True)
class TooltipState:
    visible: bool = False
    content: str = ""
    screen_position: Tuple[float, float] = (0.0, 0.0)
    active_record: Optional[VarianceRecord] = None
    opacity: float = 0.0

    @property
    def phase(self) -> TooltipPhase:
        return TooltipPhase.SHOWN if self.visible else TooltipPhase.HIDDEN


def format_tooltip(record: VarianceRecord, base_temperature: float) -> str:
    absolute = base_temperature + record.variance
    return (
        f"Year: {record.year} - Month: {month_name(record.month)}\n"
        f"{absolute:.1f}℃\n"
        f"{record.variance:+.1f}℃"
    )


Observer = Callable[[TooltipState], None]


class TooltipController:
    def __init__(
        self,
        *,
        offset_x: float = 100.0,
        offset_y: float = 80.0,
        opacity: float = 0.75,
    ) -> None:
        self.offset_x = offset_x
        self.offset_y = offset_y
        self.shown_opacity = opacity
        self._state = TooltipState()
        self._observers: List[Observer] = []
        self.transitions = 0

    @property
    def state(self) -> TooltipState:
        return self._state

    @property
    def phase(self) -> TooltipPhase:
        return self._state.phase

    # Transitions ------------------------------------------------------
    def pointer_enter(
        self,
        record: VarianceRecord,
        event: PointerEvent,
        *,
        base_temperature: float,
        anchor_height: float = 0.0,
    ) -> TooltipState:
        position = (event.x - self.offset_x, event.y - anchor_height - self.offset_y)
        self._set(
            TooltipState(
                visible=True,
                content=format_tooltip(record, base_temperature),
                screen_position=position,
                active_record=record,
                opacity=self.shown_opacity,
            )
        )
        return self._state

    def pointer_leave(self, record: Optional[VarianceRecord] = None) -> TooltipState:
        """Hide the tooltip.

        With ``record``, only a leave from the cell currently shown hides it;
        a leave from a cell the pointer already moved past is ignored.
        """
        if record is not None and record != self._state.active_record:
            return self._state
        if self._state.visible:
            self._set(TooltipState(screen_position=self._state.screen_position))
        return self._state

    def reset(self) -> None:
        if self._state != TooltipState():
            self._set(TooltipState())

    # Observation ------------------------------------------------------
    def subscribe(self, observer: Observer) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _set(self, state: TooltipState) -> None:
        self._state = state
        self.transitions += 1
        for observer in list(self._observers):
            try:
                observer(state)
            except Exception:  # noqa: BLE001
                log.exception("tooltip observer failed")
