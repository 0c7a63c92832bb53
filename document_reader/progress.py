"""Reading progress and scrub-control state machine.

The tracker consumes scroll samples and drag gestures from the rendering
layer and produces a ``ReadingState`` plus ``ScrollCommand`` instructions.
All timers are evaluated against an injected clock; callers invoke
``tick()`` periodically so idle hiding can take effect without a sample.
"""

import time
from dataclasses import replace
from typing import Callable, Optional

from document_reader.config import ScrubConfig
from document_reader.logger import get_logger
from document_reader.models import ReadingState, ScrollCommand, ScrubVisibility

logger = get_logger(__name__)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def scroll_range(content_height: float, viewport_height: float, overscroll: float) -> float:
    return max(1.0, content_height - viewport_height + overscroll)


def progress_fraction(
    scroll_offset: float,
    content_height: float,
    viewport_height: float,
    overscroll: float = 200.0,
) -> float:
    """Fraction of the document scrolled past, clamped to [0, 1]."""
    return clamp(scroll_offset / scroll_range(content_height, viewport_height, overscroll), 0.0, 1.0)


class ReadingProgressTracker:
    """Tracks scroll position and drives scrub-control visibility.

    States are HIDDEN and VISIBLE. A scroll sample past ``show_after_offset``
    on content that overflows the viewport by ``min_overflow`` shows the
    control; ``idle_hide_ms`` without samples hides it again. A drag holds it
    visible and releasing the drag arms a ``post_drag_hide_ms`` timer.
    """

    def __init__(
        self,
        document_id: str,
        config: Optional[ScrubConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or ScrubConfig()
        self._clock = clock
        self._state = ReadingState(document_id=document_id)
        self._hide_deadline: Optional[float] = None
        self._has_sample = False

    @property
    def state(self) -> ReadingState:
        return self._state

    @property
    def visible(self) -> bool:
        return self._state.visibility is ScrubVisibility.VISIBLE

    @property
    def max_scroll(self) -> float:
        s = self._state
        return s.content_height - s.viewport_height + self.config.overscroll_allowance

    def _now(self, now: Optional[float]) -> float:
        return self._clock() if now is None else now

    def _arm_hide_timer(self, now: float, delay_ms: int) -> None:
        self._hide_deadline = now + delay_ms / 1000.0

    def on_scroll(
        self,
        scroll_offset: float,
        content_height: float,
        viewport_height: float,
        now: Optional[float] = None,
    ) -> ReadingState:
        """Apply one scroll sample."""
        now = self._now(now)
        s = self._state
        cfg = self.config

        stored_height = s.content_height
        if not self._has_sample or abs(content_height - stored_height) > cfg.height_coalesce_delta:
            stored_height = content_height
        self._has_sample = True

        updates = dict(
            scroll_offset=scroll_offset,
            content_height=stored_height,
            viewport_height=viewport_height,
        )

        if s.dragging:
            # Drag owns progress until release
            self._state = replace(s, **updates)
            return self._state

        updates["progress_fraction"] = progress_fraction(
            scroll_offset, stored_height, viewport_height, cfg.overscroll_allowance
        )
        should_show = (
            scroll_offset > cfg.show_after_offset
            and content_height > viewport_height + cfg.min_overflow
        )
        if should_show and not self.visible:
            updates["visibility"] = ScrubVisibility.VISIBLE
            logger.debug("Scrub control shown", extra_data={"scroll_offset": scroll_offset})

        self._state = replace(s, **updates)
        self._arm_hide_timer(now, cfg.idle_hide_ms)
        return self._state

    def tick(self, now: Optional[float] = None) -> ReadingState:
        """Hide the control if its idle timer expired."""
        now = self._now(now)
        if (
            self.visible
            and not self._state.dragging
            and self._hide_deadline is not None
            and now >= self._hide_deadline
        ):
            self._state = replace(self._state, visibility=ScrubVisibility.HIDDEN)
            self._hide_deadline = None
            logger.debug("Scrub control hidden after idle")
        return self._state

    def begin_drag(self) -> ReadingState:
        self._hide_deadline = None
        self._state = replace(self._state, dragging=True, visibility=ScrubVisibility.VISIBLE)
        return self._state

    def drag_to(self, position: float, track_length: float) -> ScrollCommand:
        """Map a drag position on the track to an immediate scroll command."""
        if not self._state.dragging:
            self.begin_drag()
        fraction = clamp(position / track_length, 0.0, 1.0) if track_length > 0 else 0.0
        s = self._state
        target = fraction * scroll_range(s.content_height, s.viewport_height, self.config.overscroll_allowance)
        self._state = replace(s, progress_fraction=fraction)
        return ScrollCommand(offset=max(0.0, target), animated=False)

    def end_drag(self, velocity: float = 0.0, now: Optional[float] = None) -> Optional[ScrollCommand]:
        """Release the drag; returns an animated momentum step for fast flicks."""
        now = self._now(now)
        self._state = replace(self._state, dragging=False)
        self._arm_hide_timer(now, self.config.post_drag_hide_ms)

        if abs(velocity) <= self.config.momentum_threshold:
            return None
        target = clamp(
            self._state.scroll_offset + velocity * -self.config.momentum_damping,
            0.0,
            max(0.0, self.max_scroll),
        )
        logger.debug(
            "Momentum scroll after drag",
            extra_data={"velocity": velocity, "target": target},
        )
        return ScrollCommand(offset=target, animated=True)

    def restore(self, scroll_offset: float) -> ScrollCommand:
        """Command that returns the viewport to a saved position."""
        return ScrollCommand(offset=max(0.0, scroll_offset), animated=False)
