"""TimelinePlayer - playback cursor over a standalone timeline."""

from __future__ import annotations

from enum import Enum, auto
from typing import Any, Callable

from tweenline.timeline import MergedTimeline, Timeline
from tweenline.values import FieldSet, Values


class PlayerState(Enum):
    """Player lifecycle state."""

    RUNNING = auto()
    PAUSED = auto()
    COMPLETED = auto()
    KILLED = auto()


class TimelinePlayer:
    """
    Owns the elapsed time of one timeline playback.

    The timeline itself is immutable and may be shared; every player keeps
    its own clock. When a target is given, each update writes the current
    values into it through fields (plain attributes named after the timeline
    fields by default).

    With from_current=True the target's values at the first update replace
    the timeline's offset-0 values, so the animation starts wherever the
    target currently is.

    Usage:
        player = TimelinePlayer(fade_in, target=sprite)
        player.on_complete(lambda: print("Done!"))

        # In game loop
        player.update(dt)
    """

    def __init__(
        self,
        timeline: Timeline | MergedTimeline,
        target: Any = None,
        fields: FieldSet | None = None,
        from_current: bool = False,
    ):
        self.timeline = timeline
        self.target = target
        if fields is None and target is not None:
            fields = FieldSet.attributes(*sorted(timeline.fields))
        self.fields = fields
        self.from_current = from_current

        self._elapsed: float = 0.0
        self._state: PlayerState = PlayerState.RUNNING
        self._start: Values | None = None
        self._values: Values = timeline.value_at(0.0)
        self._on_complete: Callable[[], None] | None = None
        self._on_update: Callable[[Values], None] | None = None

    @property
    def state(self) -> PlayerState:
        return self._state

    @property
    def is_alive(self) -> bool:
        """True if player is running or paused."""
        return self._state in (PlayerState.RUNNING, PlayerState.PAUSED)

    @property
    def is_complete(self) -> bool:
        return self._state == PlayerState.COMPLETED

    @property
    def elapsed(self) -> float:
        return self._elapsed

    @property
    def values(self) -> Values:
        """Values computed by the last update."""
        return self._values

    def pause(self) -> "TimelinePlayer":
        if self._state == PlayerState.RUNNING:
            self._state = PlayerState.PAUSED
        return self

    def resume(self) -> "TimelinePlayer":
        if self._state == PlayerState.PAUSED:
            self._state = PlayerState.RUNNING
        return self

    def kill(self) -> "TimelinePlayer":
        """Stop immediately without completing."""
        self._state = PlayerState.KILLED
        return self

    def restart(self) -> "TimelinePlayer":
        """Rewind to the beginning and run again."""
        self._elapsed = 0.0
        self._start = None
        self._state = PlayerState.RUNNING
        self._values = self.timeline.value_at(0.0)
        return self

    def on_complete(self, callback: Callable[[], None]) -> "TimelinePlayer":
        self._on_complete = callback
        return self

    def on_update(self, callback: Callable[[Values], None]) -> "TimelinePlayer":
        """Set callback invoked on each update with the current values."""
        self._on_update = callback
        return self

    def update(self, dt: float) -> bool:
        """
        Advance playback by dt seconds.

        Returns:
            True if player is still alive, False if completed or killed.
        """
        if dt < 0:
            raise ValueError(f"TimelinePlayer cannot update backwards (dt={dt})")
        if self._state != PlayerState.RUNNING:
            return self._state == PlayerState.PAUSED

        if self._start is None and self.from_current and self.target is not None:
            self._start = self.fields.capture(self.target).only(self.timeline.fields)

        self._elapsed += dt
        self._values = self.timeline.value_at(self._elapsed, self._start)

        if self.target is not None:
            self.fields.apply(self.target, self._values)

        if self._on_update is not None:
            self._on_update(self._values)

        if self.timeline.is_finished(self._elapsed):
            self._state = PlayerState.COMPLETED
            if self._on_complete is not None:
                self._on_complete()
            return False

        return True
