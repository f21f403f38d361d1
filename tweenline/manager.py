"""AnimationManager - updates timeline players and bound animators."""

from __future__ import annotations

from typing import Any, Union

from tweenline import log
from tweenline.animator import Animator
from tweenline.player import TimelinePlayer
from tweenline.timeline import MergedTimeline, Timeline
from tweenline.values import FieldSet


class AnimatorBinding:
    """Animator whose values are written into a target object on every update."""

    def __init__(self, animator: Animator, target: Any, fields: FieldSet | None = None):
        self.animator = animator
        self.target = target
        self.fields = fields if fields is not None else FieldSet.attributes(*animator.fields)
        self._paused = False

    def set_state(self, state) -> None:
        """Forward to the animator and write the (unchanged) start values back."""
        self.animator.set_state(state)
        self.fields.apply(self.target, self.animator.value())

    def pause(self) -> "AnimatorBinding":
        self._paused = True
        return self

    def resume(self) -> "AnimatorBinding":
        self._paused = False
        return self

    def update(self, dt: float) -> bool:
        """Tick and apply. Bindings stay alive until removed."""
        if self._paused:
            return True
        was_idle = self.animator.is_idle
        self.animator.tick(dt)
        if not was_idle:
            self.fields.apply(self.target, self.animator.value())
        return True


Playable = Union[TimelinePlayer, AnimatorBinding]


class AnimationManager:
    """
    Keeps active players and animator bindings and advances them together.

    The manager never schedules itself: call update(dt) from the host loop.

    Usage:
        animations = AnimationManager()

        animations.play(fade_in, target=sprite).on_complete(lambda: print("Shown"))
        button = animations.bind(button_animator, widget)
        button.set_state(Button.HOVER)

        # In game loop
        animations.update(dt)
    """

    def __init__(self):
        self._items: list[Playable] = []

    def update(self, dt: float) -> None:
        """Update everything once. Drops completed/killed players."""
        alive = []
        for item in self._items:
            if item.update(dt):
                alive.append(item)
        self._items = alive

    def add(self, item: Playable) -> Playable:
        """Add a custom player or binding."""
        self._items.append(item)
        return item

    def play(
        self,
        timeline: Timeline | MergedTimeline,
        target: Any = None,
        fields: FieldSet | None = None,
        from_current: bool = False,
    ) -> TimelinePlayer:
        """Start playing timeline, optionally writing values into target."""
        player = TimelinePlayer(timeline, target, fields, from_current)
        self._items.append(player)
        return player

    def bind(self, animator: Animator, target: Any, fields: FieldSet | None = None) -> AnimatorBinding:
        """Attach animator to target; its values are applied on every update."""
        binding = AnimatorBinding(animator, target, fields)
        binding.fields.apply(target, animator.value())
        self._items.append(binding)
        return binding

    def remove(self, item: Playable) -> bool:
        """Stop managing item. Returns False if it was not managed."""
        if item in self._items:
            self._items.remove(item)
            return True
        return False

    def kill_all(self, target: Any = None) -> int:
        """
        Kill players, optionally only those writing into target.

        Returns:
            Number of killed players.
        """
        killed = 0
        for item in self._items:
            if not isinstance(item, TimelinePlayer):
                continue
            if target is None or item.target is target:
                item.kill()
                killed += 1
        if killed:
            log.debug(f"[AnimationManager] Killed {killed} player(s)")
        return killed

    def pause_all(self, target: Any = None) -> int:
        """Pause players and bindings, optionally filtered by target."""
        paused = 0
        for item in self._items:
            if target is None or item.target is target:
                item.pause()
                paused += 1
        return paused

    def resume_all(self, target: Any = None) -> int:
        """Resume paused players and bindings, optionally filtered by target."""
        resumed = 0
        for item in self._items:
            if target is None or item.target is target:
                item.resume()
                resumed += 1
        return resumed

    @property
    def count(self) -> int:
        """Number of managed players and bindings."""
        return len(self._items)

    def clear(self) -> None:
        """Remove everything without calling callbacks."""
        for item in self._items:
            if isinstance(item, TimelinePlayer):
                item.kill()
        self._items.clear()
