"""
Keeps the transcript viewport pinned to new content while a reply streams,
unless the user scrolls away.
"""
import logging
from typing import Callable, Literal, Optional, Protocol

from core.timers import Scheduler, TimerHandle, loop_scheduler

logger = logging.getLogger(__name__)

ScrollState = Literal['dormant', 'auto_following', 'user_overridden']


class Viewport(Protocol):
    def distance_from_bottom(self) -> float: ...

    def scroll_to_bottom(self, animate: bool = True) -> None: ...


class AutoScrollController:
    """
    dormant -> auto_following when the session starts streaming.
    auto_following -> user_overridden on a user scroll that leaves the
    viewport more than ``threshold`` away from the bottom.
    Leaving ``streaming`` always returns to dormant.

    ``programmatic`` is set while one of our own scrolls settles, so the
    scroll events it produces are not taken for the user's.
    """

    def __init__(
        self,
        viewport: Viewport,
        debounce: float = 0.1,
        threshold: float = 100,
        settle: Optional[float] = None,
        schedule: Scheduler = loop_scheduler,
    ):
        self.viewport = viewport
        self.debounce = debounce
        self.threshold = threshold
        self.settle = debounce if settle is None else settle
        self._schedule = schedule

        self.state: ScrollState = 'dormant'
        self.programmatic = False
        self._timers: dict[str, TimerHandle] = {}

    @property
    def show_jump_to_bottom(self) -> bool:
        if self.state == 'auto_following':
            return False
        return self.viewport.distance_from_bottom() > self.threshold

    # -- timers

    def _set_timer(self, name: str, delay: float, callback: Callable[[], None]) -> None:
        self._cancel_timer(name)

        def fire():
            self._timers.pop(name, None)
            callback()
        self._timers[name] = self._schedule(delay, fire)

    def _cancel_timer(self, name: str) -> None:
        handle = self._timers.pop(name, None)
        if handle is not None:
            handle.cancel()

    def _cancel_timers(self) -> None:
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        self.programmatic = False

    # -- scrolling

    def _scroll(self) -> None:
        self.programmatic = True
        self.viewport.scroll_to_bottom(animate=True)
        self._set_timer('settle', self.settle, self._settled)

    def _settled(self) -> None:
        self.programmatic = False

    def _follow(self) -> None:
        if self.state == 'auto_following':
            self._scroll()

    # -- inputs

    def on_status(self, status: str) -> None:
        if status == 'streaming':
            if self.state != 'dormant':
                return
            self.state = 'auto_following'
            self._scroll()
            return

        if self.state == 'dormant':
            return
        following = self.state == 'auto_following'
        self._cancel_timers()
        self.state = 'dormant'
        if following:
            # flush the last debounced scroll so the episode ends at the bottom
            self.viewport.scroll_to_bottom(animate=False)

    def on_content_changed(self) -> None:
        if self.state == 'auto_following':
            self._set_timer('follow', self.debounce, self._follow)

    def on_scroll(self) -> None:
        if self.programmatic or self.state != 'auto_following':
            return
        if self.viewport.distance_from_bottom() > self.threshold:
            logger.debug("User scrolled away; auto-scroll suspended for this reply")
            self.state = 'user_overridden'
            self._cancel_timers()

    def jump_to_bottom(self) -> None:
        """User asked to go back to the newest content; resumes following mid-reply."""
        if self.state == 'user_overridden':
            self.state = 'auto_following'
        self._scroll()

    def teardown(self) -> None:
        self._cancel_timers()
        self.state = 'dormant'
