"""
Wall-clock source for the time and date widgets.
"""
import logging
import time
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.timers import Scheduler, TimerHandle, loop_scheduler

logger = logging.getLogger(__name__)


class WidgetClock:
    """
    ``now`` stays None until mount. Ticks land on whole seconds: each tick is
    scheduled for the next second boundary rather than a fixed period after
    the previous one, so the display never drifts from the wall clock.
    """

    def __init__(
        self,
        on_tick: Callable[[datetime], None],
        timezone: str = 'UTC',
        locale: str = 'en_US',
        time_source: Callable[[], float] = time.time,
        schedule: Scheduler = loop_scheduler,
    ):
        self.on_tick = on_tick
        self.locale = locale
        self._time = time_source
        self._schedule = schedule
        self._zone = self._resolve(timezone)
        self.now: Optional[datetime] = None
        self.mounted = False
        self._timer: Optional[TimerHandle] = None

    @staticmethod
    def _resolve(timezone: str) -> ZoneInfo:
        try:
            return ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone %r, using UTC", timezone)
            return ZoneInfo('UTC')

    @property
    def timezone(self) -> str:
        return self._zone.key

    def delay_to_next_second(self) -> float:
        ms = int(self._time() * 1000) % 1000
        return (1000 - ms) / 1000

    def mount(self) -> None:
        self.mounted = True
        self.refresh()
        self._schedule_tick()

    def unmount(self) -> None:
        self.mounted = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule_tick(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._schedule(self.delay_to_next_second(), self._tick)

    def _tick(self) -> None:
        self._timer = None
        if not self.mounted:
            return
        self.refresh()
        self._schedule_tick()

    def refresh(self) -> None:
        if not self.mounted:
            return
        self.now = datetime.fromtimestamp(self._time(), self._zone)
        self.on_tick(self.now)

    def set_locale(self, locale: str) -> None:
        self.locale = locale
        self.refresh()

    def set_timezone(self, timezone: str) -> None:
        self._zone = self._resolve(timezone)
        self.refresh()

    def time_label(self) -> str:
        return self.now.strftime('%H:%M') if self.now else '--:--'

    def date_label(self) -> str:
        return self.now.strftime('%a, %b %d') if self.now else ''
