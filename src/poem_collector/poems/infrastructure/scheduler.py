"""
Poem Scheduler
==============

Wrapper for APScheduler running the collection task on a cron schedule.

Accepted expressions:
- six fields: ``second minute hour day month day_of_week``
- five fields: ``second minute hour day month``, any day of week
- descriptors: ``@yearly``, ``@annually``, ``@monthly``, ``@weekly``,
  ``@daily``, ``@midnight``, ``@hourly``
- ``@every <duration>`` with durations such as ``1h30m`` or ``45s``; the
  interval is truncated to whole seconds, with a minimum of one second

Day-of-week numbers run from 0 (Sunday) to 6 (Saturday); ``?`` is accepted
as ``*`` in the day fields. When both day fields are restricted, a day
matching either of them fires.
"""

import asyncio
import inspect
import re
from typing import Any, Callable, List, Optional, Set

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.combining import OrTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from poem_collector.core import ScheduleError
from poem_collector.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

JOB_ID = "poem_collection"

DESCRIPTORS = {
    "@yearly": "0 0 0 1 1 *",
    "@annually": "0 0 0 1 1 *",
    "@monthly": "0 0 0 1 * *",
    "@weekly": "0 0 0 * * 0",
    "@daily": "0 0 0 * * *",
    "@midnight": "0 0 0 * * *",
    "@hourly": "0 0 * * * *",
}

# Index is the cron day-of-week number (0 = Sunday)
WEEKDAYS = ["sun", "mon", "tue", "wed", "thu", "fri", "sat"]

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


def parse_duration(value: str) -> float:
    """
    Parse a duration such as ``1h30m`` or ``90s`` into seconds.

    Raises:
        ValueError: If the string is not a duration
    """
    text = value.strip()
    if not text:
        raise ValueError("empty duration")

    position = 0
    seconds = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    if position != len(text):
        raise ValueError(f"invalid duration {value!r}")
    return seconds


def _weekday_number(token: str) -> int:
    token = token.strip().lower()
    if token.isdigit():
        number = int(token)
        if not 0 <= number <= 6:
            raise ValueError(f"day of week out of range: {token}")
        return number
    if token in WEEKDAYS:
        return WEEKDAYS.index(token)
    raise ValueError(f"invalid day of week: {token!r}")


def expand_weekdays(field: str) -> str:
    """
    Translate a day-of-week field (0 = Sunday) into weekday names.

    ``"1-5"`` becomes ``"mon,tue,wed,thu,fri"``; ``"*"`` and ``"?"`` stay
    ``"*"``.
    """
    if field in ("*", "?"):
        return "*"

    days: Set[int] = set()
    for part in field.split(","):
        span, slash, step_text = part.partition("/")
        step = int(step_text) if slash else 1
        if step < 1:
            raise ValueError(f"invalid step in {part!r}")

        if span in ("*", "?"):
            start, end = 0, 6
        elif "-" in span:
            first, last = span.split("-", 1)
            start, end = _weekday_number(first), _weekday_number(last)
        else:
            start = _weekday_number(span)
            end = 6 if slash else start

        if start > end:
            raise ValueError(f"invalid range {part!r}")
        days.update(range(start, end + 1, step))

    return ",".join(WEEKDAYS[day] for day in sorted(days))


def build_trigger(expression: str) -> BaseTrigger:
    """
    Build an APScheduler trigger from a schedule expression.

    Raises:
        ScheduleError: If the expression is malformed
    """
    text = (expression or "").strip()
    if not text:
        raise ScheduleError(expression, "empty expression")

    if text.startswith("@every"):
        try:
            seconds = parse_duration(text[len("@every"):])
        except ValueError as e:
            raise ScheduleError(expression, str(e)) from e
        return IntervalTrigger(seconds=max(1, int(seconds)))

    if text.startswith("@"):
        if text not in DESCRIPTORS:
            raise ScheduleError(expression, f"unknown descriptor {text}")
        text = DESCRIPTORS[text]

    fields: List[str] = text.split()
    if len(fields) == 5:
        fields.append("*")
    if len(fields) != 6:
        raise ScheduleError(expression, f"expected 5 or 6 fields, found {len(fields)}")

    second, minute, hour, day, month, day_of_week = fields
    times = {"second": second, "minute": minute, "hour": hour, "month": month}
    try:
        weekdays = expand_weekdays(day_of_week)
        if day in ("*", "?") or weekdays == "*":
            return CronTrigger(
                day="*" if day == "?" else day,
                day_of_week=weekdays,
                **times,
            )
        return OrTrigger([
            CronTrigger(day=day, **times),
            CronTrigger(day_of_week=weekdays, **times),
        ])
    except (ValueError, TypeError) as e:
        raise ScheduleError(expression, str(e)) from e


class PoemScheduler:
    """
    Runs a zero-argument task at every trigger of a schedule expression.

    The expression is validated on construction. A failing run is logged and
    the next trigger still fires. Runs never overlap: a trigger that fires
    while the previous run is still executing is skipped.
    """

    def __init__(self, expression: str, task: Callable[[], Any]):
        self.expression = expression
        self._trigger = build_trigger(expression)
        self._task = task
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._running = False
        self.failures = 0

    async def _run_task(self) -> None:
        """Run the task once; errors are logged, never raised."""
        try:
            result = self._task()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self.failures += 1
            logger.exception(
                "Scheduled poem run failed",
                extra={
                    "job_id": JOB_ID,
                    "error_type": type(e).__name__,
                    "details": getattr(e, "details", {}),
                }
            )

    async def start(self) -> None:
        """Start the scheduler on the running event loop."""
        if self._running:
            logger.warning("Poem scheduler already running")
            return

        self._scheduler = AsyncIOScheduler(event_loop=asyncio.get_running_loop())

        self._scheduler.add_job(
            self._run_task,
            self._trigger,
            id=JOB_ID,
            name="Poem Collection Job",
            misfire_grace_time=60,
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

        self._scheduler.start()
        self._running = True

        logger.info(
            "Poem scheduler started",
            extra={"schedule": self.expression, "next_run": self.next_run_time}
        )

    async def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if not self._running:
            return

        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None

        self._running = False
        logger.info("Poem scheduler stopped")

    async def serve(self, stop_event: asyncio.Event) -> None:
        """Run until ``stop_event`` is set, then stop."""
        await self.start()
        try:
            await stop_event.wait()
        finally:
            await self.stop()

    @property
    def next_run_time(self) -> Optional[str]:
        """Next fire time as ISO string, if scheduled."""
        if self._scheduler is None:
            return None
        job = self._scheduler.get_job(JOB_ID)
        if job is None or job.next_run_time is None:
            return None
        return job.next_run_time.isoformat()

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._running
