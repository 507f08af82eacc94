import asyncio
import logging
from datetime import datetime, timedelta, timezone

import pytest
from apscheduler.triggers.combining import OrTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from poem_collector.core import ScheduleError, StoreExecError
from poem_collector.poems.infrastructure.scheduler import (
    PoemScheduler,
    build_trigger,
    expand_weekdays,
    parse_duration,
)


@pytest.mark.parametrize(
    "expression",
    [
        "0 0 */2 * * *",
        "0 30 * * *",
        "0 0 0 1 * *",
        "30 15 8 * * 1-5",
        "0 0 12 ? * SUN",
        "@daily",
        "@hourly",
        "@weekly",
    ],
)
def test_cron_expressions_build_cron_trigger(expression):
    assert isinstance(build_trigger(expression), CronTrigger)


def test_every_builds_interval_trigger():
    trigger = build_trigger("@every 1h30m")

    assert isinstance(trigger, IntervalTrigger)
    assert trigger.interval.total_seconds() == 5400


@pytest.mark.parametrize(
    "expression, seconds",
    [("@every 90s", 90), ("@every 1500ms", 1), ("@every 500ms", 1), ("@every 0s", 1)],
)
def test_every_truncates_to_whole_seconds(expression, seconds):
    assert build_trigger(expression).interval == timedelta(seconds=seconds)


def _fire_times(trigger, count):
    now = datetime.now(timezone.utc)
    fires = [trigger.get_next_fire_time(None, now)]
    while len(fires) < count:
        fires.append(trigger.get_next_fire_time(fires[-1], fires[-1]))
    return now, fires


def test_five_fields_start_with_seconds():
    _, fires = _fire_times(build_trigger("0 30 * * *"), 3)

    assert all(f.second == 0 and f.minute == 30 for f in fires)
    assert fires[1] - fires[0] == timedelta(hours=1)


def test_five_field_step_is_in_seconds():
    _, fires = _fire_times(build_trigger("*/10 * * * *"), 2)

    assert fires[1] - fires[0] == timedelta(seconds=10)


def test_restricted_day_fields_fire_on_either():
    trigger = build_trigger("0 0 0 1 * 1")
    now, fires = _fire_times(trigger, 10)

    assert isinstance(trigger, OrTrigger)
    assert fires[0] - now <= timedelta(days=7)
    assert all(f.day == 1 or f.weekday() == 0 for f in fires)
    assert any(f.day != 1 for f in fires)


def test_unrestricted_day_of_week_keeps_single_cron_trigger():
    _, fires = _fire_times(build_trigger("0 0 0 1 * *"), 3)

    assert all(f.day == 1 for f in fires)


@pytest.mark.parametrize(
    "expression",
    [
        "",
        "   ",
        "not a cron",
        "* * *",
        "0 0 0 0 0 0 0",
        "99 * * * * *",
        "0 0 25 * * *",
        "0 0 0 * * 9",
        "@fortnightly",
        "@every",
        "@every 10 minutes",
        "0 0 0 1 * 9",
    ],
)
def test_invalid_expressions_raise(expression):
    with pytest.raises(ScheduleError):
        build_trigger(expression)


def test_invalid_expression_fails_on_construction():
    calls = []

    with pytest.raises(ScheduleError):
        PoemScheduler("61 * * * * *", lambda: calls.append(1))

    assert calls == []


@pytest.mark.parametrize(
    "field, expected",
    [
        ("*", "*"),
        ("?", "*"),
        ("0", "sun"),
        ("1-5", "mon,tue,wed,thu,fri"),
        ("0,6", "sun,sat"),
        ("0-6/2", "sun,tue,thu,sat"),
        ("5/1", "fri,sat"),
        ("MON,wed", "mon,wed"),
    ],
)
def test_weekdays_count_from_sunday(field, expected):
    assert expand_weekdays(field) == expected


@pytest.mark.parametrize("value, seconds", [("45s", 45), ("1h30m", 5400), ("500ms", 0.5), ("2m", 120)])
def test_parse_duration(value, seconds):
    assert parse_duration(value) == seconds


async def test_failing_run_is_logged_and_returns(caplog):
    async def task():
        raise StoreExecError("Error executing SQL statement: boom", {"table": "t_poem"})

    scheduler = PoemScheduler("@hourly", task)

    with caplog.at_level(logging.ERROR, logger="poem_collector"):
        await scheduler._run_task()

    assert scheduler.failures == 1
    record = next(r for r in caplog.records if r.getMessage() == "Scheduled poem run failed")
    assert record.error_type == "StoreExecError"
    assert record.details == {"table": "t_poem"}


async def test_sync_task_is_supported():
    calls = []
    scheduler = PoemScheduler("@hourly", lambda: calls.append("run"))

    await scheduler._run_task()

    assert calls == ["run"]
    assert scheduler.failures == 0


async def test_next_trigger_fires_after_a_failure():
    attempts = []
    second_run = asyncio.Event()

    async def task():
        attempts.append(len(attempts))
        if len(attempts) == 1:
            raise StoreExecError("simulated broken connection")
        second_run.set()

    scheduler = PoemScheduler("* * * * * *", task)
    await scheduler.start()
    try:
        await asyncio.wait_for(second_run.wait(), timeout=5)
    finally:
        await scheduler.stop()

    assert len(attempts) >= 2
    assert scheduler.failures == 1


async def test_serve_stops_when_event_is_set():
    stop_event = asyncio.Event()
    scheduler = PoemScheduler("@daily", lambda: None)

    serving = asyncio.create_task(scheduler.serve(stop_event))
    await asyncio.sleep(0.05)
    assert scheduler.is_running
    assert scheduler.next_run_time is not None

    stop_event.set()
    await asyncio.wait_for(serving, timeout=2)

    assert not scheduler.is_running


async def test_start_twice_keeps_one_scheduler():
    scheduler = PoemScheduler("@daily", lambda: None)
    await scheduler.start()
    first = scheduler._scheduler
    await scheduler.start()

    assert scheduler._scheduler is first
    await scheduler.stop()
