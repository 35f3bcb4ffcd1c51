#!/usr/bin/env python3
"""
Tests for the reminder ladder scheduler.

Covers:
1. Ladder tiers - only tiers not later than the due date distance fire
2. Past tiers are skipped - fire instants must be in the future
3. Overdue - a single reminder for the next morning
4. Idempotence - every run starts by cancelling the item's old jobs
5. History - one record per scheduled job
"""

import pytest
from datetime import datetime, timedelta

from console_maint import (
    Accessory,
    Console,
    DispatcherError,
    NotificationHistory,
    ReminderScheduler,
    format_date,
    parse_date,
)

from conftest import MemoryDispatcher

NOW = parse_date("15/06/2024")  # noon


@pytest.fixture
def history(kv):
    return NotificationHistory(kv)


@pytest.fixture
def scheduler(dispatcher, history):
    return ReminderScheduler(dispatcher, history)


def console_due(days: int, id="snes") -> Console:
    return Console(
        "SNES",
        id=id,
        next_maintenance_date=format_date(NOW + timedelta(days=days)),
    )


class TestLadder:
    """Tests for which tiers are scheduled."""

    def test_end_to_end_sixteen_days_out(self, scheduler, dispatcher, history):
        """Last 01/01/2024 + 6 months = 01/07/2024, 16 days away: 5 jobs."""
        item = Console(
            "SNES",
            id="snes",
            last_maintenance_date="01/01/2024",
            maintenance_interval_months=6,
            next_maintenance_date="01/07/2024",
        )
        job_ids = scheduler.schedule(item, NOW)

        assert len(job_ids) == 5
        assert len(dispatcher.jobs) == 5
        assert len(history.all()) == 5
        fire_times = [dispatcher.jobs[j].fires_at for j in job_ids]
        assert fire_times == [
            datetime(2024, 6, 17, 9, 0),
            datetime(2024, 6, 24, 9, 0),
            datetime(2024, 6, 28, 9, 0),
            datetime(2024, 6, 30, 9, 0),
            datetime(2024, 7, 1, 9, 0),
        ]
        assert [dispatcher.jobs[j].payload["tier"] for j in job_ids] == [14, 7, 3, 1, 0]

    def test_all_tiers_when_far_out(self, scheduler):
        assert len(scheduler.schedule(console_due(40), NOW)) == 6

    def test_thirty_days_out_includes_first_tier(self, scheduler, dispatcher):
        early = datetime(2024, 6, 15, 8, 0)
        job_ids = scheduler.schedule(console_due(30), early)
        assert len(job_ids) == 6
        assert dispatcher.jobs[job_ids[0]].fires_at == datetime(2024, 6, 15, 9, 0)

    def test_first_tier_already_past_today(self, scheduler):
        """At noon the 30-day reminder slot (09:00 today) has gone."""
        assert len(scheduler.schedule(console_due(30), NOW)) == 5

    def test_due_today_before_nine(self, scheduler, dispatcher):
        early = datetime(2024, 6, 15, 8, 0)
        job_ids = scheduler.schedule(console_due(0), early)
        assert len(job_ids) == 1
        assert dispatcher.jobs[job_ids[0]].fires_at == datetime(2024, 6, 15, 9, 0)

    def test_due_today_after_nine_schedules_nothing(self, scheduler):
        assert scheduler.schedule(console_due(0), NOW) == []

    def test_no_next_date_schedules_nothing(self, scheduler, dispatcher):
        item = Console("NES", id="nes")
        assert scheduler.schedule(item, NOW) == []
        assert dispatcher.jobs == {}

    def test_custom_reminder_hour(self, dispatcher, history):
        scheduler = ReminderScheduler(dispatcher, history, reminder_hour=18)
        job_ids = scheduler.schedule(console_due(1), NOW)
        assert [dispatcher.jobs[j].fires_at.hour for j in job_ids] == [18, 18]


class TestReminderText:
    """Tests for tier wording and payloads."""

    def test_titles_soften_with_lead_time(self, scheduler, dispatcher):
        job_ids = scheduler.schedule(console_due(40), NOW)
        titles = [dispatcher.jobs[j].payload["title"] for j in job_ids]
        assert titles == [
            "Maintenance reminder",
            "Maintenance reminder",
            "Maintenance reminder",
            "Maintenance coming up",
            "Maintenance tomorrow",
            "Maintenance today",
        ]

    def test_payload_links_back_to_item(self, scheduler, dispatcher):
        """Before 09:00 the three-day tier is still ahead and fires first."""
        morning = NOW.replace(hour=8)
        pad = Accessory(
            "Pad", subtype="controller", id="pad",
            next_maintenance_date=format_date(NOW + timedelta(days=3)),
        )
        job_id = scheduler.schedule(pad, morning)[0]
        payload = dispatcher.jobs[job_id].payload
        assert payload["tier"] == 3
        assert payload["itemId"] == "pad"
        assert payload["itemType"] == "accessory"
        assert payload["maintenanceDate"] == pad.next_maintenance_date
        assert "Pad" in payload["body"]
        assert "3 days" in payload["body"]


class TestOverdue:
    """Tests for items already past their due date."""

    def test_single_overdue_reminder_next_morning(self, scheduler, dispatcher):
        job_ids = scheduler.schedule(console_due(-3), NOW)
        assert len(job_ids) == 1
        job = dispatcher.jobs[job_ids[0]]
        assert job.fires_at == datetime(2024, 6, 16, 9, 0)
        assert job.payload["type"] == "maintenance_overdue"
        assert job.payload["tier"] is None
        assert "3 days overdue" in job.payload["body"]

    def test_one_day_overdue_wording(self, scheduler, dispatcher):
        job_id = scheduler.schedule(console_due(-1), NOW)[0]
        assert "1 day overdue" in dispatcher.jobs[job_id].payload["body"]

    def test_overdue_recorded_in_history(self, scheduler, history):
        scheduler.schedule(console_due(-3), NOW)
        assert history.all()[0].title == "Maintenance overdue"


class TestIdempotence:
    """Tests for cancel-then-schedule behavior."""

    def test_second_run_replaces_first(self, scheduler, dispatcher):
        item = console_due(16)
        first = scheduler.schedule(item, NOW)
        second = scheduler.schedule(item, NOW)
        assert len(dispatcher.jobs) == len(first) == len(second) == 5
        assert set(dispatcher.jobs) == set(second)

    def test_changed_due_date_drops_old_jobs(self, scheduler, dispatcher):
        scheduler.schedule(console_due(40), NOW)
        scheduler.schedule(console_due(2), NOW)
        assert len(dispatcher.jobs) == 2
        assert all(
            j.payload["maintenanceDate"] == console_due(2).next_maintenance_date
            for j in dispatcher.jobs.values()
        )

    def test_other_items_untouched(self, scheduler, dispatcher):
        scheduler.schedule(console_due(40, id="a"), NOW)
        scheduler.schedule(console_due(40, id="b"), NOW)
        scheduler.cancel("a")
        assert {j.item_id for j in dispatcher.jobs.values()} == {"b"}

    def test_removing_date_cancels(self, scheduler, dispatcher):
        item = console_due(10)
        scheduler.schedule(item, NOW)
        item.next_maintenance_date = None
        assert scheduler.schedule(item, NOW) == []
        assert dispatcher.jobs == {}

    def test_cancel_with_nothing_scheduled(self, scheduler):
        assert scheduler.cancel("ghost") == 0


class TestHistoryRecords:
    """Tests for the history written while scheduling."""

    def test_record_per_job_newest_first(self, scheduler, history):
        job_ids = scheduler.schedule(console_due(16), NOW)
        records = history.all()
        assert [r.id for r in records] == list(reversed(job_ids))
        assert all(not r.read for r in records)
        assert all(r.item_id == "snes" and r.item_type == "console" for r in records)
        assert records[0].created_at == NOW.isoformat(timespec="seconds")


class TestDispatcherFailure:
    """Tests for dispatcher errors."""

    def test_error_propagates_and_stops_ladder(self, history):
        failing = MemoryDispatcher(fail_after=2)
        scheduler = ReminderScheduler(failing, history)
        with pytest.raises(DispatcherError):
            scheduler.schedule(console_due(40), NOW)
        assert len(failing.jobs) == 2
        assert len(history.all()) == 2

    def test_retry_after_failure_leaves_clean_set(self, history):
        failing = MemoryDispatcher(fail_after=2)
        scheduler = ReminderScheduler(failing, history)
        with pytest.raises(DispatcherError):
            scheduler.schedule(console_due(40), NOW)
        failing.fail_after = None
        job_ids = scheduler.schedule(console_due(40), NOW)
        assert set(failing.jobs) == set(job_ids)
        assert len(job_ids) == 6
