from unittest.mock import MagicMock

import pytest

from models import AlertEvent, utc_now
from scheduler import Job, Scheduler, default_jobs, validate_expression


@pytest.mark.parametrize("expression", [
    "every 15 minutes", "every 1 minute", "every 6 hours", "Every 30 Seconds", "daily at 07:00", "daily at 7:30",
])
def test_valid_expressions(expression):
    assert validate_expression(expression)


@pytest.mark.parametrize("expression", ["*/15 * * * *", "every 0 minutes", "daily at 25:00", "hourly", ""])
def test_invalid_expressions(expression):
    assert not validate_expression(expression)


def test_invalid_expression_rejected_on_schedule():
    with pytest.raises(ValueError):
        Scheduler().schedule_job(Job("bad", "*/5 * * * *", lambda: None))


def test_run_job_now_records_status():
    task = MagicMock()
    scheduler = Scheduler()
    scheduler.schedule_job(Job("snap", "every 6 hours", task))

    scheduler.run_job_now("snap")

    task.assert_called_once()
    status = scheduler.get_job_status()["snap"]
    assert status["runs"] == 1
    assert status["last_error"] is None
    assert status["last_run"] is not None


def test_unknown_job():
    with pytest.raises(KeyError):
        Scheduler().run_job_now("missing")


def test_failure_is_recorded_and_reraised_on_manual_run():
    scheduler = Scheduler()
    scheduler.schedule_job(Job("boom", "every 1 minute", MagicMock(side_effect=RuntimeError("fetch failed"))))

    with pytest.raises(RuntimeError):
        scheduler.run_job_now("boom")

    assert scheduler.get_job_status()["boom"]["last_error"] == "fetch failed"


def test_scheduled_failure_does_not_stop_schedule():
    scheduler = Scheduler()
    scheduler.schedule_job(Job("boom", "every 1 minute", MagicMock(side_effect=RuntimeError("x"))))

    # Scheduled runs log the error, record it and keep the schedule alive
    scheduler._execute("boom")
    scheduler._execute("boom")

    status = scheduler.get_job_status()["boom"]
    assert status["runs"] == 2
    assert status["last_error"] == "x"


def test_overlapping_run_is_skipped():
    scheduler = Scheduler()
    calls = []

    def task():
        calls.append(1)
        scheduler.run_job_now("alert-check")

    scheduler.schedule_job(Job("alert-check", "every 15 minutes", task))
    scheduler.run_job_now("alert-check")

    assert calls == [1]
    assert scheduler.get_job_status()["alert-check"]["skipped"] == 1
    assert scheduler.get_job_status()["alert-check"]["runs"] == 1


def test_rescheduling_replaces_job():
    first, second = MagicMock(), MagicMock()
    scheduler = Scheduler()
    scheduler.schedule_job(Job("snap", "every 6 hours", first))
    scheduler.schedule_job(Job("snap", "every 1 hour", second))

    scheduler.run_job_now("snap")

    first.assert_not_called()
    second.assert_called_once()
    assert len(scheduler._sched.get_jobs()) == 1


def test_disabled_job_is_not_scheduled_but_can_run():
    task = MagicMock()
    scheduler = Scheduler()
    scheduler.schedule_job(Job("snap", "every 6 hours", task, enabled=False))

    assert scheduler._sched.get_jobs() == []
    scheduler.run_job_now("snap")
    task.assert_called_once()


def test_start_and_stop():
    scheduler = Scheduler(poll_interval=0.01)
    scheduler.schedule_job(Job("snap", "every 6 hours", MagicMock()))

    scheduler.start()
    scheduler.stop()

    assert scheduler._sched.get_jobs() == []


def test_default_jobs_wiring(capsys):
    alert = AlertEvent(type="price_surge", symbol="ETH", message="ETH surged", value=6.2,
                       threshold=5, timestamp=utc_now(), severity="low")
    agent = MagicMock()
    agent.check_alerts.return_value = [alert]
    agent.generate_and_save_report.return_value = ["/tmp/report.md"]
    notifier = MagicMock()

    jobs = {job.name: job for job in default_jobs(agent, {"ALERT_SCHEDULE": "every 5 minutes"}, notifier)}

    assert set(jobs) == {"market-snapshot", "daily-report", "alert-check"}
    assert jobs["alert-check"].expression == "every 5 minutes"
    assert jobs["daily-report"].expression == "daily at 07:00"

    jobs["alert-check"].task()
    notifier.send_alerts.assert_called_once_with([alert])
    assert "**ETH**: +6.20%" in capsys.readouterr().out

    jobs["daily-report"].task()
    agent.generate_and_save_report.assert_called_with("daily")
