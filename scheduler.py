# Filename: scheduler.py

import re
import threading
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import schedule

from models import utc_now
from reports import format_alerts

logger = logging.getLogger("Scheduler")

_EVERY_RE = re.compile(r"^every\s+(\d+)\s+(second|minute|hour|day)s?$")
_DAILY_RE = re.compile(r"^daily\s+at\s+(\d{1,2}:\d{2})$")


@dataclass
class Job:
    name: str
    expression: str            # "every 15 minutes" or "daily at 07:00"
    task: Callable[[], Any]
    enabled: bool = True


def validate_expression(expression: str) -> bool:
    expr = expression.strip().lower()
    match = _EVERY_RE.match(expr)
    if match:
        return int(match.group(1)) > 0
    match = _DAILY_RE.match(expr)
    if match:
        hours, minutes = (int(p) for p in match.group(1).split(":"))
        return hours < 24 and minutes < 60
    return False


def _register(sched: schedule.Scheduler, expression: str, func: Callable) -> schedule.Job:
    if not validate_expression(expression):
        raise ValueError(f"Invalid schedule expression: {expression}")

    expr = expression.strip().lower()
    match = _EVERY_RE.match(expr)
    if match:
        interval, unit = int(match.group(1)), match.group(2)
        return getattr(sched.every(interval), f"{unit}s").do(func)

    at = _DAILY_RE.match(expr).group(1)
    return sched.every().day.at(at.zfill(5)).do(func)


class Scheduler:
    """
    Runs named jobs on their schedules in a background thread.
    A job that is still running when it fires again is skipped.
    """

    def __init__(self, poll_interval: float = 1.0):
        self.poll_interval = poll_interval
        self._sched = schedule.Scheduler()
        self._jobs: Dict[str, Job] = {}
        self._handles: Dict[str, schedule.Job] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._status: Dict[str, Dict[str, Any]] = {}
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def schedule_job(self, job: Job):
        if job.name in self._handles:
            logger.warning(f"Job {job.name} already scheduled, replacing it")
            self._sched.cancel_job(self._handles.pop(job.name))

        self._jobs[job.name] = job
        self._locks.setdefault(job.name, threading.Lock())
        self._status.setdefault(job.name, {"last_run": None, "last_error": None, "runs": 0, "skipped": 0})

        if not job.enabled:
            if not validate_expression(job.expression):
                raise ValueError(f"Invalid schedule expression: {job.expression}")
            logger.info(f"Registered disabled job: {job.name}")
            return

        self._handles[job.name] = _register(self._sched, job.expression, lambda name=job.name: self._execute(name))
        logger.info(f"Scheduled job: {job.name} ({job.expression})")

    def _execute(self, name: str, raise_errors: bool = False):
        job = self._jobs[name]
        lock = self._locks[name]
        status = self._status[name]

        if not lock.acquire(blocking=False):
            status["skipped"] += 1
            logger.warning(f"[SKIP] Job {name} is still running, skipping this run")
            return

        try:
            job.task()
            status["last_error"] = None
        except Exception as e:
            logger.error(f"Job {name} failed: {e}")
            status["last_error"] = str(e)
            if raise_errors:
                raise
        finally:
            status["last_run"] = utc_now()
            status["runs"] += 1
            lock.release()

    def run_job_now(self, name: str):
        if name not in self._jobs:
            raise KeyError(f"Unknown job: {name}")
        logger.info(f"Running job immediately: {name}")
        self._execute(name, raise_errors=True)

    def run_pending(self):
        self._sched.run_pending()

    def _loop(self):
        while not self._stop_event.is_set():
            self._sched.run_pending()
            self._stop_event.wait(self.poll_interval)

    def start(self):
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="scheduler", daemon=True)
        self._thread.start()
        logger.info(f"✅ Scheduler running with {len(self._handles)} jobs")

    def stop(self):
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=self.poll_interval * 2)
        for name in list(self._handles):
            self._sched.cancel_job(self._handles.pop(name))
            logger.info(f"Stopped job: {name}")

    def get_job_status(self) -> Dict[str, Dict[str, Any]]:
        return {name: dict(status) for name, status in self._status.items()}

    def job_names(self) -> List[str]:
        return list(self._jobs)


def default_jobs(agent, config: Dict[str, Any], notifier=None) -> List[Job]:
    def market_snapshot():
        logger.info("Running market snapshot...")
        paths = agent.generate_and_save_report("snapshot")
        logger.info(f"Snapshot complete: {', '.join(paths)}")

    def daily_report():
        logger.info("Running daily report...")
        paths = agent.generate_and_save_report("daily")
        logger.info(f"Daily report complete: {', '.join(paths)}")

    def alert_check():
        logger.info("Checking alerts...")
        alerts = agent.check_alerts()
        if alerts:
            logger.warning(f"Found {len(alerts)} alerts!")
            print(format_alerts(alerts))
            if notifier:
                notifier.send_alerts(alerts)

    return [
        Job("market-snapshot", config.get("SNAPSHOT_SCHEDULE", "every 6 hours"), market_snapshot),
        Job("daily-report", config.get("REPORT_SCHEDULE", "daily at 07:00"), daily_report),
        Job("alert-check", config.get("ALERT_SCHEDULE", "every 15 minutes"), alert_check),
    ]
