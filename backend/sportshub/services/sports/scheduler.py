import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from sportshub import socketio
from .poller import POLL_DAILY, POLL_LIVE


def seconds_until_hour(hour: int, now: Optional[datetime] = None) -> float:
    """Seconds from ``now`` until the next local ``hour``:00."""
    now = now or datetime.now()
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


def start_repeating_task(app, name: str, job: Callable[[], object], next_delay: Callable[[], float],
                         stop: threading.Event) -> None:
    """Run ``job`` inside an app context after every ``next_delay()`` seconds until ``stop`` is set.

    The job runs on a Socket.IO background task so it cooperates with
    whichever async mode the server was started in. Failures are logged and
    the loop keeps going.
    """

    def _worker():
        while not stop.is_set():
            delay = max(0.0, float(next_delay()))
            app.logger.info(f"[timer-set] task={name} delay={delay:.0f}s")
            slept = 0.0
            while slept < delay and not stop.is_set():
                step = min(1.0, delay - slept)
                socketio.sleep(step)
                slept += step
            if stop.is_set():
                break
            with app.app_context():
                try:
                    job()
                except Exception as exc:
                    app.logger.error(f"[timer-fail] task={name} error={exc}")
        app.logger.info(f"[timer-stop] task={name}")

    socketio.start_background_task(_worker)


def start_live_polling(app, poller, interval_sec: int, stop: threading.Event) -> None:
    start_repeating_task(app, f"live-poll:{poller.sport_id}", lambda: poller.run(POLL_LIVE), lambda: interval_sec, stop)


def start_daily_fetch(app, poller, hour: int, stop: threading.Event) -> None:
    start_repeating_task(app, f"daily-fetch:{poller.sport_id}", lambda: poller.run(POLL_DAILY), lambda: seconds_until_hour(hour), stop)
