import threading
import time

import schedule

from infrastructure.logging import get_module_logger
from infrastructure.services import get_notification_service

logger = get_module_logger()


def safe_run(job):
    def wrapper(*args, **kwargs):
        try:
            return job(*args, **kwargs)
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "safe_run_error",
                error=str(e),
                function=job.__name__,
                module=job.__module__,
                job_args=args,
                job_kwargs=kwargs,
                exc_info=True,
            )
            return None

    return wrapper


def init(settings):
    logger.info(
        "scheduled_tasks_initialized",
        flush_interval_minutes=settings.notifications.flush_interval_minutes,
    )

    schedule.every(settings.notifications.flush_interval_minutes).minutes.do(
        safe_run(flush_pending_notifications)
    ).tag("notifications")
    schedule.every(5).minutes.do(safe_run(scheduler_heartbeat)).tag("heartbeat")


def flush_pending_notifications():
    report = get_notification_service().flush()
    logger.info(
        "scheduled_flush_completed",
        sent=report.sent,
        users=report.users,
        failed_users=report.failed_users,
        skipped_users=report.skipped_users,
        already_running=report.already_running,
    )
    return report


def scheduler_heartbeat():
    logger.info("scheduler_heartbeat", time=time.ctime())


def run_continuously(interval=1):
    """Continuously run, while executing pending jobs at each
    elapsed time interval.
    @return cease_continuous_run: threading. Event which can
    be set to cease continuous run. Missed jobs are not run
    retroactively: with a one hour interval, a job registered
    every minute runs once per hour, not sixty times.
    """
    cease_continuous_run = threading.Event()

    class ScheduleThread(threading.Thread):
        def run(self):
            while not cease_continuous_run.is_set():
                schedule.run_pending()
                time.sleep(interval)

    continuous_thread = ScheduleThread(daemon=True, name="notification-scheduler")
    continuous_thread.start()
    return cease_continuous_run
