"""
Celery worker entry point
Records pending payments for priced bookings
"""
import logging
from celery.signals import task_failure, worker_ready, worker_shutdown

from app.config.celery_config import celery_app
from app.utils.my_logging import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


@worker_ready.connect
def worker_ready_handler(sender=None, **kwargs):
    tasks = sorted(name for name in celery_app.tasks.keys() if name.startswith("app."))
    logger.info(f"Payment worker ready, tasks: {tasks}")


@task_failure.connect
def task_failure_handler(sender=None, task_id=None, exception=None, args=None, **kwargs):
    """Retries are exhausted; the booking stands without a pending payment row"""
    task_name = getattr(sender, "name", "unknown")
    logger.error(f"Task {task_name} [{task_id}] gave up with args={args}: {exception}")


@worker_shutdown.connect
def worker_shutdown_handler(sender=None, **kwargs):
    logger.info("Payment worker shutting down")


if __name__ == "__main__":
    celery_app.start([
        "worker",
        "--loglevel=info",
        "--concurrency=2",
        "--max-tasks-per-child=500",
    ])
