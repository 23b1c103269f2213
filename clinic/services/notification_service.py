"""
Appointment notifications

Status changes hand a structured payload to a Notifier. Delivery is
best-effort: failures are logged and never propagate back into the status
change that triggered them.
"""

import logging
from typing import Protocol

from pydantic import BaseModel

from ..config import NOTIFICATION_BACKEND

logger = logging.getLogger(__name__)


class AppointmentNotification(BaseModel):
    """Everything the patient email needs, captured after the status commit"""

    appointment_id: int
    doctor_name: str
    patient_name: str
    recipient_email: str
    appointment_time: str
    location: str
    consultation_type: str
    status: str


class Notifier(Protocol):
    async def dispatch(self, notification: AppointmentNotification) -> None:
        """Deliver or enqueue a notification. May raise; callers swallow."""
        ...


class EmailNotifier:
    """Sends the status email from the current task"""

    async def dispatch(self, notification: AppointmentNotification) -> None:
        from ..email_service import send_appointment_status_email

        await send_appointment_status_email(
            to=notification.recipient_email,
            patient_name=notification.patient_name,
            doctor_name=notification.doctor_name,
            appointment_id=notification.appointment_id,
            appointment_time=notification.appointment_time,
            location=notification.location,
            consultation_type=notification.consultation_type,
            status=notification.status,
        )


class QueueNotifier:
    """Hands the email to the arq worker so retries happen off the request path"""

    async def dispatch(self, notification: AppointmentNotification) -> None:
        from arq import create_pool

        from ..worker import get_redis_settings

        pool = await create_pool(get_redis_settings())
        try:
            job = await pool.enqueue_job("send_appointment_status_email_task", notification.model_dump())
            logger.info(f"📋 Appointment email job queued: {job.job_id if job else 'duplicate'}")
        finally:
            await pool.close()


def get_notifier() -> Notifier:
    """FastAPI dependency selecting the configured notification backend"""
    if NOTIFICATION_BACKEND == "queue":
        return QueueNotifier()
    return EmailNotifier()


async def notify_appointment_status(notifier: Notifier, notification: AppointmentNotification) -> bool:
    """Dispatch and swallow failures. Returns True if the notifier accepted it."""
    try:
        logger.info(
            f"📧 Dispatching '{notification.status}' notification for appointment "
            f"{notification.appointment_id} to {notification.recipient_email}"
        )
        await notifier.dispatch(notification)
        logger.info(f"✅ Notification dispatched for appointment {notification.appointment_id}")
        return True
    except Exception as e:
        logger.error(f"❌ Failed to notify for appointment {notification.appointment_id}: {e}")
        return False
