"""Appointment services - slot booking and the status lifecycle"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...exceptions import (
    AppointmentNotFound,
    ClinicError,
    DateUnavailable,
    DoctorNotFound,
    MissingField,
    PatientNotFound,
    PersistenceFailure,
    SlotAlreadyBooked,
    SlotUnavailable,
    Unauthenticated,
)
from ...models import Appointment, AppointmentStatus, User
from ...services.notification_service import AppointmentNotification, Notifier, notify_appointment_status
from ..availability.calendar import find_shift, is_slot_available, parse_calendar, remove_slot
from ..availability.locks import doctor_lock
from ..doctors.repository import DoctorRepository
from .lifecycle import SideEffect, parse_status, plan_transition
from .repository import AppointmentRepository
from .schemas import BookAppointmentRequest

logger = logging.getLogger(__name__)


def compose_appointment_time(date: str, slot_time: str) -> str:
    """Collision key for a booking: "YYYY-MM-DD" + "T" + "HH:MM" """
    return f"{date}T{slot_time}"


class BookingService:
    """Allocates calendar slots to patients without double-booking"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()
        self.doctors = DoctorRepository()

    def book_appointment(self, patient: Optional[User], data: BookAppointmentRequest) -> Appointment:
        """
        Book a slot for the patient.

        The slot must exist under the date in any shift; the occupying-appointment
        check, appointment insert and calendar write happen in one transaction
        while holding the doctor's lock.
        """
        slot = data.appointment_time
        fields = {
            "doctor_id": data.doctor_id,
            "appointment_time.date": slot.date if slot else None,
            "appointment_time.shift": slot.shift if slot else None,
            "appointment_time.slot_time": slot.slot_time if slot else None,
            "location": data.location,
            "consultation_type": data.consultation_type,
        }
        missing = [name for name, value in fields.items() if value is None or value == ""]
        if missing:
            raise MissingField(fields=missing)

        if patient is None or patient.id is None:
            raise Unauthenticated("Unauthorized: User must login to book an appointment")

        doctor_id = data.doctor_id
        date, shift, slot_time = slot.date, slot.shift, slot.slot_time
        appointment_time = compose_appointment_time(date, slot_time)

        logger.info(f"📅 Booking request: patient {patient.id}, doctor {doctor_id}, {appointment_time} ({shift})")

        with doctor_lock(doctor_id):
            try:
                appointment = self._reserve(patient, data, doctor_id, date, shift, slot_time, appointment_time)
            except ClinicError:
                self.db.rollback()
                raise
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"❌ Booking lookup failed for doctor {doctor_id}: {e}")
                raise PersistenceFailure("Could not book appointment") from e

        logger.info(f"✅ Appointment {appointment.id} booked: doctor {doctor_id} at {appointment_time}")
        return appointment

    def _reserve(
        self,
        patient: User,
        data: BookAppointmentRequest,
        doctor_id: int,
        date: str,
        shift: str,
        slot_time: str,
        appointment_time: str,
    ) -> Appointment:
        doctor = self.doctors.get_doctor_for_update(self.db, doctor_id)
        if not doctor:
            raise DoctorNotFound()

        if self.repo.find_occupying(self.db, doctor_id, appointment_time):
            logger.warning(f"⚠️ Slot {appointment_time} already booked for doctor {doctor_id}")
            raise SlotAlreadyBooked()

        calendar = parse_calendar(doctor.available_times, strict=False)

        if date not in calendar:
            raise DateUnavailable()

        if not is_slot_available(calendar, date, slot_time):
            raise SlotUnavailable()

        # Availability is checked across all shifts
        if slot_time not in calendar[date].get(shift, []):
            held_by = find_shift(calendar, date, slot_time)
            logger.info(f"ℹ️ Slot {slot_time} on {date} requested under '{shift}' but held by '{held_by}'")

        try:
            appointment = self.repo.add_appointment(
                self.db,
                patient_id=patient.id,
                doctor_id=doctor_id,
                appointment_time=appointment_time,
                location=data.location,
                consultation_type=data.consultation_type,
                status=AppointmentStatus.PENDING.value,
            )
            # Older rows may list the label under more than one shift
            for holder in [name for name, slots in calendar[date].items() if slot_time in slots]:
                calendar = remove_slot(calendar, date, holder, slot_time)
            doctor.available_times = calendar
            self.db.commit()
        except IntegrityError as e:
            logger.warning(f"⚠️ Unique slot constraint hit for doctor {doctor_id} at {appointment_time}: {e}")
            raise SlotAlreadyBooked() from e
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to persist booking for doctor {doctor_id} at {appointment_time}: {e}")
            raise PersistenceFailure("Could not book appointment") from e

        self.db.refresh(appointment)
        return appointment


class AppointmentService:
    """Listing and status changes; status side effects come from the lifecycle table"""

    def __init__(self, db: Session, notifier: Notifier):
        self.db = db
        self.notifier = notifier
        self.repo = AppointmentRepository()
        self.doctors = DoctorRepository()

    def get_all_appointments(self) -> list[Appointment]:
        appointments = self.repo.list_all(self.db)
        if not appointments:
            raise AppointmentNotFound("No appointments found")
        return appointments

    def get_patient_appointments(self, patient: User) -> list[Appointment]:
        return self.repo.list_for_patient(self.db, patient.id)

    async def update_status(self, appointment_id: Optional[int], new_status: Optional[str]) -> Appointment:
        """
        Move an appointment to a new status.

        The status write commits before any side effect runs; a failed
        notification never undoes it.
        """
        if appointment_id is None or not new_status:
            raise MissingField("Appointment ID and status are required")

        status = parse_status(new_status)

        appointment = self.repo.get_by_id(self.db, appointment_id)
        if not appointment:
            raise AppointmentNotFound()

        current = AppointmentStatus(appointment.status)
        effects = plan_transition(current, status)

        if current != status:
            try:
                appointment = self.repo.set_status(self.db, appointment, status)
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"❌ Could not update appointment {appointment_id}: {e}")
                raise PersistenceFailure("Could not update appointment") from e
            logger.info(f"✅ Appointment {appointment_id} status: {current.value} → {status.value}")

        if SideEffect.NOTIFY_PATIENT in effects:
            await self._notify_patient(appointment)

        return appointment

    def build_notification(self, appointment: Appointment) -> AppointmentNotification:
        """
        Raises:
            DoctorNotFound, PatientNotFound: If a party of the appointment is gone
        """
        doctor = self.doctors.get_doctor_by_id(self.db, appointment.doctor_id, include_inactive=True)
        if not doctor:
            raise DoctorNotFound()

        patient = self.db.query(User).filter(User.id == appointment.patient_id).first()
        if not patient:
            raise PatientNotFound()

        return AppointmentNotification(
            appointment_id=appointment.id,
            doctor_name=doctor.name,
            patient_name=patient.name,
            recipient_email=patient.email,
            appointment_time=appointment.appointment_time,
            location=appointment.location,
            consultation_type=appointment.consultation_type,
            status=appointment.status,
        )

    async def _notify_patient(self, appointment: Appointment) -> bool:
        try:
            notification = self.build_notification(appointment)
        except (DoctorNotFound, PatientNotFound) as e:
            logger.error(f"❌ Skipping notification for appointment {appointment.id}: {e.message}")
            return False

        return await notify_appointment_status(self.notifier, notification)
