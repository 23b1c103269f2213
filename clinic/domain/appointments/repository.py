"""Appointment repository - Database operations for appointments"""

from typing import Optional

from sqlalchemy import case
from sqlalchemy.orm import Session

from ...models import RELEASED_STATUSES, Appointment, AppointmentStatus


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_by_id(db: Session, appointment_id: int) -> Optional[Appointment]:
        return db.query(Appointment).filter(Appointment.id == appointment_id).first()

    @staticmethod
    def list_all(db: Session) -> list[Appointment]:
        """Pending first, then chronological"""
        pending_first = case((Appointment.status == AppointmentStatus.PENDING.value, 0), else_=1)
        return db.query(Appointment).order_by(pending_first, Appointment.appointment_time.asc()).all()

    @staticmethod
    def list_for_patient(db: Session, patient_id: int) -> list[Appointment]:
        return (
            db.query(Appointment)
            .filter(Appointment.patient_id == patient_id)
            .order_by(Appointment.appointment_time.desc())
            .all()
        )

    @staticmethod
    def find_occupying(db: Session, doctor_id: int, appointment_time: str) -> Optional[Appointment]:
        """Appointment currently holding (doctor, composite time), ignoring rejected/cancelled"""
        return (
            db.query(Appointment)
            .filter(
                Appointment.doctor_id == doctor_id,
                Appointment.appointment_time == appointment_time,
                Appointment.status.notin_(RELEASED_STATUSES),
            )
            .first()
        )

    @staticmethod
    def add_appointment(db: Session, **appointment_data) -> Appointment:
        """Stage a new appointment; the caller commits it with the calendar change"""
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        db.flush()
        return appointment

    @staticmethod
    def set_status(db: Session, appointment: Appointment, status: AppointmentStatus) -> Appointment:
        appointment.status = status.value
        db.commit()
        db.refresh(appointment)
        return appointment
