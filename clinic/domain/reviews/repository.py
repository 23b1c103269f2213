"""Review repository - Database operations for reviews"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Appointment, AppointmentStatus, Doctor, Review


class ReviewRepository:
    """Repository for review database operations"""

    @staticmethod
    def get_by_appointment(db: Session, appointment_id: int) -> Optional[Review]:
        return db.query(Review).filter(Review.appointment_id == appointment_id).first()

    @staticmethod
    def find_completed_appointment(
        db: Session, appointment_id: int, doctor_id: int, patient_id: int
    ) -> Optional[Appointment]:
        """The appointment only counts if it belongs to this doctor and patient and is completed"""
        return (
            db.query(Appointment)
            .filter(
                Appointment.id == appointment_id,
                Appointment.doctor_id == doctor_id,
                Appointment.patient_id == patient_id,
                Appointment.status == AppointmentStatus.COMPLETED.value,
            )
            .first()
        )

    @staticmethod
    def create_review(db: Session, **review_data) -> Review:
        review = Review(**review_data)
        db.add(review)
        db.commit()
        db.refresh(review)
        return review

    @staticmethod
    def average_rating(db: Session, doctor_id: int) -> Optional[float]:
        value = db.query(func.avg(Review.rating)).filter(Review.doctor_id == doctor_id).scalar()
        return float(value) if value is not None else None

    @staticmethod
    def set_doctor_rating(db: Session, doctor_id: int, rating: float) -> None:
        db.query(Doctor).filter(Doctor.id == doctor_id).update({Doctor.rating: rating}, synchronize_session="fetch")
        db.commit()

    @staticmethod
    def list_for_patient(db: Session, patient_id: int) -> list[Review]:
        return (
            db.query(Review)
            .filter(Review.patient_id == patient_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .all()
        )

    @staticmethod
    def pending_for_patient(db: Session, patient_id: int, doctor_id: Optional[int] = None) -> list[Appointment]:
        """Completed appointments of the patient that have no review yet"""
        query = (
            db.query(Appointment)
            .outerjoin(Review, Review.appointment_id == Appointment.id)
            .filter(
                Appointment.patient_id == patient_id,
                Appointment.status == AppointmentStatus.COMPLETED.value,
                Review.id.is_(None),
            )
        )
        if doctor_id is not None:
            query = query.filter(Appointment.doctor_id == doctor_id)
        return query.order_by(Appointment.appointment_time.desc()).all()
