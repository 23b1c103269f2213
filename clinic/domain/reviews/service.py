"""Review service - reviews of completed visits and the doctor rating aggregate"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...exceptions import (
    DuplicateReview,
    MissingField,
    NoCompletedAppointment,
    PersistenceFailure,
    RatingOutOfRange,
    Unauthenticated,
)
from ...models import Appointment, Review, User
from .repository import ReviewRepository
from .schemas import ReviewCreate

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def validate_rating(value) -> int:
    """Ratings are whole numbers from 1 to 5"""
    try:
        rating = float(value)
    except (TypeError, ValueError) as e:
        raise RatingOutOfRange() from e

    if not rating.is_integer() or not MIN_RATING <= rating <= MAX_RATING:
        raise RatingOutOfRange()
    return int(rating)


class ReviewService:
    """Service layer for reviews"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReviewRepository()

    def add_review(self, patient: Optional[User], data: ReviewCreate) -> Review:
        if patient is None:
            raise Unauthenticated()

        fields = {
            "doctor_id": data.doctor_id,
            "appointment_id": data.appointment_id,
            "rating": data.rating,
            "review": data.review,
        }
        missing = [name for name, value in fields.items() if value is None or value == ""]
        if missing:
            raise MissingField("Doctor ID, Appointment ID, Rating, and Review are required", fields=missing)

        rating = validate_rating(data.rating)

        appointment = self.repo.find_completed_appointment(self.db, data.appointment_id, data.doctor_id, patient.id)
        if not appointment:
            raise NoCompletedAppointment()

        if self.repo.get_by_appointment(self.db, data.appointment_id):
            raise DuplicateReview()

        try:
            review = self.repo.create_review(
                self.db,
                doctor_id=data.doctor_id,
                patient_id=patient.id,
                appointment_id=data.appointment_id,
                rating=rating,
                review=data.review,
            )
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Concurrent review for appointment {data.appointment_id}: {e}")
            raise DuplicateReview() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to save review for appointment {data.appointment_id}: {e}")
            raise PersistenceFailure("Could not save review") from e

        logger.info(f"✅ Review {review.id} added for doctor {review.doctor_id} (rating {rating})")

        self.recompute_doctor_rating(review.doctor_id)
        return review

    def recompute_doctor_rating(self, doctor_id: int) -> float:
        """Recompute the doctor's cached rating as the mean of all of their reviews"""
        average = self.repo.average_rating(self.db, doctor_id)
        rating = round(average, 2) if average is not None else 0.0

        try:
            self.repo.set_doctor_rating(self.db, doctor_id, rating)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update rating for doctor {doctor_id}: {e}")
            raise PersistenceFailure("Review saved but rating could not be updated") from e

        logger.info(f"⭐ Doctor {doctor_id} rating recomputed: {rating}")
        return rating

    def pending_reviews(self, patient: User, doctor_id: Optional[int] = None) -> list[Appointment]:
        return self.repo.pending_for_patient(self.db, patient.id, doctor_id)

    def review_history(self, patient: User) -> list[Review]:
        return self.repo.list_for_patient(self.db, patient.id)
