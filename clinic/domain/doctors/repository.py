"""Doctor repository - Database operations for doctors"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Doctor


class DoctorRepository:
    """Repository for doctor database operations"""

    @staticmethod
    def get_doctor_by_id(db: Session, doctor_id: int, include_inactive: bool = False) -> Optional[Doctor]:
        query = db.query(Doctor).filter(Doctor.id == doctor_id)
        if not include_inactive:
            query = query.filter(Doctor.is_active.is_(True))
        return query.first()

    @staticmethod
    def get_doctor_for_update(db: Session, doctor_id: int) -> Optional[Doctor]:
        """Load an active doctor and lock its row for the rest of the transaction"""
        return (
            db.query(Doctor)
            .filter(Doctor.id == doctor_id, Doctor.is_active.is_(True))
            .with_for_update()
            .populate_existing()
            .first()
        )

    @staticmethod
    def create_doctor(db: Session, **doctor_data) -> Doctor:
        doctor = Doctor(**doctor_data)
        db.add(doctor)
        db.commit()
        db.refresh(doctor)
        return doctor

    @staticmethod
    def update_doctor(db: Session, doctor: Doctor, **updates) -> Doctor:
        """Update a doctor with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(doctor, key):
                setattr(doctor, key, value)

        db.commit()
        db.refresh(doctor)
        return doctor

    @staticmethod
    def search_doctors(
        db: Session,
        search: Optional[str] = None,
        gender: Optional[str] = None,
        min_experience: Optional[int] = None,
        max_experience: Optional[int] = None,
        min_rating: Optional[float] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[list[Doctor], int]:
        """Filter active doctors. Returns (page, total matching)"""
        query = db.query(Doctor).filter(Doctor.is_active.is_(True))

        if search:
            search_term = f"%{search.lower()}%"
            query = query.filter(
                (func.lower(Doctor.name).like(search_term)) | (func.lower(Doctor.specialty).like(search_term))
            )

        if gender:
            query = query.filter(func.lower(Doctor.gender) == gender.lower())

        if min_experience is not None:
            query = query.filter(Doctor.experience >= min_experience)

        if max_experience is not None:
            query = query.filter(Doctor.experience <= max_experience)

        if min_rating is not None:
            query = query.filter(Doctor.rating >= min_rating)

        total = query.count()
        doctors = query.order_by(Doctor.rating.desc(), Doctor.name.asc()).offset(offset).limit(limit).all()
        return doctors, total

    @staticmethod
    def get_top_rated(db: Session, limit: int) -> list[Doctor]:
        return (
            db.query(Doctor)
            .filter(Doctor.is_active.is_(True))
            .order_by(Doctor.rating.desc(), Doctor.name.asc())
            .limit(limit)
            .all()
        )
