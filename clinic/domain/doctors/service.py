"""Doctor service - Directory queries, staff edits and availability patches"""

import logging
import math
import re
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, TOP_RATED_LIMIT
from ...exceptions import DoctorNotFound, InvalidFilter, MissingField, PersistenceFailure
from ...models import Doctor, User
from ..availability.calendar import merge_availability, parse_calendar
from ..availability.locks import doctor_lock
from .repository import DoctorRepository
from .schemas import DoctorCreate, DoctorListResponse, DoctorResponse, DoctorUpdate

logger = logging.getLogger(__name__)

_EXACT = re.compile(r"^\d+$")
_RANGE = re.compile(r"^(\d+)\s*-\s*(\d+)$")
_MINIMUM = re.compile(r"^(\d+)\s*\+$")

REQUIRED_DOCTOR_FIELDS = ("name", "specialty", "experience", "degree", "location", "gender", "available_times")


def parse_experience_filter(value: Optional[str]) -> tuple[Optional[int], Optional[int]]:
    """
    "5" -> exactly 5 years, "3-8" -> 3 to 8 inclusive, "10+" -> at least 10.

    Returns (min, max), either of which may be None.
    """
    if value is None or str(value).strip() == "":
        return None, None

    value = str(value).strip()

    if _EXACT.match(value):
        years = int(value)
        return years, years

    match = _RANGE.match(value)
    if match:
        low, high = int(match.group(1)), int(match.group(2))
        if low > high:
            raise InvalidFilter(f"Invalid experience range '{value}'")
        return low, high

    match = _MINIMUM.match(value)
    if match:
        return int(match.group(1)), None

    raise InvalidFilter(f"Invalid experience filter '{value}' (use N, N-M or N+)")


class DoctorService:
    """Service layer for doctor business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DoctorRepository()

    def get_doctor(self, doctor_id: int) -> Doctor:
        doctor = self.repo.get_doctor_by_id(self.db, doctor_id)
        if not doctor:
            raise DoctorNotFound()
        return doctor

    def search(
        self,
        query: Optional[str] = None,
        gender: Optional[str] = None,
        experience: Optional[str] = None,
        rating: Optional[float] = None,
        page: int = 1,
        per_page: int = DEFAULT_PAGE_SIZE,
        top_rated: bool = False,
    ) -> DoctorListResponse | list[DoctorResponse]:
        """Search/filter/paginate active doctors"""
        query = (query or "").strip() or None
        gender = (gender or "").strip() or None
        min_experience, max_experience = parse_experience_filter(experience)

        if rating is not None and not 0 <= rating <= 5:
            raise InvalidFilter("rating filter must be between 0 and 5")

        has_filters = any(v is not None for v in (query, gender, min_experience, max_experience, rating))

        # Top-rated fast path: fixed-size list, no pagination
        if top_rated and not has_filters:
            doctors = self.repo.get_top_rated(self.db, TOP_RATED_LIMIT)
            return [DoctorResponse.model_validate(d) for d in doctors]

        if page < 1:
            raise InvalidFilter("page must be >= 1")
        if not 1 <= per_page <= MAX_PAGE_SIZE:
            raise InvalidFilter(f"perPage must be between 1 and {MAX_PAGE_SIZE}")

        doctors, total = self.repo.search_doctors(
            self.db,
            search=query,
            gender=gender,
            min_experience=min_experience,
            max_experience=max_experience,
            min_rating=rating,
            offset=(page - 1) * per_page,
            limit=per_page,
        )

        return DoctorListResponse(
            doctors=[DoctorResponse.model_validate(d) for d in doctors],
            total=total,
            page=page,
            perPage=per_page,
            totalPages=math.ceil(total / per_page) if total else 0,
        )

    def add_doctor(self, data: DoctorCreate, user: User) -> Doctor:
        missing = [
            field
            for field in REQUIRED_DOCTOR_FIELDS
            if getattr(data, field) is None or getattr(data, field) == ""
        ]
        if missing:
            raise MissingField(fields=missing)

        # Dates given as null or {} are not stored
        calendar = merge_availability({}, parse_calendar(data.available_times))

        try:
            doctor = self.repo.create_doctor(
                self.db,
                name=data.name,
                specialty=data.specialty,
                experience=data.experience,
                degree=data.degree,
                location=data.location,
                gender=data.gender,
                available_times=calendar,
                rating=0.0,
                created_by=user.id,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to add doctor {data.name}: {e}")
            raise PersistenceFailure("Error while creating doctor") from e

        logger.info(f"✅ Doctor {doctor.id} ({doctor.name}) added by user {user.id}")
        return doctor

    def update_doctor(self, doctor_id: int, data: DoctorUpdate, user: User) -> Doctor:
        """Partial update; blank strings keep the stored value"""
        updates = {
            key: value
            for key, value in data.model_dump(exclude={"available_times"}).items()
            if value is not None and value != ""
        }
        updates["updated_by"] = user.id

        calendar = merge_availability({}, parse_calendar(data.available_times)) if data.available_times else None

        with doctor_lock(doctor_id):
            doctor = self.repo.get_doctor_for_update(self.db, doctor_id)
            if not doctor:
                raise DoctorNotFound()

            if calendar is not None:
                updates["available_times"] = calendar

            try:
                doctor = self.repo.update_doctor(self.db, doctor, **updates)
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"❌ Failed to update doctor {doctor_id}: {e}")
                raise PersistenceFailure("Could not update doctor") from e

        logger.info(f"✅ Doctor {doctor_id} updated by user {user.id}: {sorted(updates)}")
        return doctor

    def remove_doctor(self, doctor_id: int, user: User) -> None:
        """Soft delete - appointments keep referencing the doctor"""
        doctor = self.get_doctor(doctor_id)

        try:
            self.repo.update_doctor(self.db, doctor, is_active=False, updated_by=user.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to remove doctor {doctor_id}: {e}")
            raise PersistenceFailure("doctor deletion failed") from e

        logger.info(f"🗑️ Doctor {doctor_id} removed by user {user.id}")

    def update_slots(self, doctor_id: int, patch: dict, user: User) -> Doctor:
        """Merge a per-date availability patch into the doctor's calendar"""
        patch_calendar = parse_calendar(patch)

        with doctor_lock(doctor_id):
            doctor = self.repo.get_doctor_for_update(self.db, doctor_id)
            if not doctor:
                raise DoctorNotFound()

            merged = merge_availability(parse_calendar(doctor.available_times, strict=False), patch_calendar)

            try:
                doctor = self.repo.update_doctor(self.db, doctor, available_times=merged, updated_by=user.id)
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"❌ Failed to update slots for doctor {doctor_id}: {e}")
                raise PersistenceFailure("Could not update availability") from e

        logger.info(f"📅 Availability updated for doctor {doctor_id}: dates {sorted(patch_calendar)}")
        return doctor
