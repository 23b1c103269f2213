"""Review domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...utils.sanitization import clean_text


class ReviewCreate(BaseModel):
    doctor_id: Optional[int] = None
    appointment_id: Optional[int] = None
    rating: Optional[float] = None  # must be a whole number 1..5, checked by the service
    review: Optional[str] = None

    @field_validator("review", mode="before")
    @classmethod
    def strip_review(cls, v):
        if isinstance(v, str):
            return clean_text(v, max_length=2000)
        return v


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    doctor_id: int
    patient_id: int
    appointment_id: int
    rating: int
    review: str
    created_at: Optional[datetime] = None


class PendingReviewResponse(BaseModel):
    """A completed appointment still waiting for the patient's review"""

    model_config = ConfigDict(from_attributes=True)

    appointment_id: int
    doctor_id: int
    appointment_time: str
    location: str
    consultation_type: str
    status: str
