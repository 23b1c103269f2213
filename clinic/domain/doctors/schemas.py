"""Doctor domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...utils.sanitization import clean_text


def _strip(v):
    if isinstance(v, str):
        return clean_text(v, max_length=255)
    return v


class DoctorCreate(BaseModel):
    """Schema for adding a doctor. Presence is checked by the service so the
    caller gets a MissingField listing every absent field."""

    name: Optional[str] = None
    specialty: Optional[str] = None
    experience: Optional[int] = Field(default=None, ge=0)
    degree: Optional[str] = None
    location: Optional[str] = None
    gender: Optional[str] = None
    available_times: Optional[dict] = None

    @field_validator("name", "specialty", "degree", "location", "gender", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)


class DoctorUpdate(BaseModel):
    """Schema for updating a doctor - blank or missing fields keep their value"""

    name: Optional[str] = None
    specialty: Optional[str] = None
    experience: Optional[int] = Field(default=None, ge=0)
    degree: Optional[str] = None
    location: Optional[str] = None
    gender: Optional[str] = None
    available_times: Optional[dict] = None

    @field_validator("name", "specialty", "degree", "location", "gender", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)


class SlotsUpdate(BaseModel):
    """Per-date availability patch, e.g. {"2025-01-10": {"morning": ["09:00"]}}"""

    available_times: dict


class DoctorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    specialty: str
    experience: int
    degree: Optional[str] = None
    location: Optional[str] = None
    gender: Optional[str] = None
    rating: float
    available_times: dict
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DoctorListResponse(BaseModel):
    doctors: list[DoctorResponse]
    total: int
    page: int
    perPage: int
    totalPages: int
