"""Appointment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...utils.sanitization import clean_text


class AppointmentTimeIn(BaseModel):
    date: Optional[str] = None  # YYYY-MM-DD
    shift: Optional[str] = None  # morning, afternoon, evening...
    slot_time: Optional[str] = None  # HH:MM

    @field_validator("date", "shift", "slot_time", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return clean_text(v, max_length=32)
        return v


class BookAppointmentRequest(BaseModel):
    """Booking body; presence of every field is checked by BookingService"""

    doctor_id: Optional[int] = None
    appointment_time: Optional[AppointmentTimeIn] = None
    location: Optional[str] = None
    consultation_type: Optional[str] = None

    @field_validator("location", "consultation_type", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return clean_text(v, max_length=255)
        return v


class StatusUpdateRequest(BaseModel):
    id: Optional[int] = None
    status: Optional[str] = None


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    doctor_id: int
    patient_id: int
    appointment_time: str
    location: str
    consultation_type: str
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
