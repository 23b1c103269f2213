from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class AppointmentStatus(str, Enum):
    """Possible states of an appointment"""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that release the composite (doctor, time) key for another booking
RELEASED_STATUSES = (AppointmentStatus.REJECTED.value, AppointmentStatus.CANCELLED.value)

_ACTIVE_SLOT_WHERE = text("status NOT IN ('rejected', 'cancelled')")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default=UserRole.USER.value, nullable=False)
    refresh_token = Column(Text, nullable=True)  # Currently valid refresh token, cleared on logout
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    appointments = relationship("Appointment", back_populates="patient")
    reviews = relationship("Review", back_populates="patient")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    specialty = Column(String(255), nullable=False, index=True)
    experience = Column(Integer, nullable=False, default=0)  # Years of practice
    degree = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)
    gender = Column(String(20), nullable=True)
    rating = Column(Float, nullable=False, default=0.0)  # Mean of all review ratings
    # e.g., {"2025-01-10": {"morning": ["09:00", "09:30"], "evening": ["18:00"]}}
    available_times = Column(JSON, nullable=False, default=dict)
    is_active = Column(Boolean, default=True, nullable=False)  # Removal is a soft delete
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    appointments = relationship("Appointment", back_populates="doctor")
    reviews = relationship("Review", back_populates="doctor")


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # At most one appointment holds a (doctor, time) key unless released
        Index(
            "uq_appointments_doctor_time_active",
            "doctor_id",
            "appointment_time",
            unique=True,
            postgresql_where=_ACTIVE_SLOT_WHERE,
            sqlite_where=_ACTIVE_SLOT_WHERE,
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)
    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    appointment_time = Column(String(32), nullable=False)  # "YYYY-MM-DDTHH:MM"
    location = Column(String(255), nullable=False)
    consultation_type = Column(String(100), nullable=False)
    status = Column(String(20), default=AppointmentStatus.PENDING.value, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    doctor = relationship("Doctor", back_populates="appointments")
    patient = relationship("User", back_populates="appointments")
    review = relationship("Review", back_populates="appointment", uselist=False)


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),)

    id = Column(Integer, primary_key=True, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)
    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), unique=True, nullable=False)
    rating = Column(Integer, nullable=False)
    review = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    doctor = relationship("Doctor", back_populates="reviews")
    patient = relationship("User", back_populates="reviews")
    appointment = relationship("Appointment", back_populates="review")
