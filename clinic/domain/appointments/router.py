"""Appointment router - booking and staff status management"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import User
from ...services.notification_service import Notifier, get_notifier
from ...shared.responses import api_response
from .schemas import AppointmentResponse, BookAppointmentRequest, StatusUpdateRequest
from .service import AppointmentService, BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db)


def get_appointment_service(
    db: Session = Depends(get_db), notifier: Notifier = Depends(get_notifier)
) -> AppointmentService:
    return AppointmentService(db, notifier)


@router.get("")
async def get_all_appointments(
    _: User = Depends(require_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    """All appointments, pending first then chronological (staff only)"""
    appointments = service.get_all_appointments()
    return api_response(
        200,
        [AppointmentResponse.model_validate(a) for a in appointments],
        "Appointments fetched successfully",
    )


@router.get("/get-user-appointments")
async def get_user_appointments(
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointments = service.get_patient_appointments(current_user)
    return api_response(
        200,
        [AppointmentResponse.model_validate(a) for a in appointments],
        "Appointments fetched successfully",
    )


@router.post("/book-appointment", status_code=201)
async def book_appointment(
    data: BookAppointmentRequest,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    appointment = service.book_appointment(current_user, data)
    return api_response(201, AppointmentResponse.model_validate(appointment), "Appointment booked successfully")


@router.patch("/updateStatus")
async def update_appointment_status(
    data: StatusUpdateRequest,
    _: User = Depends(require_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Change status; approved/rejected email the patient (best-effort)"""
    appointment = await service.update_status(data.id, data.status)
    return {
        "success": True,
        "message": f"Appointment status updated to '{appointment.status}'",
        "data": AppointmentResponse.model_validate(appointment),
    }
