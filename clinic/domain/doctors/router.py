"""Doctor router - FastAPI endpoints for the doctor directory"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...config import DEFAULT_PAGE_SIZE
from ...database import get_db
from ...models import User
from ...shared.responses import api_response
from .schemas import DoctorCreate, DoctorResponse, DoctorUpdate, SlotsUpdate
from .service import DoctorService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doctors", tags=["Doctors"])


def get_doctor_service(db: Session = Depends(get_db)) -> DoctorService:
    """Dependency injection for DoctorService"""
    return DoctorService(db)


@router.get("")
async def list_doctors(
    query: Optional[str] = Query(None),
    gender: Optional[str] = Query(None),
    experience: Optional[str] = Query(None, description="N, N-M or N+ years"),
    rating: Optional[float] = Query(None, description="Minimum rating"),
    page: int = Query(1),
    per_page: int = Query(DEFAULT_PAGE_SIZE, alias="perPage"),
    top_rated: bool = Query(False, alias="topRated"),
    service: DoctorService = Depends(get_doctor_service),
):
    """Search/filter doctors; topRated with no filters returns a short unpaginated list"""
    result = service.search(
        query=query,
        gender=gender,
        experience=experience,
        rating=rating,
        page=page,
        per_page=per_page,
        top_rated=top_rated,
    )
    return api_response(200, result, "Doctors fetched successfully")


@router.get("/{doctor_id}")
async def get_doctor(doctor_id: int, service: DoctorService = Depends(get_doctor_service)):
    doctor = service.get_doctor(doctor_id)
    return api_response(200, DoctorResponse.model_validate(doctor), "Doctor fetched successfully")


# ============================================================================
# STAFF OPERATIONS
# ============================================================================


@router.post("/add-doctor", status_code=201)
async def add_doctor(
    data: DoctorCreate,
    current_user: User = Depends(require_admin),
    service: DoctorService = Depends(get_doctor_service),
):
    doctor = service.add_doctor(data, current_user)
    return api_response(201, DoctorResponse.model_validate(doctor), "Doctor added successfully")


@router.patch("/update/{doctor_id}")
async def update_doctor(
    doctor_id: int,
    data: DoctorUpdate,
    current_user: User = Depends(require_admin),
    service: DoctorService = Depends(get_doctor_service),
):
    doctor = service.update_doctor(doctor_id, data, current_user)
    return api_response(200, DoctorResponse.model_validate(doctor), "Doctor updated successfully")


@router.delete("/remove/{doctor_id}")
async def remove_doctor(
    doctor_id: int,
    current_user: User = Depends(require_admin),
    service: DoctorService = Depends(get_doctor_service),
):
    service.remove_doctor(doctor_id, current_user)
    return api_response(200, None, "Doctor deleted successfully")


@router.patch("/updateSlots/{doctor_id}")
async def update_slots(
    doctor_id: int,
    data: SlotsUpdate,
    current_user: User = Depends(require_admin),
    service: DoctorService = Depends(get_doctor_service),
):
    """Replace the shift set of each date present in the patch (empty value removes the date)"""
    doctor = service.update_slots(doctor_id, data.available_times, current_user)
    return api_response(200, DoctorResponse.model_validate(doctor), "Availability updated successfully")
