"""Review router - patient reviews of completed appointments"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...shared.responses import api_response
from .schemas import PendingReviewResponse, ReviewCreate, ReviewResponse
from .service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["Reviews"])


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


@router.get("")
async def review_history(
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    reviews = service.review_history(current_user)
    message = "Reviews fetched successfully" if reviews else "No reviews found for this user"
    return api_response(200, [ReviewResponse.model_validate(r) for r in reviews], message)


@router.get("/review-pending")
async def pending_reviews(
    doctor_id: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    """Completed appointments the caller has not reviewed yet"""
    appointments = service.pending_reviews(current_user, doctor_id)
    data = [
        PendingReviewResponse(
            appointment_id=a.id,
            doctor_id=a.doctor_id,
            appointment_time=a.appointment_time,
            location=a.location,
            consultation_type=a.consultation_type,
            status=a.status,
        )
        for a in appointments
    ]
    return api_response(200, data, "Pending reviews fetched successfully")


@router.post("/add-review", status_code=201)
async def add_review(
    data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    review = service.add_review(current_user, data)
    return api_response(201, ReviewResponse.model_validate(review), "Review added successfully")
