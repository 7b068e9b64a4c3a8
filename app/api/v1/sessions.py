# ============================================================================
# FILE: app/api/v1/sessions.py
# Session booking - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_booking_service
from app.schemas.scheduling import BookingRequest
from app.services.booking.booking_service import BookingService

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("/book", status_code=status.HTTP_201_CREATED)
def book_session(
        request: BookingRequest,
        service: BookingService = Depends(get_booking_service)
):
    """
    Book a slot returned by the available-slots listing.
    A 409 means the slot was taken; refresh the slot list and pick another.
    """
    booking = service.create_booking(
        coach_id=request.coach_id,
        client_id=request.client_id,
        start_time=request.start_time,
        end_time=request.end_time,
        duration_minutes=request.duration_minutes,
        package_id=request.package_id,
        location_type=request.location_type,
        notes=request.notes,
    )
    return {"session": booking.to_dict(), "message": "Session booked successfully"}
