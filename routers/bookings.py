# routers/bookings.py
"""
Booking API routes for the uHomes backend.

Role-based access (decided in BookingService):
- Student: creates bookings for themself, sees own bookings
- Agent: creates bookings for a named tenant, manages bookings on own properties
- Admin: all bookings
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_session
from models import Booking
from services.booking_service import BookingService
from schemas.booking import (
     BookingCreate,
     BookingStatusUpdate,
     BookingResponse,
     BookingListResponse,
)
from utils.auth import get_current_user

router = APIRouter(prefix="/api/booking", tags=["bookings"])


def _build_booking_response(booking: Booking) -> BookingResponse:
     """Serialize a booking with its property, tenant and agent summaries."""
     return BookingResponse.model_validate(booking)


def _build_list_response(result: dict) -> BookingListResponse:
     return BookingListResponse(
          bookings=[_build_booking_response(b) for b in result["bookings"]],
          count=result["count"],
          last_updated=result["last_updated"],
     )


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a booking")
def create_booking(
     booking_data: BookingCreate,
     db: Session = Depends(get_session),
     caller: dict = Depends(get_current_user)
):
     """
     Create a booking for a property.

     - **propertyId**: Property being booked; its agent becomes the booking's agent
     - **tenant**: Required when an agent or admin books; ignored for students
     - **propertyType** / **gender**: Required
     """
     booking = BookingService.create_booking(db, booking_data, caller)
     return {"status": "success", "data": _build_booking_response(booking)}


@router.get("", summary="List bookings visible to the caller")
def list_bookings(
     db: Session = Depends(get_session),
     caller: dict = Depends(get_current_user)
):
     result = BookingService.get_all_bookings(db, caller)
     return {"status": "success", "data": _build_list_response(result)}


@router.get("/agent/{agent_id}", summary="List bookings of an agent")
def get_bookings_by_agent(
     agent_id: str,
     db: Session = Depends(get_session),
     caller: dict = Depends(get_current_user)
):
     """Only the agent themself or an admin may call this."""
     result = BookingService.get_bookings_by_agent(db, agent_id, caller)
     return {"status": "success", "data": _build_list_response(result)}


@router.get("/{booking_id}", summary="Get a booking by ID")
def get_booking(
     booking_id: str,
     db: Session = Depends(get_session),
     caller: dict = Depends(get_current_user)
):
     booking = BookingService.get_booking_by_id(db, booking_id, caller)
     return {"status": "success", "data": _build_booking_response(booking)}


@router.patch("/{booking_id}/status", summary="Change a booking's status")
def update_booking_status(
     booking_id: str,
     update_data: BookingStatusUpdate,
     db: Session = Depends(get_session),
     caller: dict = Depends(get_current_user)
):
     """
     Move a booking to a new status. Assigned agent or admin only.

     Send the **version** from the last read to have the update refused
     with 409 if someone else changed the booking in between.
     """
     booking = BookingService.update_booking_status(
          db,
          booking_id,
          update_data.status,
          caller,
          expected_version=update_data.version,
     )
     return {"status": "success", "data": _build_booking_response(booking)}


@router.delete("/{booking_id}", summary="Delete a booking")
def delete_booking(
     booking_id: str,
     db: Session = Depends(get_session),
     caller: dict = Depends(get_current_user)
):
     booking = BookingService.delete_booking(db, booking_id, caller)
     return {"status": "success", "data": {"id": booking.id, "message": "Booking deleted"}}
