# services/booking_service.py
"""
Booking Service - business logic layer for booking operations.

Every operation takes the resolved caller ({"id", "role"}) and decides
access from it:
- Student: books for themself, sees bookings where they are the tenant
- Agent: books on behalf of a named tenant, sees and manages bookings
  on the properties they own
- Admin: everything
"""
import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session, joinedload
from sqlalchemy.orm.exc import StaleDataError

from models import Booking, BookingStatus, Gender, PaymentStatus, Property, User, UserRole
from models.base import utcnow
from utils.exceptions import (
     BadRequestError,
     ConflictError,
     NotFoundError,
     UnauthorizedError,
)

logger = logging.getLogger(__name__)


def _validate_id(value, label: str) -> str:
     """Normalize a UUID string or raise BadRequestError("Invalid <label> ID")."""
     try:
          return str(uuid.UUID(str(value)))
     except (ValueError, TypeError, AttributeError):
          raise BadRequestError(f"Invalid {label} ID")


def _coerce(enum_cls, value):
     """Map a request enum or raw string onto the model enum ``enum_cls``."""
     return enum_cls(getattr(value, "value", value))


def _is_admin(caller: dict) -> bool:
     return caller.get("role") == UserRole.ADMIN.value


def _with_parties(query):
     return query.options(
          joinedload(Booking.property),
          joinedload(Booking.tenant),
          joinedload(Booking.agent),
     )


class BookingService:
     """Service class for booking-related business logic."""

     @staticmethod
     def create_booking(db: Session, data, caller: dict) -> Booking:
          """
          Create a booking for a property.

          The property's agent becomes the booking's agent. Students always
          book for themselves; agents and admins must name the tenant.

          Args:
               db: SQLAlchemy database session
               data: BookingCreate payload
               caller: {"id": ..., "role": ...}

          Returns:
               Created Booking object

          Raises:
               BadRequestError: Malformed ids, property without agent, missing
                    tenant / property_type / gender
               NotFoundError: Property or tenant doesn't exist
          """
          property_id = _validate_id(data.property_id, "property")
          found_property = db.query(Property).filter(Property.id == property_id).first()
          if not found_property:
               raise NotFoundError("Property not found")

          agent_id = found_property.agent_id
          if not agent_id:
               raise BadRequestError("Property has no assigned agent")

          role = caller.get("role")
          tenant_id = data.tenant
          if role == UserRole.STUDENT.value:
               tenant_id = caller["id"]
          elif not tenant_id:
               if role == UserRole.AGENT.value:
                    raise BadRequestError("Tenant is required when an agent creates a booking")
               raise BadRequestError("Tenant is required")
          else:
               tenant_id = _validate_id(tenant_id, "tenant")
               if not db.query(User.id).filter(User.id == tenant_id).first():
                    raise NotFoundError("Tenant not found")

          if not data.property_type:
               raise BadRequestError("propertyType is required")
          if not data.gender:
               raise BadRequestError("gender is required")

          booking = Booking(
               property_id=property_id,
               agent_id=agent_id,
               tenant_id=tenant_id,
               property_type=data.property_type,
               gender=_coerce(Gender, data.gender),
               special_request=data.special_request,
               move_in_date=data.move_in_date,
               move_out_date=data.move_out_date,
               duration=data.duration,
               amount=data.amount,
               status=_coerce(BookingStatus, data.status or BookingStatus.PENDING),
               payment_status=_coerce(PaymentStatus, data.payment_status or PaymentStatus.PENDING),
          )

          db.add(booking)
          db.commit()
          db.refresh(booking)

          logger.info(
               "Booking %s created by %s %s (tenant=%s, agent=%s)",
               booking.id, role, caller["id"], tenant_id, agent_id
          )
          return booking

     @staticmethod
     def get_booking_by_id(db: Session, booking_id: str, caller: dict) -> Booking:
          booking_id = _validate_id(booking_id, "booking")

          booking = _with_parties(db.query(Booking)).filter(Booking.id == booking_id).first()
          if not booking:
               raise NotFoundError("Booking not found")

          user_is_agent = booking.agent_id == caller.get("id")
          user_is_tenant = booking.tenant_id == caller.get("id")
          if not user_is_agent and not user_is_tenant and not _is_admin(caller):
               logger.warning("Caller %s denied read on booking %s", caller.get("id"), booking_id)
               raise UnauthorizedError("Access denied")

          return booking

     @staticmethod
     def get_all_bookings(db: Session, caller: dict) -> dict:
          """
          List bookings visible to the caller, newest first.

          Returns:
               {"bookings": [...], "count": int, "last_updated": datetime}
          """
          query = _with_parties(db.query(Booking))

          role = caller.get("role")
          if role == UserRole.AGENT.value:
               query = query.filter(Booking.agent_id == caller["id"])
          elif role == UserRole.STUDENT.value:
               query = query.filter(Booking.tenant_id == caller["id"])
          elif not _is_admin(caller):
               query = query.filter(Booking.id.is_(None))

          bookings = query.order_by(Booking.created_at.desc()).all()
          return {
               "bookings": bookings,
               "count": len(bookings),
               "last_updated": utcnow(),
          }

     @staticmethod
     def get_bookings_by_agent(db: Session, agent_id: str, caller: dict) -> dict:
          agent_id = _validate_id(agent_id, "agent")
          if caller.get("id") != agent_id and not _is_admin(caller):
               raise UnauthorizedError("Access denied")

          bookings = (
               _with_parties(db.query(Booking))
               .filter(Booking.agent_id == agent_id)
               .order_by(Booking.created_at.desc())
               .all()
          )
          return {
               "bookings": bookings,
               "count": len(bookings),
               "last_updated": utcnow(),
          }

     @staticmethod
     def update_booking_status(
          db: Session,
          booking_id: str,
          status,
          caller: dict,
          expected_version: Optional[int] = None
     ) -> Booking:
          """
          Move a booking to ``status``. Only the assigned agent or an admin may.

          Any status in BookingStatus is accepted from any current status.

          Args:
               expected_version: The version the caller last read. When given
                    and stale, the update is refused.

          Raises:
               ConflictError: ``expected_version`` is stale, or another
                    request updated the booking first
          """
          booking_id = _validate_id(booking_id, "booking")

          booking = db.query(Booking).filter(Booking.id == booking_id).first()
          if not booking:
               raise NotFoundError("Booking not found")

          if booking.agent_id != caller.get("id") and not _is_admin(caller):
               logger.warning("Caller %s denied status update on booking %s", caller.get("id"), booking_id)
               raise UnauthorizedError("Only the assigned agent can update this booking")

          if status is None:
               raise BadRequestError("Status is required")
          try:
               new_status = _coerce(BookingStatus, status)
          except ValueError:
               raise BadRequestError(f"Invalid status '{status}'")

          if expected_version is not None and expected_version != booking.version:
               raise ConflictError("Booking was modified by another request")

          previous = booking.status
          booking.status = new_status
          try:
               db.commit()
          except StaleDataError:
               db.rollback()
               raise ConflictError("Booking was modified by another request")

          db.refresh(booking)
          logger.info(
               "Booking %s status %s -> %s by %s",
               booking.id, previous.value, new_status.value, caller.get("id")
          )
          return booking

     @staticmethod
     def delete_booking(db: Session, booking_id: str, caller: dict) -> Booking:
          """Delete a booking. Allowed for an admin, the assigned agent or the tenant."""
          booking_id = _validate_id(booking_id, "booking")

          booking = _with_parties(db.query(Booking)).filter(Booking.id == booking_id).first()
          if not booking:
               raise NotFoundError("Booking not found")

          can_delete = (
               _is_admin(caller)
               or booking.agent_id == caller.get("id")
               or booking.tenant_id == caller.get("id")
          )
          if not can_delete:
               raise UnauthorizedError("Access denied")

          db.delete(booking)
          try:
               db.commit()
          except StaleDataError:
               db.rollback()
               raise ConflictError("Booking was modified by another request")

          logger.info("Booking %s deleted by %s", booking_id, caller.get("id"))
          return booking
