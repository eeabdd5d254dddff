# schemas/booking.py
"""
Pydantic schemas for Booking API request/response validation.

Request bodies accept the camelCase keys the web client sends
(propertyId, moveInDate, ...) as well as the snake_case field names.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel

from models.booking import BookingStatus, PaymentStatus, Gender

# Request and response enums are the ORM column enums
BookingStatusEnum = BookingStatus
PaymentStatusEnum = PaymentStatus
GenderEnum = Gender


class BookingCreate(BaseModel):
     """Schema for creating a booking. tenant is ignored for students."""
     property_id: str = Field(..., description="Property being booked")
     tenant: Optional[str] = Field(None, description="Tenant user ID (required for agents and admins)")
     property_type: Optional[str] = Field(None, max_length=100, description="e.g. single, shared")
     move_in_date: date
     move_out_date: Optional[date] = None
     duration: str = Field(..., min_length=1, max_length=100, description="Free text, e.g. 6 months")
     gender: Optional[GenderEnum] = None
     special_request: Optional[str] = None
     amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
     status: Optional[BookingStatusEnum] = None
     payment_status: Optional[PaymentStatusEnum] = None

     model_config = ConfigDict(
          alias_generator=to_camel,
          populate_by_name=True,
          json_schema_extra={
               "example": {
                    "propertyId": "6f1c2d3e-0000-4000-8000-000000000001",
                    "propertyType": "single",
                    "gender": "male",
                    "moveInDate": "2026-09-01",
                    "duration": "6 months",
                    "amount": 500.00
               }
          }
     )


class BookingStatusUpdate(BaseModel):
     """Schema for a status transition. version enables a compare-and-swap."""
     status: Optional[BookingStatusEnum] = None
     version: Optional[int] = Field(None, ge=1, description="Version last read by the client")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "status": "confirmed",
                    "version": 1
               }
          }
     )


class PropertySummary(BaseModel):
     id: str
     title: str
     location: str
     price: float

     model_config = ConfigDict(from_attributes=True)


class PartySummary(BaseModel):
     """Tenant or agent as embedded in a booking."""
     id: str
     full_name: str
     email: str
     phone_number: str

     model_config = ConfigDict(from_attributes=True)


class BookingResponse(BaseModel):
     """Schema for booking response."""
     id: str
     property_id: str
     agent_id: str
     tenant_id: str
     property_type: str
     move_in_date: date
     move_out_date: Optional[date] = None
     duration: str
     gender: GenderEnum
     special_request: Optional[str] = None
     amount: float
     status: BookingStatusEnum
     payment_status: PaymentStatusEnum
     version: int
     created_at: datetime
     updated_at: datetime

     # Related data
     property: Optional[PropertySummary] = None
     tenant: Optional[PartySummary] = None
     agent: Optional[PartySummary] = None

     model_config = ConfigDict(from_attributes=True)


class BookingListResponse(BaseModel):
     bookings: List[BookingResponse]
     count: int
     last_updated: datetime
