# models/booking.py
import enum
from sqlalchemy import Column, Integer, String, Text, Numeric, Date, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship
from .base import Base, new_id, utcnow


class BookingStatus(str, enum.Enum):
     """Enumeration for booking status."""
     PENDING = "pending"
     CONFIRMED = "confirmed"
     CANCELLED = "cancelled"
     COMPLETED = "completed"


class PaymentStatus(str, enum.Enum):
     """Enumeration for booking payment status."""
     PENDING = "pending"
     PAID = "paid"
     REFUNDED = "refunded"


class Gender(str, enum.Enum):
     MALE = "male"
     FEMALE = "female"


def _values(enum_cls):
     return [member.value for member in enum_cls]


class Booking(Base):
     """
     Booking model - a tenancy request linking a property, its agent and a tenant.

     agent_id and tenant_id are resolved once at creation and never change.
     ``version`` is bumped on every UPDATE; SQLAlchemy adds it to the WHERE
     clause so a concurrent write fails with StaleDataError instead of
     silently overwriting.
     """

     id = Column(String(36), primary_key=True, default=new_id)

     # Foreign keys
     property_id = Column(
          String(36),
          ForeignKey("properties.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     agent_id = Column(
          String(36),
          ForeignKey("users.id"),
          nullable=False,
          index=True
     )
     tenant_id = Column(
          String(36),
          ForeignKey("users.id"),
          nullable=False,
          index=True
     )

     # Booking details
     property_type = Column(String(100), nullable=False)
     move_in_date = Column(Date, nullable=False)
     move_out_date = Column(Date, nullable=True)
     duration = Column(String(100), nullable=False)
     gender = Column(Enum(Gender, name="booking_gender", values_callable=_values), nullable=False)
     special_request = Column(Text, nullable=True)
     amount = Column(Numeric(12, 2), nullable=False)
     status = Column(
          Enum(BookingStatus, name="booking_status", values_callable=_values),
          default=BookingStatus.PENDING,
          nullable=False,
          index=True
     )
     payment_status = Column(
          Enum(PaymentStatus, name="booking_payment_status", values_callable=_values),
          default=PaymentStatus.PENDING,
          nullable=False
     )
     version = Column(Integer, nullable=False)

     # Timestamps
     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

     # Relationships
     property = relationship("Property", back_populates="bookings")
     agent = relationship("User", foreign_keys=[agent_id])
     tenant = relationship("User", foreign_keys=[tenant_id])

     __table_args__ = (
          Index("ix_bookings_agent_created", "agent_id", "created_at"),
          Index("ix_bookings_tenant_created", "tenant_id", "created_at"),
     )
     __mapper_args__ = {"version_id_col": version}

     def __repr__(self):
          return f"<Booking(id={self.id}, status='{self.status.value}', property_id={self.property_id})>"
