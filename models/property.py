# models/property.py
from sqlalchemy import Column, String, Text, Numeric, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base, new_id, utcnow


class Property(Base):
     """
     Property model - a hostel / apartment listed by an agent.
     Bookings copy agent_id from here at creation time.
     """

     id = Column(String(36), primary_key=True, default=new_id)
     title = Column(String(255), nullable=False)
     location = Column(String(255), nullable=False)
     price = Column(Numeric(12, 2), nullable=False)
     room_type = Column(String(100), nullable=True)
     images = Column(Text, nullable=True)  # JSON list of URLs
     amenities = Column(Text, nullable=True)  # JSON or comma-separated
     agent_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
     is_available = Column(Boolean, default=True, nullable=False)

     # Timestamps
     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

     # Relationships
     agent = relationship("User", foreign_keys=[agent_id])
     bookings = relationship("Booking", back_populates="property")

     def __repr__(self):
          return f"<Property(id={self.id}, title='{self.title}')>"
