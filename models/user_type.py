# models/user_type.py
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship
from .base import Base, new_id, utcnow


class UserRole(str, enum.Enum):
     """Enumeration for account roles."""
     STUDENT = "student"
     AGENT = "agent"
     ADMIN = "admin"


class UserType(Base):
     """
     UserType model - the single role record of a user.

     One row per user, enforced by the unique constraint on user_id.
     Read on every authorization decision.
     """

     id = Column(String(36), primary_key=True, default=new_id)
     user_id = Column(
          String(36),
          ForeignKey("users.id", ondelete="CASCADE"),
          nullable=False,
          unique=True,
     )
     type = Column(
          Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
          nullable=False,
          index=True,
     )

     # Timestamps
     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

     # Relationships
     user = relationship("User", back_populates="user_type")

     __table_args__ = (
          Index("ix_user_types_user_type", "user_id", "type"),
     )

     def __repr__(self):
          return f"<UserType(user_id={self.user_id}, type='{self.type.value}')>"
