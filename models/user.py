# models/user.py
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from .base import Base, new_id, utcnow


class User(Base):
     """
     User model - central authentication table.

     The role lives in the one-to-one UserType record, not on this row.
     """

     id = Column(String(36), primary_key=True, default=new_id)
     full_name = Column(String(200), nullable=False)
     email = Column(String(255), unique=True, nullable=False, index=True)  # stored lower-case
     phone_number = Column(String(30), unique=True, nullable=False, index=True)
     password = Column(String(255), nullable=False)
     is_verified = Column(Boolean, default=False, nullable=False)

     # Password reset
     reset_password_token = Column(String(255), nullable=True)
     reset_password_expires = Column(DateTime, nullable=True)

     # Student profile
     university = Column(String(255), nullable=True)
     year_of_study = Column(String(10), nullable=True)  # 100, 200, 300, 400, 500

     # Timestamps
     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

     # Relationships
     user_type = relationship(
          "UserType",
          back_populates="user",
          uselist=False,
          cascade="all, delete-orphan",
     )
     tokens = relationship("Token", back_populates="user", cascade="all, delete-orphan")

     @property
     def role(self):
          return self.user_type.type.value if self.user_type else None

     def __repr__(self):
          return f"<User(id={self.id}, email='{self.email}')>"
