# models/token.py
"""
Token model - short-lived one-time codes (email verification, password reset).

Only ``pending`` rows may be accepted. ``verified`` and ``expired`` are
terminal. Rows past ``expires_at`` are removed by the expiry sweep in
services.token_service.purge_expired_tokens.
"""
import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship
from .base import Base, new_id, utcnow


class TokenPurpose(str, enum.Enum):
     """What a code authorizes."""
     EMAIL_VERIFICATION = "emailVerification"
     LOGIN = "login"
     RESET_PASSWORD = "resetPassword"


class TokenStatus(str, enum.Enum):
     """Lifecycle state of a code."""
     PENDING = "pending"
     VERIFIED = "verified"
     EXPIRED = "expired"


def _values(enum_cls):
     return [member.value for member in enum_cls]


class Token(Base):
     """
     One-time code issued to a user for a single purpose.
     """

     id = Column(String(36), primary_key=True, default=new_id)
     user_id = Column(
          String(36),
          ForeignKey("users.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     purpose = Column(
          Enum(TokenPurpose, name="token_purpose", values_callable=_values),
          nullable=False,
          index=True
     )
     token = Column(String(255), nullable=False)
     email = Column(String(255), nullable=True)
     expires_at = Column(DateTime, nullable=False, index=True)
     attempts = Column(Integer, default=0, nullable=False)
     status = Column(
          Enum(TokenStatus, name="token_status", values_callable=_values),
          default=TokenStatus.PENDING,
          nullable=False
     )

     # Timestamps
     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

     # Relationships
     user = relationship("User", back_populates="tokens")

     __table_args__ = (
          Index("ix_tokens_code_lookup", "token", "purpose", "status"),
          Index("ix_tokens_email_lookup", "email", "purpose", "status"),
          Index("ix_tokens_email_created", "email", "created_at"),
     )

     def __repr__(self):
          return f"<Token(id={self.id}, purpose='{self.purpose.value}', status='{self.status.value}')>"

     def is_expired(self, now=None) -> bool:
          """True once the wall clock has passed expires_at, whatever the status."""
          return (now or utcnow()) > self.expires_at

     def mark_as_expired(self) -> None:
          self.status = TokenStatus.EXPIRED

     def mark_as_verified(self) -> None:
          self.status = TokenStatus.VERIFIED
