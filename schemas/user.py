# schemas/user.py
"""
Pydantic schemas for account, verification and password flows.
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
     model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SignupRequest(_CamelModel):
     """Schema for registering a student, agent or admin."""
     full_name: str = Field(..., min_length=1, max_length=200)
     email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
     phone_number: str = Field(..., min_length=7, max_length=30)
     password: str = Field(..., min_length=8, max_length=128)
     role: str = Field(..., description="student, agent or admin")
     university: Optional[str] = Field(None, max_length=255)
     year_of_study: Optional[str] = Field(None, max_length=10, description="100 - 500")

     model_config = ConfigDict(
          alias_generator=to_camel,
          populate_by_name=True,
          json_schema_extra={
               "example": {
                    "fullName": "Ada Obi",
                    "email": "ada@example.com",
                    "phoneNumber": "08012345678",
                    "password": "s3cretpass",
                    "role": "student",
                    "university": "University of Lagos",
                    "yearOfStudy": "200"
               }
          }
     )


class VerifyCodeRequest(BaseModel):
     email: str
     code: str = Field(..., min_length=6, max_length=6)


class EmailRequest(BaseModel):
     """Body of resend-verify-otp, forget-password and resend-reset-otp."""
     email: str


class LoginRequest(BaseModel):
     email: str
     password: str


class ResetPasswordRequest(_CamelModel):
     code: str = Field(..., min_length=1)
     new_password: str


class UserUpdate(_CamelModel):
     """Schema for profile updates. Only fields sent are applied."""
     full_name: Optional[str] = Field(None, min_length=1, max_length=200)
     email: Optional[str] = Field(None, min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
     phone_number: Optional[str] = Field(None, min_length=7, max_length=30)
     password: Optional[str] = Field(None, min_length=8, max_length=128)
     university: Optional[str] = Field(None, max_length=255)
     year_of_study: Optional[str] = Field(None, max_length=10)


class UserResponse(BaseModel):
     """Schema for user response. Never carries the password hash."""
     id: str
     full_name: str
     email: str
     phone_number: str
     is_verified: bool
     role: Optional[str] = None
     university: Optional[str] = None
     year_of_study: Optional[str] = None
     created_at: datetime
     updated_at: datetime

     model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
     token: str
     user: UserResponse


class UserListResponse(BaseModel):
     users: List[UserResponse]
     count: int
