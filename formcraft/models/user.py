from pydantic import BaseModel, Field, field_validator
from email_validator import EmailNotValidError, validate_email
from typing import Optional
from datetime import datetime


class Company(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str
    password: str = Field(..., min_length=1)
    company: Optional[Company] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        # Stored exactly as typed; login and uniqueness match it verbatim
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(str(e))
        return v


class UserLogin(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: str = Field(alias="_id")
    name: str
    email: str
    role: str = "user"
    company: Optional[Company] = None
    createdAt: datetime

    model_config = {
        "populate_by_name": True,
    }


class AuthResponse(BaseModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"
