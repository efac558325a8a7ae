"""
Models for storing form submissions
"""
from pydantic import BaseModel, Field
from typing import Dict, Any, Optional
from datetime import datetime


class SubmissionCreate(BaseModel):
    responses: Dict[str, Any] = Field(default_factory=dict)
    submittedAt: Optional[datetime] = None


class SubmissionResponse(BaseModel):
    id: str = Field(alias="_id")
    formId: str
    responses: Dict[str, Any]
    submittedAt: datetime
    ipAddress: Optional[str] = None
    userAgent: Optional[str] = None

    model_config = {
        "populate_by_name": True,
    }


class SubmitResult(BaseModel):
    message: str = "Form submitted successfully"
    submissionId: str
