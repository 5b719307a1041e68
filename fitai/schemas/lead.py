from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, EmailStr, Field


class LeadFormData(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    goal: str = Field(default="")
    experience: Literal["beginner", "intermediate", "advanced"] = Field(default="beginner")


class LeadSubmissionResponse(BaseModel):
    id: str
    message: str
