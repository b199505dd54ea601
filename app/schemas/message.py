from datetime import date
from typing import Literal, Optional

from pydantic import Field

from app.schemas.base import CamelModel


class ViewingRequest(CamelModel):
    requested_date: date
    requested_time: Optional[str] = None
    status: Literal["pending", "accepted", "rejected", "completed"] = "pending"
    notes: Optional[str] = Field(None, max_length=500)


class MessageCreate(CamelModel):
    receiver: str
    property: str
    subject: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1, max_length=1000)
    type: Literal["inquiry", "response", "general"] = "inquiry"
    viewing_request: Optional[ViewingRequest] = None
