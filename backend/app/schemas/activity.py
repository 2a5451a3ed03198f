"""
Activity schemas.

WHAT: Request/Response models for the activity timeline endpoints.
"""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.activity import ActivityType


class ActivityCreate(BaseModel):
    """
    Schema for logging an activity.

    WHY: An activity without a customer or a deal would not show up on any
    timeline, so at least one reference is required.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    type: ActivityType = Field(default=ActivityType.NOTE)
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=10000)
    customer_id: Optional[int] = Field(default=None, gt=0)
    deal_id: Optional[int] = Field(default=None, gt=0)
    completed: bool = Field(default=False)
    due_date: Optional[datetime] = Field(default=None)

    @model_validator(mode="after")
    def require_reference(self) -> "ActivityCreate":
        if self.customer_id is None and self.deal_id is None:
            raise ValueError("customer_id or deal_id is required")
        return self


class ActivityUpdate(BaseModel):
    """Schema for partial activity updates."""

    model_config = ConfigDict(str_strip_whitespace=True)

    type: Optional[ActivityType] = None
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=10000)
    completed: Optional[bool] = None
    due_date: Optional[datetime] = None


class ActivityResponse(BaseModel):
    """Activity as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    type: ActivityType
    title: str
    description: Optional[str] = None
    customer_id: Optional[int] = None
    deal_id: Optional[int] = None
    completed: bool
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ActivityListResponse(BaseModel):
    """Activities of a timeline."""

    items: List[ActivityResponse]
    total: int
