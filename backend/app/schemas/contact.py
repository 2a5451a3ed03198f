"""
Contact schemas for API request/response validation.

WHAT: Pydantic schemas for the people at a customer and their links to
deals and activities.
"""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class ContactCreate(BaseModel):
    """
    Schema for adding a contact to a customer.

    WHY: The first contact of a customer becomes primary regardless of
    is_primary; ContactService enforces that.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "customer_id": 1,
                "first_name": "Charles",
                "last_name": "Babbage",
                "email": "charles@example.com",
                "title": "CTO",
                "is_primary": True,
            }
        },
    )

    customer_id: int = Field(..., gt=0)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=50)
    mobile: Optional[str] = Field(default=None, max_length=50)
    title: Optional[str] = Field(default=None, max_length=100, description="Job title")
    department: Optional[str] = Field(default=None, max_length=100)
    is_primary: bool = Field(default=False)
    notes: Optional[str] = Field(default=None, max_length=10000)


class ContactUpdate(BaseModel):
    """Schema for partial contact updates."""

    model_config = ConfigDict(str_strip_whitespace=True)

    customer_id: Optional[int] = Field(default=None, gt=0)
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    mobile: Optional[str] = Field(default=None, max_length=50)
    title: Optional[str] = Field(default=None, max_length=100)
    department: Optional[str] = Field(default=None, max_length=100)
    is_primary: Optional[bool] = None
    notes: Optional[str] = Field(default=None, max_length=10000)


class ContactResponse(BaseModel):
    """Contact as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: Optional[str] = None
    mobile: Optional[str] = None
    title: Optional[str] = None
    department: Optional[str] = None
    is_primary: bool
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ContactListResponse(BaseModel):
    """Contact list."""

    items: List[ContactResponse]
    total: int


class ContactIds(BaseModel):
    """Replacement set of contacts for a deal or an activity."""

    contact_ids: List[int] = Field(default_factory=list)
