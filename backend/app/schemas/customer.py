"""
Customer schemas for API request/response validation.

WHAT: Pydantic schemas for customer records.

WHY: Email is the natural key of a customer, so it is validated as an
address on the way in; uniqueness is checked by CustomerService.
"""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class CustomerBase(BaseModel):
    """Fields shared by create and response schemas."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255, description="Contact name")
    email: EmailStr = Field(..., description="Contact email (unique, case-insensitive)")
    phone: Optional[str] = Field(default=None, max_length=50, description="Phone number")
    company: Optional[str] = Field(default=None, max_length=255, description="Company name")
    address: Optional[str] = Field(default=None, max_length=2000, description="Postal address")


class CustomerCreate(CustomerBase):
    """
    Schema for creating a customer.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "phone": "+44 20 7946 0000",
                "company": "Analytical Engines Ltd",
            }
        },
    )


class CustomerUpdate(BaseModel):
    """Schema for partial customer updates; only sent fields change."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = Field(default=None)
    phone: Optional[str] = Field(default=None, max_length=50)
    company: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = Field(default=None, max_length=2000)


class CustomerResponse(BaseModel):
    """Customer as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    # Imported rows are not format-checked, so responses use plain str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CustomerListResponse(BaseModel):
    """Paginated customer list."""

    items: List[CustomerResponse]
    total: int
    skip: int
    limit: int
