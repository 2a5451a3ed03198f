"""
Deal and pipeline schemas for API request/response validation.

WHAT: Pydantic schemas for deals, deal stages and the pipeline board.

WHY: Value fields are accepted on create and update, but the service
refuses to change them once proposals reference the deal; responses always
show the derived split (subscription vs one-time).
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Deal stages
# ============================================================================


class DealStageCreate(BaseModel):
    """Schema for creating a pipeline stage."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100, description="Stage name")
    color: str = Field(default="#6B7280", max_length=20, description="Hex color")
    order: Optional[int] = Field(
        default=None,
        ge=0,
        description="Pipeline position (appended at the end if omitted)",
    )


class DealStageUpdate(BaseModel):
    """Schema for partial stage updates."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    color: Optional[str] = Field(default=None, max_length=20)
    order: Optional[int] = Field(default=None, ge=0)


class DealStageReorder(BaseModel):
    """New pipeline order, first id becomes position 0."""

    stage_ids: List[int] = Field(..., min_length=1, description="Stage ids in order")


class DealStageResponse(BaseModel):
    """Pipeline stage as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str
    order: int
    is_default: bool


# ============================================================================
# Deals
# ============================================================================


class DealCreate(BaseModel):
    """
    Schema for creating a deal.

    WHY: A bare value is recorded as one-time revenue; give
    subscription_value/one_time_value to split it.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "title": "Website relaunch",
                "customer_id": 1,
                "value": 12000,
                "probability": 60,
            }
        },
    )

    title: str = Field(..., min_length=1, max_length=255, description="Deal title")
    description: Optional[str] = Field(default=None, max_length=10000)
    customer_id: int = Field(..., gt=0, description="Customer the deal belongs to")
    stage_id: Optional[int] = Field(
        default=None,
        gt=0,
        description="Pipeline stage (first stage if omitted)",
    )
    value: Optional[Decimal] = Field(default=None, ge=0, description="Total value")
    subscription_value: Optional[Decimal] = Field(default=None, ge=0)
    one_time_value: Optional[Decimal] = Field(default=None, ge=0)
    probability: int = Field(default=50, ge=0, le=100, description="Win probability (%)")
    expected_close_date: Optional[datetime] = Field(default=None)


class DealUpdate(BaseModel):
    """Schema for partial deal updates; only sent fields change."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=10000)
    customer_id: Optional[int] = Field(default=None, gt=0)
    stage_id: Optional[int] = Field(default=None, gt=0)
    value: Optional[Decimal] = Field(default=None, ge=0)
    subscription_value: Optional[Decimal] = Field(default=None, ge=0)
    one_time_value: Optional[Decimal] = Field(default=None, ge=0)
    probability: Optional[int] = Field(default=None, ge=0, le=100)
    expected_close_date: Optional[datetime] = Field(default=None)


class DealMoveStage(BaseModel):
    """Move a deal to another stage."""

    stage_id: int = Field(..., gt=0)


class DealResponse(BaseModel):
    """Deal as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    customer_id: int
    stage_id: int
    value: Decimal
    subscription_value: Decimal
    one_time_value: Decimal
    weighted_value: Decimal
    probability: int
    expected_close_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class DealListResponse(BaseModel):
    """Paginated deal list."""

    items: List[DealResponse]
    total: int
    skip: int
    limit: int


class DealValuesResponse(BaseModel):
    """Result of a forced revaluation."""

    deal_id: int
    value: Decimal
    subscription_value: Decimal
    one_time_value: Decimal


class PipelineStageSummary(BaseModel):
    """One column of the pipeline board."""

    stage: DealStageResponse
    deal_count: int
    total_value: Decimal
