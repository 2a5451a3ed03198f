"""
Deal management API endpoints.

WHAT: RESTful API for deals and the pipeline board.

WHY: Deals track opportunities through the pipeline. Their value is typed
in by hand only until the first proposal references the deal; from then
on it is derived from the proposals and value edits are refused.

HOW: FastAPI router delegating to DealService.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.activity import ActivityListResponse, ActivityResponse
from app.schemas.contact import ContactIds, ContactListResponse, ContactResponse
from app.schemas.deal import (
    DealCreate,
    DealUpdate,
    DealMoveStage,
    DealResponse,
    DealListResponse,
    DealValuesResponse,
    DealStageResponse,
    PipelineStageSummary,
)
from app.services.activity_service import ActivityService
from app.services.contact_service import ContactService
from app.services.deal_service import DealService


router = APIRouter(prefix="/deals", tags=["deals"])


@router.post(
    "",
    response_model=DealResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create deal",
    description="Create a deal; without stage_id it lands in the first pipeline stage",
)
async def create_deal(
    data: DealCreate,
    db: AsyncSession = Depends(get_db),
) -> DealResponse:
    deal = await DealService(db).create(data.model_dump())
    return DealResponse.model_validate(deal)


@router.get(
    "",
    response_model=DealListResponse,
    summary="List deals",
    description="Paginated deal list, newest first",
)
async def list_deals(
    skip: int = Query(default=0, ge=0, description="Number of items to skip"),
    limit: int = Query(default=20, ge=1, le=100, description="Maximum items to return"),
    stage_id: Optional[int] = Query(default=None, description="Filter by stage"),
    customer_id: Optional[int] = Query(default=None, description="Filter by customer"),
    db: AsyncSession = Depends(get_db),
) -> DealListResponse:
    service = DealService(db)
    deals = await service.list(skip=skip, limit=limit, stage_id=stage_id, customer_id=customer_id)
    filters = {
        k: v for k, v in {"stage_id": stage_id, "customer_id": customer_id}.items()
        if v is not None
    }
    return DealListResponse(
        items=[DealResponse.model_validate(d) for d in deals],
        total=await service.deal_dao.count(**filters),
        skip=skip,
        limit=limit,
    )


@router.get(
    "/pipeline",
    response_model=List[PipelineStageSummary],
    summary="Pipeline board",
    description="Every stage in order with its deal count and total value",
)
async def get_pipeline(db: AsyncSession = Depends(get_db)) -> List[PipelineStageSummary]:
    columns = await DealService(db).pipeline()
    return [
        PipelineStageSummary(
            stage=DealStageResponse.model_validate(column["stage"]),
            deal_count=column["deal_count"],
            total_value=column["total_value"],
        )
        for column in columns
    ]


@router.get(
    "/{deal_id}",
    response_model=DealResponse,
    summary="Get deal",
)
async def get_deal(
    deal_id: int,
    db: AsyncSession = Depends(get_db),
) -> DealResponse:
    deal = await DealService(db).get(deal_id)
    return DealResponse.model_validate(deal)


@router.patch(
    "/{deal_id}",
    response_model=DealResponse,
    summary="Update deal",
    description="Update only the sent fields; value fields are locked once proposals exist",
)
async def update_deal(
    deal_id: int,
    data: DealUpdate,
    db: AsyncSession = Depends(get_db),
) -> DealResponse:
    """
    Update a deal.

    Raises:
        DealNotFoundError (404): If the deal doesn't exist
        BusinessRuleViolation (422): If value fields are edited on a deal
            with proposals
    """
    deal = await DealService(db).update(deal_id, data.model_dump(exclude_unset=True))
    return DealResponse.model_validate(deal)


@router.post(
    "/{deal_id}/stage",
    response_model=DealResponse,
    summary="Move deal",
    description="Move a deal to another pipeline stage",
)
async def move_deal(
    deal_id: int,
    data: DealMoveStage,
    db: AsyncSession = Depends(get_db),
) -> DealResponse:
    deal = await DealService(db).move_to_stage(deal_id, data.stage_id)
    return DealResponse.model_validate(deal)


@router.post(
    "/{deal_id}/recalculate",
    response_model=DealValuesResponse,
    summary="Recalculate deal value",
    description="Re-derive value fields from all proposals of the deal",
)
async def recalculate_deal(
    deal_id: int,
    db: AsyncSession = Depends(get_db),
) -> DealValuesResponse:
    """
    Force a revaluation.

    Raises:
        AggregationReadError (503): If proposals cannot be read; retry later
    """
    values = await DealService(db).recalculate(deal_id)
    return DealValuesResponse(
        deal_id=deal_id,
        value=values.value,
        subscription_value=values.subscription_value,
        one_time_value=values.one_time_value,
    )


@router.delete(
    "/{deal_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete deal",
    description="Delete a deal; its proposals are kept but unlinked",
)
async def delete_deal(
    deal_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    await DealService(db).delete(deal_id)


@router.get(
    "/{deal_id}/activities",
    response_model=ActivityListResponse,
    summary="Deal timeline",
)
async def list_deal_activities(
    deal_id: int,
    db: AsyncSession = Depends(get_db),
) -> ActivityListResponse:
    activities = await ActivityService(db).list_for_deal(deal_id)
    return ActivityListResponse(
        items=[ActivityResponse.model_validate(a) for a in activities],
        total=len(activities),
    )


@router.get(
    "/{deal_id}/contacts",
    response_model=ContactListResponse,
    summary="Deal contacts",
    description="People involved in the deal",
)
async def list_deal_contacts(
    deal_id: int,
    db: AsyncSession = Depends(get_db),
) -> ContactListResponse:
    contacts = await ContactService(db).list_for_deal(deal_id)
    return ContactListResponse(
        items=[ContactResponse.model_validate(c) for c in contacts],
        total=len(contacts),
    )


@router.put(
    "/{deal_id}/contacts",
    response_model=ContactListResponse,
    summary="Set deal contacts",
    description="Replace the people involved in the deal; all must work for the deal's customer",
)
async def set_deal_contacts(
    deal_id: int,
    data: ContactIds,
    db: AsyncSession = Depends(get_db),
) -> ContactListResponse:
    contacts = await ContactService(db).set_deal_contacts(deal_id, data.contact_ids)
    return ContactListResponse(
        items=[ContactResponse.model_validate(c) for c in contacts],
        total=len(contacts),
    )
