"""
Deal stage API endpoints.

WHAT: Manage the ordered stages of the sales pipeline.

HOW: FastAPI router delegating to DealStageService. A stage holding deals
cannot be deleted (422).
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.deal import (
    DealStageCreate,
    DealStageUpdate,
    DealStageReorder,
    DealStageResponse,
)
from app.services.deal_service import DealStageService


router = APIRouter(prefix="/deal-stages", tags=["deal-stages"])


@router.get(
    "",
    response_model=List[DealStageResponse],
    summary="List stages",
    description="All stages in pipeline order",
)
async def list_stages(db: AsyncSession = Depends(get_db)) -> List[DealStageResponse]:
    stages = await DealStageService(db).list()
    return [DealStageResponse.model_validate(s) for s in stages]


@router.post(
    "/initialize",
    response_model=List[DealStageResponse],
    summary="Create default pipeline",
    description="Create Lead ... Closed Lost when no stage exists yet; otherwise a no-op",
)
async def initialize_stages(db: AsyncSession = Depends(get_db)) -> List[DealStageResponse]:
    stages = await DealStageService(db).initialize_defaults()
    return [DealStageResponse.model_validate(s) for s in stages]


@router.post(
    "",
    response_model=DealStageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create stage",
)
async def create_stage(
    data: DealStageCreate,
    db: AsyncSession = Depends(get_db),
) -> DealStageResponse:
    stage = await DealStageService(db).create(data.model_dump())
    return DealStageResponse.model_validate(stage)


@router.put(
    "/reorder",
    response_model=List[DealStageResponse],
    summary="Reorder stages",
    description="Positions follow the order of the given ids",
)
async def reorder_stages(
    data: DealStageReorder,
    db: AsyncSession = Depends(get_db),
) -> List[DealStageResponse]:
    stages = await DealStageService(db).reorder(data.stage_ids)
    return [DealStageResponse.model_validate(s) for s in stages]


@router.patch(
    "/{stage_id}",
    response_model=DealStageResponse,
    summary="Update stage",
)
async def update_stage(
    stage_id: int,
    data: DealStageUpdate,
    db: AsyncSession = Depends(get_db),
) -> DealStageResponse:
    stage = await DealStageService(db).update(stage_id, data.model_dump(exclude_unset=True))
    return DealStageResponse.model_validate(stage)


@router.delete(
    "/{stage_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete stage",
    description="Delete an empty stage",
)
async def delete_stage(
    stage_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    await DealStageService(db).delete(stage_id)
