"""
Activity API endpoints.

WHAT: Log calls, meetings, emails, notes and tasks against customers and
deals, and list what is still open.

HOW: FastAPI router delegating to ActivityService. Timelines per customer
and per deal live on the customers and deals routers.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.activity import (
    ActivityCreate,
    ActivityUpdate,
    ActivityResponse,
    ActivityListResponse,
)
from app.schemas.contact import ContactIds, ContactListResponse, ContactResponse
from app.services.activity_service import ActivityService
from app.services.contact_service import ContactService


router = APIRouter(prefix="/activities", tags=["activities"])


@router.post(
    "",
    response_model=ActivityResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log activity",
)
async def create_activity(
    data: ActivityCreate,
    db: AsyncSession = Depends(get_db),
) -> ActivityResponse:
    activity = await ActivityService(db).create(**data.model_dump())
    return ActivityResponse.model_validate(activity)


@router.get(
    "/open",
    response_model=ActivityListResponse,
    summary="Open items",
    description="Incomplete activities, soonest due first",
)
async def list_open_activities(
    limit: int = Query(default=50, ge=1, le=200, description="Maximum items to return"),
    db: AsyncSession = Depends(get_db),
) -> ActivityListResponse:
    activities = await ActivityService(db).open_items(limit=limit)
    return ActivityListResponse(
        items=[ActivityResponse.model_validate(a) for a in activities],
        total=len(activities),
    )


@router.get(
    "/{activity_id}",
    response_model=ActivityResponse,
    summary="Get activity",
)
async def get_activity(
    activity_id: int,
    db: AsyncSession = Depends(get_db),
) -> ActivityResponse:
    activity = await ActivityService(db).get(activity_id)
    return ActivityResponse.model_validate(activity)


@router.patch(
    "/{activity_id}",
    response_model=ActivityResponse,
    summary="Update activity",
)
async def update_activity(
    activity_id: int,
    data: ActivityUpdate,
    db: AsyncSession = Depends(get_db),
) -> ActivityResponse:
    activity = await ActivityService(db).update(
        activity_id, data.model_dump(exclude_unset=True)
    )
    return ActivityResponse.model_validate(activity)


@router.post(
    "/{activity_id}/complete",
    response_model=ActivityResponse,
    summary="Complete activity",
)
async def complete_activity(
    activity_id: int,
    db: AsyncSession = Depends(get_db),
) -> ActivityResponse:
    activity = await ActivityService(db).mark_complete(activity_id)
    return ActivityResponse.model_validate(activity)


@router.delete(
    "/{activity_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete activity",
)
async def delete_activity(
    activity_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    await ActivityService(db).delete(activity_id)


@router.get(
    "/{activity_id}/contacts",
    response_model=ContactListResponse,
    summary="Activity contacts",
    description="People who took part in the activity",
)
async def list_activity_contacts(
    activity_id: int,
    db: AsyncSession = Depends(get_db),
) -> ContactListResponse:
    contacts = await ContactService(db).list_for_activity(activity_id)
    return ContactListResponse(
        items=[ContactResponse.model_validate(c) for c in contacts],
        total=len(contacts),
    )


@router.put(
    "/{activity_id}/contacts",
    response_model=ContactListResponse,
    summary="Set activity contacts",
)
async def set_activity_contacts(
    activity_id: int,
    data: ContactIds,
    db: AsyncSession = Depends(get_db),
) -> ContactListResponse:
    contacts = await ContactService(db).set_activity_contacts(activity_id, data.contact_ids)
    return ContactListResponse(
        items=[ContactResponse.model_validate(c) for c in contacts],
        total=len(contacts),
    )
