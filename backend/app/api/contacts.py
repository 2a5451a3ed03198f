"""
Contact API endpoints.

WHAT: RESTful API for the people at a customer, the primary contact, and
who is involved in which deal or activity.

HOW: FastAPI router delegating to ContactService. The per-customer,
per-deal and per-activity contact lists live on the customers, deals and
activities routers.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.activity import ActivityListResponse, ActivityResponse
from app.schemas.contact import (
    ContactCreate,
    ContactUpdate,
    ContactResponse,
    ContactListResponse,
)
from app.schemas.deal import DealListResponse, DealResponse
from app.services.contact_service import ContactService


router = APIRouter(prefix="/contacts", tags=["contacts"])


@router.post(
    "",
    response_model=ContactResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create contact",
    description="Add a person to a customer; a customer's first contact becomes primary",
)
async def create_contact(
    data: ContactCreate,
    db: AsyncSession = Depends(get_db),
) -> ContactResponse:
    contact = await ContactService(db).create(data.model_dump())
    return ContactResponse.model_validate(contact)


@router.get(
    "",
    response_model=ContactListResponse,
    summary="List contacts",
    description="All contacts by last name, with optional search",
)
async def list_contacts(
    skip: int = Query(default=0, ge=0, description="Number of items to skip"),
    limit: int = Query(default=50, ge=1, le=200, description="Maximum items to return"),
    search: Optional[str] = Query(
        default=None,
        min_length=1,
        description="Match name, email, job title or department",
    ),
    db: AsyncSession = Depends(get_db),
) -> ContactListResponse:
    service = ContactService(db)
    contacts = await service.list(skip=skip, limit=limit, search=search)
    total = len(contacts) if search else await service.count()
    return ContactListResponse(
        items=[ContactResponse.model_validate(c) for c in contacts],
        total=total,
    )


@router.get(
    "/{contact_id}",
    response_model=ContactResponse,
    summary="Get contact",
)
async def get_contact(
    contact_id: int,
    db: AsyncSession = Depends(get_db),
) -> ContactResponse:
    contact = await ContactService(db).get(contact_id)
    return ContactResponse.model_validate(contact)


@router.patch(
    "/{contact_id}",
    response_model=ContactResponse,
    summary="Update contact",
    description="Moving a contact to another customer drops its deal and activity links",
)
async def update_contact(
    contact_id: int,
    data: ContactUpdate,
    db: AsyncSession = Depends(get_db),
) -> ContactResponse:
    contact = await ContactService(db).update(contact_id, data.model_dump(exclude_unset=True))
    return ContactResponse.model_validate(contact)


@router.delete(
    "/{contact_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete contact",
)
async def delete_contact(
    contact_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    await ContactService(db).delete(contact_id)


@router.post(
    "/{contact_id}/primary",
    response_model=ContactResponse,
    summary="Make primary",
    description="Make this the customer's primary contact",
)
async def set_primary_contact(
    contact_id: int,
    db: AsyncSession = Depends(get_db),
) -> ContactResponse:
    contact = await ContactService(db).set_primary(contact_id)
    return ContactResponse.model_validate(contact)


@router.get(
    "/{contact_id}/deals",
    response_model=DealListResponse,
    summary="Contact's deals",
)
async def list_contact_deals(
    contact_id: int,
    db: AsyncSession = Depends(get_db),
) -> DealListResponse:
    deals = await ContactService(db).list_deals(contact_id)
    return DealListResponse(
        items=[DealResponse.model_validate(d) for d in deals],
        total=len(deals),
        skip=0,
        limit=len(deals),
    )


@router.put(
    "/{contact_id}/deals/{deal_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Link contact to deal",
    description="The deal must belong to the contact's customer",
)
async def link_contact_deal(
    contact_id: int,
    deal_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    await ContactService(db).link_deal(contact_id, deal_id)


@router.delete(
    "/{contact_id}/deals/{deal_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Unlink contact from deal",
)
async def unlink_contact_deal(
    contact_id: int,
    deal_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    await ContactService(db).unlink_deal(contact_id, deal_id)


@router.get(
    "/{contact_id}/activities",
    response_model=ActivityListResponse,
    summary="Contact's activities",
)
async def list_contact_activities(
    contact_id: int,
    db: AsyncSession = Depends(get_db),
) -> ActivityListResponse:
    activities = await ContactService(db).list_activities(contact_id)
    return ActivityListResponse(
        items=[ActivityResponse.model_validate(a) for a in activities],
        total=len(activities),
    )


@router.put(
    "/{contact_id}/activities/{activity_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Link contact to activity",
)
async def link_contact_activity(
    contact_id: int,
    activity_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    await ContactService(db).link_activity(contact_id, activity_id)


@router.delete(
    "/{contact_id}/activities/{activity_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Unlink contact from activity",
)
async def unlink_contact_activity(
    contact_id: int,
    activity_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    await ContactService(db).unlink_activity(contact_id, activity_id)
