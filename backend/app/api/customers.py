"""
Customer management API endpoints.

WHAT: RESTful API for customer CRUD plus the customer timeline.

WHY: Customers are the root of the CRM: deals, proposals, invoices and
activities all hang off a customer record.

HOW: FastAPI router delegating to CustomerService; deleting a customer
cascades to their deals, proposals and activities in the database.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.activity import ActivityListResponse, ActivityResponse
from app.schemas.contact import ContactListResponse, ContactResponse
from app.schemas.customer import (
    CustomerCreate,
    CustomerUpdate,
    CustomerResponse,
    CustomerListResponse,
)
from app.services.activity_service import ActivityService
from app.services.contact_service import ContactService
from app.services.customer_service import CustomerService


router = APIRouter(prefix="/customers", tags=["customers"])


@router.post(
    "",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create customer",
    description="Create a customer; the email must not be in use (any letter case)",
)
async def create_customer(
    data: CustomerCreate,
    db: AsyncSession = Depends(get_db),
) -> CustomerResponse:
    """
    Create a new customer.

    Raises:
        ResourceAlreadyExistsError (409): If the email is taken
    """
    customer = await CustomerService(db).create(data.model_dump())
    return CustomerResponse.model_validate(customer)


@router.get(
    "",
    response_model=CustomerListResponse,
    summary="List customers",
    description="Paginated customer list, newest first, with optional search",
)
async def list_customers(
    skip: int = Query(default=0, ge=0, description="Number of items to skip"),
    limit: int = Query(default=20, ge=1, le=100, description="Maximum items to return"),
    search: Optional[str] = Query(
        default=None,
        min_length=1,
        description="Match name, email or company",
    ),
    db: AsyncSession = Depends(get_db),
) -> CustomerListResponse:
    service = CustomerService(db)
    customers = await service.list(skip=skip, limit=limit, search=search)
    total = len(customers) if search else await service.count()
    return CustomerListResponse(
        items=[CustomerResponse.model_validate(c) for c in customers],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get(
    "/{customer_id}",
    response_model=CustomerResponse,
    summary="Get customer",
)
async def get_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
) -> CustomerResponse:
    customer = await CustomerService(db).get(customer_id)
    return CustomerResponse.model_validate(customer)


@router.patch(
    "/{customer_id}",
    response_model=CustomerResponse,
    summary="Update customer",
    description="Update only the fields that are sent",
)
async def update_customer(
    customer_id: int,
    data: CustomerUpdate,
    db: AsyncSession = Depends(get_db),
) -> CustomerResponse:
    customer = await CustomerService(db).update(
        customer_id, data.model_dump(exclude_unset=True)
    )
    return CustomerResponse.model_validate(customer)


@router.delete(
    "/{customer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete customer",
    description="Delete a customer with their deals, proposals and activities",
)
async def delete_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    await CustomerService(db).delete(customer_id)


@router.get(
    "/{customer_id}/activities",
    response_model=ActivityListResponse,
    summary="Customer timeline",
    description="Activities on the customer and on all of the customer's deals",
)
async def list_customer_activities(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
) -> ActivityListResponse:
    activities = await ActivityService(db).list_for_customer(customer_id)
    return ActivityListResponse(
        items=[ActivityResponse.model_validate(a) for a in activities],
        total=len(activities),
    )


@router.get(
    "/{customer_id}/contacts",
    response_model=ContactListResponse,
    summary="Customer contacts",
    description="People at the customer, primary contact first",
)
async def list_customer_contacts(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
) -> ContactListResponse:
    contacts = await ContactService(db).list_for_customer(customer_id)
    return ContactListResponse(
        items=[ContactResponse.model_validate(c) for c in contacts],
        total=len(contacts),
    )
