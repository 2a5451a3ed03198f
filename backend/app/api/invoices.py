"""
Invoice API endpoints.

WHAT: Invoice accepted proposals and track payment status.

HOW: FastAPI router delegating to InvoiceService. Invoices are only ever
created from an accepted proposal.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.models.invoice import InvoiceStatus
from app.schemas.invoice import (
    InvoiceFromProposal,
    InvoiceResponse,
    InvoiceListResponse,
)
from app.services.invoice_service import InvoiceService


router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.post(
    "",
    response_model=InvoiceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invoice a proposal",
    description="Create a DRAFT invoice from an accepted proposal",
)
async def create_invoice(
    data: InvoiceFromProposal,
    db: AsyncSession = Depends(get_db),
) -> InvoiceResponse:
    """
    Create an invoice from a proposal.

    Raises:
        ProposalNotFoundError (404): If the proposal doesn't exist
        BusinessRuleViolation (422): If the proposal is not accepted
        ResourceAlreadyExistsError (409): If it was already invoiced
    """
    invoice = await InvoiceService(db).create_from_proposal(
        data.proposal_id, due_days=data.due_days
    )
    return InvoiceResponse.model_validate(invoice)


@router.get(
    "",
    response_model=InvoiceListResponse,
    summary="List invoices",
)
async def list_invoices(
    skip: int = Query(default=0, ge=0, description="Number of items to skip"),
    limit: int = Query(default=20, ge=1, le=100, description="Maximum items to return"),
    customer_id: Optional[int] = Query(default=None, description="Filter by customer"),
    status_filter: Optional[InvoiceStatus] = Query(
        default=None,
        alias="status",
        description="Filter by invoice status",
    ),
    db: AsyncSession = Depends(get_db),
) -> InvoiceListResponse:
    service = InvoiceService(db)
    invoices = await service.list_recent(
        skip=skip, limit=limit, customer_id=customer_id, status=status_filter
    )
    filters = {
        k: v for k, v in {"customer_id": customer_id, "status": status_filter}.items()
        if v is not None
    }
    return InvoiceListResponse(
        items=[InvoiceResponse.model_validate(i) for i in invoices],
        total=await service.invoice_dao.count(**filters),
        skip=skip,
        limit=limit,
    )


@router.post(
    "/update-overdue",
    response_model=List[InvoiceResponse],
    summary="Flag overdue invoices",
    description="Move every sent invoice past its due date to OVERDUE",
)
async def update_overdue_invoices(db: AsyncSession = Depends(get_db)) -> List[InvoiceResponse]:
    invoices = await InvoiceService(db).update_overdue()
    return [InvoiceResponse.model_validate(i) for i in invoices]


@router.get(
    "/{invoice_id}",
    response_model=InvoiceResponse,
    summary="Get invoice",
)
async def get_invoice(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
) -> InvoiceResponse:
    invoice = await InvoiceService(db).get(invoice_id)
    return InvoiceResponse.model_validate(invoice)


@router.post(
    "/{invoice_id}/send",
    response_model=InvoiceResponse,
    summary="Send invoice",
    description="DRAFT -> SENT",
)
async def send_invoice(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
) -> InvoiceResponse:
    invoice = await InvoiceService(db).mark_sent(invoice_id)
    return InvoiceResponse.model_validate(invoice)


@router.post(
    "/{invoice_id}/pay",
    response_model=InvoiceResponse,
    summary="Mark invoice paid",
)
async def pay_invoice(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
) -> InvoiceResponse:
    invoice = await InvoiceService(db).mark_paid(invoice_id)
    return InvoiceResponse.model_validate(invoice)


@router.post(
    "/{invoice_id}/overdue",
    response_model=InvoiceResponse,
    summary="Mark invoice overdue",
    description="SENT -> OVERDUE",
)
async def mark_invoice_overdue(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
) -> InvoiceResponse:
    invoice = await InvoiceService(db).mark_overdue(invoice_id)
    return InvoiceResponse.model_validate(invoice)


@router.post(
    "/{invoice_id}/cancel",
    response_model=InvoiceResponse,
    summary="Cancel invoice",
)
async def cancel_invoice(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
) -> InvoiceResponse:
    invoice = await InvoiceService(db).cancel(invoice_id)
    return InvoiceResponse.model_validate(invoice)
