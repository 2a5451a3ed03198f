"""
Proposal management API endpoints.

WHAT: RESTful API for proposal CRUD and the send/view/respond workflow.

WHY: Proposals are the priced quotes sent to customers and the source of
truth for deal value:
1. Every create, update, delete and status change revalues the linked deal
2. Totals are always computed server-side
3. Accepted proposals can be invoiced

HOW: FastAPI router delegating to ProposalService.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.models.proposal import Proposal, ProposalStatus
from app.schemas.proposal import (
    ProposalCreate,
    ProposalUpdate,
    ProposalResponse,
    ProposalListResponse,
    ProposalStats,
)
from app.services.proposal_service import ProposalService


router = APIRouter(prefix="/proposals", tags=["proposals"])


def _proposal_to_response(proposal: Proposal) -> ProposalResponse:
    """
    Convert Proposal model to ProposalResponse schema.

    WHY: Centralized conversion ensures consistent response format
    including the computed is_editable/is_expired properties.
    """
    return ProposalResponse.model_validate(proposal)


def _request_to_fields(data, exclude_unset: bool = False) -> dict:
    fields = data.model_dump(exclude_unset=exclude_unset, exclude={"items"})
    if data.items is not None and (not exclude_unset or "items" in data.model_fields_set):
        fields["items"] = [item.to_storage() for item in data.items]
    return fields


@router.post(
    "",
    response_model=ProposalResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create proposal",
    description="Create a DRAFT proposal; totals are calculated and the deal revalued",
)
async def create_proposal(
    data: ProposalCreate,
    db: AsyncSession = Depends(get_db),
) -> ProposalResponse:
    """
    Create a new proposal.

    Raises:
        ResourceNotFoundError (404): If the customer or deal doesn't exist
        AggregationReadError (503): If the deal could not be revalued
    """
    proposal = await ProposalService(db).create(_request_to_fields(data))
    return _proposal_to_response(proposal)


@router.get(
    "",
    response_model=ProposalListResponse,
    status_code=status.HTTP_200_OK,
    summary="List proposals",
    description="Paginated list of proposals, newest first",
)
async def list_proposals(
    skip: int = Query(default=0, ge=0, description="Number of items to skip"),
    limit: int = Query(default=20, ge=1, le=100, description="Maximum items to return"),
    status_filter: Optional[ProposalStatus] = Query(
        default=None,
        alias="status",
        description="Filter by proposal status",
    ),
    customer_id: Optional[int] = Query(default=None, description="Filter by customer"),
    deal_id: Optional[int] = Query(default=None, description="Filter by deal"),
    db: AsyncSession = Depends(get_db),
) -> ProposalListResponse:
    service = ProposalService(db)
    proposals = await service.list_filtered(
        skip=skip,
        limit=limit,
        status=status_filter,
        customer_id=customer_id,
        deal_id=deal_id,
    )

    if deal_id is not None:
        total = await service.proposal_dao.count(deal_id=deal_id)
    elif customer_id is not None:
        total = await service.proposal_dao.count(customer_id=customer_id)
    elif status_filter is not None:
        total = await service.proposal_dao.count(status=status_filter)
    else:
        total = await service.proposal_dao.count()

    return ProposalListResponse(
        items=[_proposal_to_response(p) for p in proposals],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get(
    "/stats",
    response_model=ProposalStats,
    summary="Proposal statistics",
    description="Counts per status and the total value of accepted proposals",
)
async def get_proposal_stats(db: AsyncSession = Depends(get_db)) -> ProposalStats:
    dao = ProposalService(db).proposal_dao
    return ProposalStats(
        by_status=await dao.count_by_status(),
        accepted_value=await dao.calculate_total_value(ProposalStatus.ACCEPTED),
    )


@router.get(
    "/{proposal_id}",
    response_model=ProposalResponse,
    summary="Get proposal",
)
async def get_proposal(
    proposal_id: int,
    db: AsyncSession = Depends(get_db),
) -> ProposalResponse:
    proposal = await ProposalService(db).get(proposal_id)
    return _proposal_to_response(proposal)


@router.patch(
    "/{proposal_id}",
    response_model=ProposalResponse,
    summary="Update proposal",
    description="Update the sent fields; pricing is locked once accepted, rejected or expired",
)
async def update_proposal(
    proposal_id: int,
    data: ProposalUpdate,
    db: AsyncSession = Depends(get_db),
) -> ProposalResponse:
    """
    Update a proposal.

    WHY: Moving a proposal to another deal revalues both deals.

    Raises:
        ProposalNotFoundError (404): If the proposal doesn't exist
        BusinessRuleViolation (422): If pricing changes on an answered proposal
    """
    proposal = await ProposalService(db).update(
        proposal_id, _request_to_fields(data, exclude_unset=True)
    )
    return _proposal_to_response(proposal)


@router.delete(
    "/{proposal_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete proposal",
    description="Delete a proposal and revalue its deal",
)
async def delete_proposal(
    proposal_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    await ProposalService(db).delete(proposal_id)


@router.post(
    "/{proposal_id}/send",
    response_model=ProposalResponse,
    summary="Send proposal",
    description="DRAFT -> SENT",
)
async def send_proposal(
    proposal_id: int,
    db: AsyncSession = Depends(get_db),
) -> ProposalResponse:
    """
    Raises:
        InvalidStateTransitionError (400): If the proposal is not a draft
    """
    proposal = await ProposalService(db).mark_sent(proposal_id)
    return _proposal_to_response(proposal)


@router.post(
    "/{proposal_id}/view",
    response_model=ProposalResponse,
    summary="Mark proposal viewed",
    description="SENT -> VIEWED; any other status is left as is",
)
async def mark_proposal_viewed(
    proposal_id: int,
    db: AsyncSession = Depends(get_db),
) -> ProposalResponse:
    proposal = await ProposalService(db).mark_viewed(proposal_id)
    return _proposal_to_response(proposal)


@router.post(
    "/{proposal_id}/accept",
    response_model=ProposalResponse,
    summary="Accept proposal",
    description="DRAFT/SENT/VIEWED -> ACCEPTED",
)
async def accept_proposal(
    proposal_id: int,
    db: AsyncSession = Depends(get_db),
) -> ProposalResponse:
    proposal = await ProposalService(db).mark_accepted(proposal_id)
    return _proposal_to_response(proposal)


@router.post(
    "/{proposal_id}/reject",
    response_model=ProposalResponse,
    summary="Reject proposal",
    description="DRAFT/SENT/VIEWED -> REJECTED",
)
async def reject_proposal(
    proposal_id: int,
    db: AsyncSession = Depends(get_db),
) -> ProposalResponse:
    proposal = await ProposalService(db).mark_rejected(proposal_id)
    return _proposal_to_response(proposal)


@router.post(
    "/{proposal_id}/expire",
    response_model=ProposalResponse,
    summary="Expire proposal",
    description="DRAFT/SENT/VIEWED -> EXPIRED",
)
async def expire_proposal(
    proposal_id: int,
    db: AsyncSession = Depends(get_db),
) -> ProposalResponse:
    proposal = await ProposalService(db).mark_expired(proposal_id)
    return _proposal_to_response(proposal)
