"""
Deal Service.

WHAT: Business logic for deals and the stages of the sales pipeline.

WHY: Two rules live here rather than in the routers:
1. A deal's value fields are owned by its proposals once any exist, so
   manual edits of value, subscription_value or one_time_value are refused
2. A stage that still holds deals cannot be deleted

HOW: Orchestrates DealDAO/DealStageDAO, with DealValuationService used to
answer "does this deal have proposals" and to force a recalculation.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    BusinessRuleViolation,
    CustomerNotFoundError,
    DealNotFoundError,
    DealStageNotFoundError,
    ValidationError,
)
from app.dao.customer import CustomerDAO
from app.dao.deal import DealDAO, DealStageDAO
from app.dao.proposal import ProposalDAO
from app.models.deal import Deal, DealStage
from app.services.activity_service import ActivityService
from app.services.deal_valuation import DealValues, DealValuationService

logger = logging.getLogger(__name__)

VALUE_FIELDS = ("value", "subscription_value", "one_time_value")


def split_values(fields: Dict[str, Any], current: Optional[Deal] = None) -> Dict[str, Decimal]:
    """
    Normalise manually entered values so value = subscription + one-time.

    A bare value is taken as one-time revenue. When either part is given the
    total is recomputed from the parts.
    """
    fields = {k: v for k, v in fields.items() if v is not None}
    if "subscription_value" in fields or "one_time_value" in fields:
        subscription = fields.get(
            "subscription_value", current.subscription_value if current else Decimal(0)
        )
        one_time = fields.get(
            "one_time_value", current.one_time_value if current else Decimal(0)
        )
        subscription = Decimal(subscription or 0)
        one_time = Decimal(one_time or 0)
        return {
            "value": subscription + one_time,
            "subscription_value": subscription,
            "one_time_value": one_time,
        }

    value = Decimal(fields.get("value") or 0)
    return {"value": value, "subscription_value": Decimal(0), "one_time_value": value}


class DealStageService:
    """Service for pipeline stage operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.stage_dao = DealStageDAO(session)
        self.deal_dao = DealDAO(session)

    async def get(self, stage_id: int) -> DealStage:
        stage = await self.stage_dao.get_by_id(stage_id)
        if stage is None:
            raise DealStageNotFoundError(
                message=f"Deal stage with id {stage_id} not found",
                resource_type="DealStage",
                resource_id=stage_id,
            )
        return stage

    async def list(self) -> List[DealStage]:
        return await self.stage_dao.get_ordered()

    async def initialize_defaults(self) -> List[DealStage]:
        """Create the default pipeline when there are no stages yet."""
        return await self.stage_dao.ensure_default_stages()

    async def create(self, data: Dict[str, Any]) -> DealStage:
        fields = dict(data)
        if fields.get("order") is None:
            stages = await self.stage_dao.get_ordered()
            fields["order"] = (stages[-1].order + 1) if stages else 1
        return await self.stage_dao.create(**fields)

    async def update(self, stage_id: int, data: Dict[str, Any]) -> DealStage:
        await self.get(stage_id)
        return await self.stage_dao.update(stage_id, **data)

    async def delete(self, stage_id: int) -> None:
        """
        Delete an empty stage.

        Raises:
            BusinessRuleViolation: If deals are still in the stage
        """
        await self.get(stage_id)
        deal_count = await self.deal_dao.count(stage_id=stage_id)
        if deal_count:
            raise BusinessRuleViolation(
                message=f"Stage still contains {deal_count} deal(s); move them first",
                stage_id=stage_id,
                deal_count=deal_count,
            )
        await self.stage_dao.delete(stage_id)

    async def reorder(self, stage_ids: List[int]) -> List[DealStage]:
        known = {stage.id for stage in await self.stage_dao.get_ordered()}
        unknown = [stage_id for stage_id in stage_ids if stage_id not in known]
        if unknown:
            raise ValidationError(
                message=f"Unknown stage ids: {unknown}",
                field="stage_ids",
            )
        return await self.stage_dao.reorder(stage_ids)


class DealService:
    """Service for deal operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.deal_dao = DealDAO(session)
        self.stage_dao = DealStageDAO(session)
        self.customer_dao = CustomerDAO(session)
        self.proposal_dao = ProposalDAO(session)
        self.valuation = DealValuationService(session)
        self.activities = ActivityService(session)

    async def get(self, deal_id: int) -> Deal:
        deal = await self.deal_dao.get_by_id(deal_id)
        if deal is None:
            raise DealNotFoundError(
                message=f"Deal with id {deal_id} not found",
                resource_type="Deal",
                resource_id=deal_id,
            )
        return deal

    async def list(
        self,
        skip: int = 0,
        limit: int = 100,
        stage_id: Optional[int] = None,
        customer_id: Optional[int] = None,
    ) -> List[Deal]:
        return await self.deal_dao.list_recent(
            skip=skip, limit=limit, stage_id=stage_id, customer_id=customer_id
        )

    async def _check_customer(self, customer_id: int) -> None:
        if not await self.customer_dao.exists(id=customer_id):
            raise CustomerNotFoundError(
                message=f"Customer with id {customer_id} not found",
                resource_type="Customer",
                resource_id=customer_id,
            )

    async def _resolve_stage_id(self, stage_id: Optional[int]) -> int:
        if stage_id is None:
            stages = await self.stage_dao.ensure_default_stages()
            return stages[0].id
        if not await self.stage_dao.exists(id=stage_id):
            raise DealStageNotFoundError(
                message=f"Deal stage with id {stage_id} not found",
                resource_type="DealStage",
                resource_id=stage_id,
            )
        return stage_id

    async def create(self, data: Dict[str, Any]) -> Deal:
        """
        Create a deal.

        WHAT: Validates the customer, puts the deal in the given stage or the
        first stage of the pipeline, and stores the manually entered value.
        """
        fields = {k: v for k, v in data.items() if k not in VALUE_FIELDS}
        await self._check_customer(fields["customer_id"])
        fields["stage_id"] = await self._resolve_stage_id(fields.get("stage_id"))
        fields.update(split_values(data))

        deal = await self.deal_dao.create(**fields)
        logger.info("Deal %s created (value=%s)", deal.id, deal.value)
        await self.activities.record_note(
            title=f"Deal created: {deal.title}",
            customer_id=deal.customer_id,
            deal_id=deal.id,
        )
        return deal

    async def update(self, deal_id: int, data: Dict[str, Any]) -> Deal:
        """
        Update a deal.

        Raises:
            DealNotFoundError: If the deal doesn't exist
            BusinessRuleViolation: If a value field is edited while proposals
                reference the deal
        """
        deal = await self.get(deal_id)
        fields = {k: v for k, v in data.items() if k not in VALUE_FIELDS}

        if any(name in data for name in VALUE_FIELDS):
            if await self.valuation.has_proposals(deal_id):
                raise BusinessRuleViolation(
                    message="Deal value is calculated from its proposals and cannot be edited",
                    deal_id=deal_id,
                )
            fields.update(split_values(data, current=deal))

        if "customer_id" in fields:
            await self._check_customer(fields["customer_id"])
        if "stage_id" in fields:
            fields["stage_id"] = await self._resolve_stage_id(fields["stage_id"])

        return await self.deal_dao.update(deal_id, **fields)

    async def move_to_stage(self, deal_id: int, stage_id: int) -> Deal:
        deal = await self.get(deal_id)
        await self._resolve_stage_id(stage_id)
        deal = await self.deal_dao.move_to_stage(deal_id, stage_id)
        await self.activities.record_note(
            title=f"Deal moved to stage {stage_id}",
            customer_id=deal.customer_id,
            deal_id=deal_id,
        )
        return deal

    async def delete(self, deal_id: int) -> None:
        """
        Delete a deal.

        Proposals survive without a deal; activities on the deal are removed.
        """
        await self.get(deal_id)
        unlinked = await self.proposal_dao.unlink_deal(deal_id)
        await self.deal_dao.delete(deal_id)
        logger.info("Deal %s deleted (%d proposal(s) unlinked)", deal_id, unlinked)

    async def recalculate(self, deal_id: int) -> DealValues:
        """Force a revaluation from the deal's proposals."""
        return await self.valuation.recalculate(deal_id)

    async def pipeline(self) -> List[Dict[str, Any]]:
        """
        Pipeline board: every stage in order with its deal count and value.
        """
        stages = await self.stage_dao.get_ordered()
        summary = await self.deal_dao.pipeline_summary()
        return [
            {
                "stage": stage,
                "deal_count": summary.get(stage.id, {}).get("count", 0),
                "total_value": summary.get(stage.id, {}).get("value", Decimal(0)),
            }
            for stage in stages
        ]
