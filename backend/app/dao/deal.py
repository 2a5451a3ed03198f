"""
Deal and DealStage Data Access Objects (DAO).

WHAT: Database operations for the sales pipeline.

WHY: The pipeline board groups deals by stage in stage order, and the
CSV importer needs to resolve stage names and fall back to the first
stage. The derived value columns of a deal are written through a
dedicated method so it is obvious where they change.
"""

from decimal import Decimal
from typing import List, Optional, Dict
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.dao.base import BaseDAO
from app.models.deal import Deal, DealStage, DEFAULT_STAGES


class DealStageDAO(BaseDAO[DealStage]):
    """Data Access Object for DealStage model."""

    def __init__(self, session: AsyncSession):
        super().__init__(DealStage, session)

    async def get_ordered(self) -> List[DealStage]:
        """
        Get all stages in pipeline order.

        Returns:
            Stages sorted by order, then id
        """
        result = await self.session.execute(
            select(DealStage).order_by(DealStage.order.asc(), DealStage.id.asc())
        )
        return list(result.scalars().all())

    async def get_by_name(self, name: str) -> Optional[DealStage]:
        """Find a stage by name, ignoring case."""
        result = await self.session.execute(
            select(DealStage)
            .where(func.lower(DealStage.name) == name.strip().lower())
            .order_by(DealStage.order.asc(), DealStage.id.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_first(self) -> Optional[DealStage]:
        """Get the first stage in pipeline order."""
        result = await self.session.execute(
            select(DealStage).order_by(DealStage.order.asc(), DealStage.id.asc()).limit(1)
        )
        return result.scalar_one_or_none()

    async def ensure_default_stages(self) -> List[DealStage]:
        """
        Create the default pipeline if no stage exists yet.

        Returns:
            All stages in pipeline order
        """
        if await self.count() == 0:
            for name, color, order in DEFAULT_STAGES:
                self.session.add(
                    DealStage(name=name, color=color, order=order, is_default=True)
                )
            await self.session.flush()
        return await self.get_ordered()

    async def reorder(self, stage_ids: List[int]) -> List[DealStage]:
        """
        Assign pipeline positions from the given id order.

        Args:
            stage_ids: Stage ids in their new order (position = index)

        Returns:
            All stages in the new order
        """
        stages = {stage.id: stage for stage in await self.get_ordered()}
        for position, stage_id in enumerate(stage_ids):
            stage = stages.get(stage_id)
            if stage is not None:
                stage.order = position
        await self.session.flush()
        return await self.get_ordered()


class DealDAO(BaseDAO[Deal]):
    """Data Access Object for Deal model."""

    def __init__(self, session: AsyncSession):
        super().__init__(Deal, session)

    async def list_recent(
        self,
        skip: int = 0,
        limit: int = 100,
        stage_id: Optional[int] = None,
        customer_id: Optional[int] = None,
    ) -> List[Deal]:
        """
        List deals newest first with optional stage/customer filters.
        """
        query = select(Deal)
        if stage_id is not None:
            query = query.where(Deal.stage_id == stage_id)
        if customer_id is not None:
            query = query.where(Deal.customer_id == customer_id)
        query = query.order_by(Deal.created_at.desc(), Deal.id.desc()).offset(skip).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    def lock_query(self, deal_id: int):
        """SELECT ... FOR UPDATE for one deal."""
        return select(Deal).where(Deal.id == deal_id).with_for_update()

    async def get_for_update(self, deal_id: int) -> Optional[Deal]:
        """
        Load a deal and lock its row until the transaction ends.

        WHY: Writers of the derived value columns queue on this lock, so a
        second writer reads proposals only after the first has committed.
        SQLite ignores FOR UPDATE and serialises writers on its own.
        """
        result = await self.session.execute(self.lock_query(deal_id))
        return result.scalar_one_or_none()

    async def move_to_stage(self, deal_id: int, stage_id: int) -> Optional[Deal]:
        """Move a deal to another pipeline stage."""
        return await self.update(deal_id, stage_id=stage_id)

    async def set_values(
        self,
        deal_id: int,
        value: Decimal,
        subscription_value: Decimal,
        one_time_value: Decimal,
    ) -> Optional[Deal]:
        """
        Write the derived value columns of a deal.

        WHY: Only DealValuationService should call this; the values are
        re-derived from proposals, never edited by hand.
        """
        return await self.update(
            deal_id,
            value=value,
            subscription_value=subscription_value,
            one_time_value=one_time_value,
        )

    async def pipeline_summary(self) -> Dict[int, Dict[str, Decimal]]:
        """
        Sum deal count and value per stage.

        Returns:
            Mapping of stage_id to {"count", "value"}
        """
        result = await self.session.execute(
            select(Deal.stage_id, func.count(Deal.id), func.coalesce(func.sum(Deal.value), 0))
            .group_by(Deal.stage_id)
        )
        return {
            row[0]: {"count": row[1], "value": Decimal(str(row[2]))}
            for row in result.all()
        }
