"""
Repositories for contextual lead signals: enrichment, behavior and tracking.
"""
import uuid
from typing import Dict, Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_qualifier.models.enrichment import LeadEnrichment, BehavioralScore, LeadTracking
from lead_qualifier.repositories.base import BaseRepository


class LeadEnrichmentRepository(BaseRepository[LeadEnrichment]):
    """Repository for LeadEnrichment operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(LeadEnrichment, session)

    async def latest_by_type(self, lead_id: uuid.UUID) -> Dict[str, LeadEnrichment]:
        """Most recent enrichment of each type for a lead."""
        query = select(LeadEnrichment).where(
            LeadEnrichment.lead_id == lead_id
        ).order_by(LeadEnrichment.created_at.desc())
        result = await self._exec(query, "List enrichments")

        latest = {}
        for row in result.all():
            latest.setdefault(row.enrichment_type, row)
        return latest

    async def add(
        self,
        lead_id: uuid.UUID,
        enrichment_type: str,
        data: dict,
        confidence: Optional[float] = None,
        source: Optional[str] = None
    ) -> LeadEnrichment:
        return await self.create({
            "lead_id": lead_id,
            "enrichment_type": enrichment_type,
            "data": data,
            "confidence": confidence,
            "source": source,
        })


class BehavioralScoreRepository(BaseRepository[BehavioralScore]):
    """Repository for BehavioralScore operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(BehavioralScore, session)

    async def get_for_lead(self, lead_id: uuid.UUID) -> Optional[BehavioralScore]:
        query = select(BehavioralScore).where(BehavioralScore.lead_id == lead_id)
        result = await self._exec(query, "Get behavioral score")
        return result.first()


class LeadTrackingRepository(BaseRepository[LeadTracking]):
    """Repository for LeadTracking operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(LeadTracking, session)

    async def get_for_lead(self, lead_id: uuid.UUID) -> Optional[LeadTracking]:
        """First-touch attribution for a lead."""
        query = select(LeadTracking).where(
            LeadTracking.lead_id == lead_id
        ).order_by(LeadTracking.created_at)
        result = await self._exec(query, "Get lead tracking")
        return result.first()
