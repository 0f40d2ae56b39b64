"""
Enrichment service - loads stored enrichments or runs providers for a lead.
"""
import asyncio
import logging
import re
from typing import Any, Dict, Optional, Sequence

from pydantic import ValidationError as SchemaValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_qualifier.models.enrichment import EnrichmentType, LeadEnrichment
from lead_qualifier.repositories.enrichment_repo import LeadEnrichmentRepository
from lead_qualifier.schemas.enrichment import (
    AuthorityAssessment, CompanyResearch, EnrichmentData, IntentAnalysis
)
from lead_qualifier.services.integrations.base import EnrichmentProvider

logger = logging.getLogger(__name__)

ENRICHMENT_SCHEMAS = {
    EnrichmentType.COMPANY_RESEARCH: ("company", CompanyResearch),
    EnrichmentType.INTENT_ANALYSIS: ("intent", IntentAnalysis),
    EnrichmentType.AUTHORITY_ASSESSMENT: ("authority", AuthorityAssessment),
}

# (title patterns, decision_maker_likelihood, title_seniority, buying_role, authority_level)
AUTHORITY_TIERS = (
    ((r"ceo", r"cto", r"cfo", r"coo", r"cmo", r"cio", r"chief", r"(?<!vice[\s-])president",
      r"owner", r"founder", r"co-founder", r"partner"),
     0.95, "executive", "decision_maker", 1.0),
    ((r"vp", r"vice president", r"vice-president", r"svp", r"evp", r"head of"),
     0.85, "vp", "decision_maker", 0.9),
    ((r"director",),
     0.7, "director", "influencer", 0.75),
    ((r"manager", r"lead", r"senior", r"principal"),
     0.5, "manager", "influencer", 0.6),
)
_AUTHORITY_PATTERNS = [
    (re.compile(r"\b(?:" + "|".join(patterns) + r")\b"), likelihood, seniority, role, level)
    for patterns, likelihood, seniority, role, level in AUTHORITY_TIERS
]


def assess_authority(job_title: Optional[str]) -> AuthorityAssessment:
    """Rule-based authority from the job title. Unknown titles count as individual contributors."""
    title = (job_title or "").lower()
    for pattern, likelihood, seniority, role, level in _AUTHORITY_PATTERNS:
        if pattern.search(title):
            return AuthorityAssessment(
                decision_maker_likelihood=likelihood,
                title_seniority=seniority,
                buying_role=role,
                authority_level=level,
            )
    return AuthorityAssessment(
        decision_maker_likelihood=0.2,
        title_seniority="individual_contributor",
        buying_role="user",
        authority_level=0.3,
    )


class AuthorityAssessor(EnrichmentProvider):
    """Authority assessment from the job title alone; no external calls."""

    enrichment_type = EnrichmentType.AUTHORITY_ASSESSMENT
    name = "rule_based"
    confidence = 0.9

    async def enrich(self, lead: Any) -> AuthorityAssessment:
        return assess_authority(getattr(lead, "job_title", None))


class EnrichmentService:
    """Service for lead enrichment."""

    def __init__(self, session: AsyncSession, providers: Optional[Sequence[EnrichmentProvider]] = None):
        self.session = session
        self.enrichment_repo = LeadEnrichmentRepository(session)
        self.providers = list(providers or [])
        self.authority_assessor = AuthorityAssessor()

    async def get_or_enrich(self, lead: Any) -> EnrichmentData:
        """
        Stored enrichments for the lead. Providers run again while neither
        company research nor intent analysis is on record; a stored
        authority assessment is kept.
        """
        stored = await self.enrichment_repo.latest_by_type(lead.id)
        enrichment = self._to_enrichment_data(stored)

        if enrichment.company is None and enrichment.intent is None:
            fresh = await self.enrich_lead(lead, with_authority=enrichment.authority is None)
            enrichment.company = fresh.company
            enrichment.intent = fresh.intent
            if enrichment.authority is None:
                enrichment.authority = fresh.authority

        if enrichment.authority is None:
            enrichment.authority = assess_authority(lead.job_title)
        return enrichment

    async def enrich_lead(self, lead: Any, with_authority: bool = True) -> EnrichmentData:
        """Run the providers concurrently and store what they return."""
        providers = list(self.providers)
        if with_authority:
            providers.append(self.authority_assessor)
        if not providers:
            return EnrichmentData()

        results = await asyncio.gather(
            *(provider.enrich(lead) for provider in providers),
            return_exceptions=True
        )

        collected = {}
        for provider, result in zip(providers, results):
            if isinstance(result, Exception):
                logger.warning(f"Enrichment provider {provider.name} failed for lead {lead.id}: {result}")
                continue
            if isinstance(result, BaseException):
                raise result
            if result is None:
                continue

            await self.enrichment_repo.add(
                lead_id=lead.id,
                enrichment_type=provider.enrichment_type,
                data=result.model_dump(mode="json"),
                confidence=getattr(result, "confidence", None) or provider.confidence,
                source=provider.name
            )
            attr, _ = ENRICHMENT_SCHEMAS[provider.enrichment_type]
            collected[attr] = result

        return EnrichmentData(**collected)

    def _to_enrichment_data(self, stored: Dict[str, LeadEnrichment]) -> EnrichmentData:
        collected = {}
        for enrichment_type, row in stored.items():
            if enrichment_type not in ENRICHMENT_SCHEMAS:
                continue
            attr, schema = ENRICHMENT_SCHEMAS[enrichment_type]
            try:
                collected[attr] = schema.model_validate(row.data)
            except SchemaValidationError:
                logger.warning(f"Ignoring malformed {enrichment_type} enrichment {row.id}")
        return EnrichmentData(**collected)
