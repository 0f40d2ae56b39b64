"""
Base interfaces for integration providers.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel


class EnrichmentProvider(ABC):
    """
    Base interface for lead enrichment providers (company research, intent
    analysis, authority assessment).

    Providers run concurrently. A provider that fails should raise
    ExternalServiceError; failures are logged and skipped.
    """

    enrichment_type: str = ""  # company_research, intent_analysis, authority_assessment
    name: str = "provider"  # stored as the enrichment source
    confidence: Optional[float] = None

    @abstractmethod
    async def enrich(self, lead: Any) -> Optional[BaseModel]:
        """
        Enrich a lead from its form fields.

        Returns:
            CompanyResearch, IntentAnalysis or AuthorityAssessment matching
            ``enrichment_type``, or None when there is nothing to add.
        """
        pass
