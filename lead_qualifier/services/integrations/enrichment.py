"""
HTTP enrichment providers.
Call an external enrichment API (company research, intent analysis) per lead.
"""
import logging
from typing import Any, Dict, List, Optional, Type

import httpx
from pydantic import BaseModel, ValidationError as SchemaValidationError

from lead_qualifier.config import settings
from lead_qualifier.core.exceptions import ExternalServiceError
from lead_qualifier.models.enrichment import EnrichmentType
from lead_qualifier.schemas.enrichment import CompanyResearch, IntentAnalysis
from lead_qualifier.services.integrations.base import EnrichmentProvider

logger = logging.getLogger(__name__)

LEAD_FIELDS = (
    "email", "first_name", "last_name", "job_title", "company_name", "company_website",
    "company_size", "industry", "budget_range", "timeline", "challenge",
)


class HttpEnrichmentProvider(EnrichmentProvider):
    """
    Posts the lead's form fields to an enrichment endpoint and parses the
    JSON response into the schema for its enrichment type.
    """

    path: str = ""
    schema: Type[BaseModel] = BaseModel

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.client = client

    @property
    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def payload(self, lead: Any) -> Dict[str, Any]:
        return {field: getattr(lead, field, None) for field in LEAD_FIELDS}

    async def _post(self, client: httpx.AsyncClient, lead: Any) -> httpx.Response:
        return await client.post(
            f"{self.base_url}{self.path}",
            headers=self.headers,
            json=self.payload(lead),
            timeout=self.timeout
        )

    async def enrich(self, lead: Any) -> Optional[BaseModel]:
        try:
            if self.client is not None:
                response = await self._post(self.client, lead)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._post(client, lead)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ExternalServiceError(self.name, str(e)) from e

        if not data:
            return None
        try:
            return self.schema.model_validate(data)
        except SchemaValidationError as e:
            raise ExternalServiceError(self.name, f"unexpected response: {e}") from e


class CompanyResearchProvider(HttpEnrichmentProvider):
    enrichment_type = EnrichmentType.COMPANY_RESEARCH
    name = "company_research_api"
    path = "/company-research"
    schema = CompanyResearch


class IntentAnalysisProvider(HttpEnrichmentProvider):
    enrichment_type = EnrichmentType.INTENT_ANALYSIS
    name = "intent_analysis_api"
    path = "/intent-analysis"
    schema = IntentAnalysis
    confidence = 0.8


def build_enrichment_providers() -> List[EnrichmentProvider]:
    """Providers configured in settings; none when ENRICHMENT_API_URL is unset."""
    if not settings.ENRICHMENT_API_URL:
        return []
    kwargs = {
        "base_url": settings.ENRICHMENT_API_URL,
        "api_key": settings.ENRICHMENT_API_KEY,
        "timeout": settings.ENRICHMENT_TIMEOUT,
    }
    return [CompanyResearchProvider(**kwargs), IntentAnalysisProvider(**kwargs)]
