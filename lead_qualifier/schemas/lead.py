"""
Lead schemas.
"""
import uuid
from typing import Optional
from datetime import datetime
from pydantic import BaseModel


class LeadData(BaseModel):
    """Form submission fields read by the feature extractor."""
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    job_title: Optional[str] = None
    company_name: Optional[str] = None
    company_website: Optional[str] = None
    company_size: Optional[str] = None
    industry: Optional[str] = None
    budget_range: Optional[str] = None
    timeline: Optional[str] = None
    challenge: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "email": "dana@acme.io",
                "first_name": "Dana",
                "last_name": "Reyes",
                "job_title": "VP of Sales",
                "company_name": "Acme",
                "company_size": "500+ employees",
                "industry": "Technology / SaaS",
                "budget_range": "$150,000",
                "timeline": "Immediately"
            }
        }


class LeadCreate(LeadData):
    """Submit a new lead. Email is the only required field."""
    email: str


class LeadResponse(LeadData):
    """Lead with its latest qualification result."""
    id: uuid.UUID
    org_id: uuid.UUID
    status: str
    score: Optional[int] = None
    label: Optional[str] = None
    reasoning: Optional[str] = None
    recommended_action: Optional[str] = None
    qualification_status: str
    qualified_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
