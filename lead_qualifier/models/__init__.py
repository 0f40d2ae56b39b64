# Models package - database tables
from lead_qualifier.models.lead import Lead
from lead_qualifier.models.icp import ICPCriterion
from lead_qualifier.models.outcome import LeadOutcome
from lead_qualifier.models.scoring import ScoringModel, ScoringHistory
from lead_qualifier.models.enrichment import LeadEnrichment, BehavioralScore, LeadTracking, EnrichmentType
from lead_qualifier.models.activity import ActivityLog, Actions
