"""
Outcome API routes.
"""
import logging
import uuid
from typing import List
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_qualifier.database import async_session, get_session
from lead_qualifier.services.outcome_service import OutcomeService
from lead_qualifier.services.training_service import TrainingService
from lead_qualifier.schemas.outcome import OutcomeCreate, OutcomeRecordedResponse, OutcomeResponse
from lead_qualifier.api.deps import get_org_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/leads", tags=["outcomes"])


async def retrain_in_background(org_id: uuid.UUID):
    """Retrain with a session of its own; the request session is closed by now."""
    async with async_session() as session:
        result = await TrainingService(session).retrain(org_id)
    if not result.success:
        logger.warning(f"Background retraining for org {org_id} failed: {result.error}")


@router.post("/{lead_id}/outcomes", response_model=OutcomeRecordedResponse, status_code=201)
async def record_outcome(
    lead_id: uuid.UUID,
    outcome_in: OutcomeCreate,
    background_tasks: BackgroundTasks,
    auto_retrain: bool = False,
    org_id: uuid.UUID = Depends(get_org_id),
    session: AsyncSession = Depends(get_session)
):
    """Record the outcome of a lead. Optionally retrain once enough outcomes are in."""
    outcome_service = OutcomeService(session)
    response = await outcome_service.record_outcome(org_id, lead_id, outcome_in)
    if auto_retrain and response.retraining_recommended:
        background_tasks.add_task(retrain_in_background, org_id)
        response.retraining_triggered = True
    return response


@router.get("/{lead_id}/outcomes", response_model=List[OutcomeResponse])
async def list_outcomes(
    lead_id: uuid.UUID,
    org_id: uuid.UUID = Depends(get_org_id),
    session: AsyncSession = Depends(get_session)
):
    """List the outcomes recorded for a lead, newest first."""
    outcome_service = OutcomeService(session)
    return await outcome_service.list_outcomes(org_id, lead_id)
