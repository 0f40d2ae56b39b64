"""
Scoring model API routes.
"""
import uuid
from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_qualifier.database import get_session
from lead_qualifier.services.training_service import TrainingService
from lead_qualifier.schemas.scoring import (
    ModelHistoryResponse, ModelStats, ScoringModelRecord, TrainingResult
)
from lead_qualifier.api.deps import get_org_id

router = APIRouter(prefix="/api/scoring", tags=["scoring"])


@router.post("/retrain", response_model=TrainingResult)
async def retrain_model(
    org_id: uuid.UUID = Depends(get_org_id),
    session: AsyncSession = Depends(get_session)
):
    """Retrain the scoring model from recorded outcomes."""
    training_service = TrainingService(session)
    result = await training_service.retrain(org_id)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": result.error, "reason": result.reason.value if result.reason else None}
        )
    return result


@router.get("/model", response_model=ModelStats)
async def get_model_stats(
    org_id: uuid.UUID = Depends(get_org_id),
    session: AsyncSession = Depends(get_session)
):
    """Active model, outcome counts and whether retraining is recommended."""
    training_service = TrainingService(session)
    return await training_service.get_model_stats(org_id)


@router.get("/models", response_model=ModelHistoryResponse)
async def list_models(
    org_id: uuid.UUID = Depends(get_org_id),
    session: AsyncSession = Depends(get_session)
):
    """List all model versions, newest first."""
    training_service = TrainingService(session)
    models = await training_service.list_models(org_id)
    return {"items": models, "total": len(models)}


@router.post("/models/{model_version}/activate", response_model=ScoringModelRecord)
async def activate_model(
    model_version: int,
    org_id: uuid.UUID = Depends(get_org_id),
    session: AsyncSession = Depends(get_session)
):
    """Roll back to a previous model version."""
    training_service = TrainingService(session)
    return await training_service.rollback(org_id, model_version)
