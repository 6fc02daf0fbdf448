"""Stage endpoints - browse the stage catalog."""

from fastapi import APIRouter, HTTPException

from dataentry.core.errors import StageCatalogError
from dataentry.schemas.stage import StageSummary
from dataentry.services.stage_service import stage_service

router = APIRouter()


@router.get("/", response_model=list[StageSummary])
async def list_stages():
    """List all stages in play order."""
    try:
        return stage_service.list_stages()
    except StageCatalogError as e:
        raise HTTPException(status_code=500, detail=str(e))
