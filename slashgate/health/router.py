from fastapi import APIRouter, Request

from slashgate.dependencies import get_command_registry, get_settings
from slashgate.models import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    return HealthResponse(
        status="ok",
        commands=len(get_command_registry(request)),
        endpoint=get_settings(request).endpoint,
    )
