"""Health check endpoint."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from src.services.health import get_http_status_code, perform_health_check

router = APIRouter()


@router.get("", summary="PostgreSQL and Redis health")
async def health(request: Request) -> JSONResponse:
    state = request.app.state
    result = await perform_health_check(
        db=getattr(state, "db", None),
        redis_url=state.settings.redis_url,
    )
    return JSONResponse(
        status_code=get_http_status_code(result.status),
        content=result.to_dict(),
        headers={"Cache-Control": "no-cache"},
    )
