from fastapi import APIRouter, Depends

from shortlink_app.dependencies import get_stats_service, rate_limit
from shortlink_app.schemas.url import CodeStats, ErrorResponse, GlobalStats
from shortlink_app.services.stats_service import StatsService

router = APIRouter(
    tags=["analytics"],
    dependencies=[Depends(rate_limit("redirect"))],
    responses={429: {"model": ErrorResponse, "description": "Rate limited"}},
)


@router.get("/stats", response_model=GlobalStats)
async def get_global_stats(stats_service: StatsService = Depends(get_stats_service)):
    """Total mappings and clicks across the service (cached for a few minutes)"""
    return await stats_service.global_stats()


@router.get(
    "/{code}/stats",
    response_model=CodeStats,
    responses={404: {"model": ErrorResponse, "description": "Unknown code"}},
)
async def get_code_stats(
    code: str,
    stats_service: StatsService = Depends(get_stats_service)
):
    """Total clicks and per-day click counts for one code"""
    return await stats_service.code_stats(code)
