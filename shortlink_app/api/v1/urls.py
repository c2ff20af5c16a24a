from fastapi import APIRouter, Depends, Response, status

from shortlink_app.dependencies import get_settings, get_shorten_service, rate_limit
from shortlink_app.config import Settings
from shortlink_app.schemas.url import ErrorResponse, ShortenRequest, ShortenResponse
from shortlink_app.services.shorten_service import ShortenService

router = APIRouter(tags=["urls"])


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("shorten"))],
    responses={
        200: {"model": ShortenResponse, "description": "URL was already shortened"},
        400: {"model": ErrorResponse, "description": "Invalid URL, disallowed scheme or too long"},
        429: {"model": ErrorResponse, "description": "Rate limited"},
        503: {"model": ErrorResponse, "description": "No free code found"},
    },
)
async def shorten_url(
    payload: ShortenRequest,
    response: Response,
    shorten_service: ShortenService = Depends(get_shorten_service),
    settings: Settings = Depends(get_settings)
):
    """Create a short code, or return the existing one for an identical URL"""
    result = await shorten_service.shorten(payload.url)
    if not result.created:
        response.status_code = status.HTTP_200_OK
    return ShortenResponse(
        code=result.code,
        short_url=f"{settings.base_url.rstrip('/')}/{result.code}"
    )
