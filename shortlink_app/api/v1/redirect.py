from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from shortlink_app.dependencies import get_redirect_service, rate_limit
from shortlink_app.schemas.url import ErrorResponse
from shortlink_app.services.redirect_service import RedirectService

router = APIRouter(tags=["redirect"])


@router.get(
    "/{code}",
    dependencies=[Depends(rate_limit("redirect"))],
    response_class=RedirectResponse,
    status_code=status.HTTP_302_FOUND,
    responses={
        404: {"model": ErrorResponse, "description": "Unknown code"},
        429: {"model": ErrorResponse, "description": "Rate limited"},
        500: {"model": ErrorResponse, "description": "Store unavailable"},
    },
)
async def redirect_to_target(
    code: str,
    redirect_service: RedirectService = Depends(get_redirect_service)
):
    """
    Redirect to the original URL.

    Cache hit: ~one Redis round trip. Click tracking and cache population
    run in the background, so the response never waits on them.
    UrlNotFoundError -> 404 and StoreError -> 500 via the app's exception
    handlers.
    """
    target_url = await redirect_service.resolve(code)
    return RedirectResponse(url=target_url, status_code=status.HTTP_302_FOUND)
