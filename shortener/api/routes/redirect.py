"""URL redirection endpoint."""

from fastapi import APIRouter, Depends, Request, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import RedirectResponse

from shortener.api import schemas
from shortener.api.dependencies import get_shortener_service
from shortener.api.errors import not_found
from shortener.core.telemetry import get_meter
from shortener.db.session import get_db
from shortener.middleware.logging import client_ip_from
from shortener.services.shortener import ShortenedURLService

router = APIRouter(tags=["redirect"])

meter = get_meter("url_shortener.redirect")

redirect_counter = meter.create_counter(
    name="url_shortener.redirects",
    description="Number of URL redirects",
    unit="1",
)


@router.get(
    "/{short_code}",
    response_class=RedirectResponse,
    status_code=status.HTTP_302_FOUND,
    responses={
        404: {"model": schemas.ProblemDetails, "description": "URL not found"},
    }
)
async def redirect_to_original_url(
    request: Request,
    short_code: str,
    db: AsyncSession = Depends(get_db),
    shortener_service: ShortenedURLService = Depends(get_shortener_service),
):
    """Redirect to the original URL."""
    url = await shortener_service.get_url_by_code(db, short_code)

    client_ip = client_ip_from(request)
    access_log = logger.bind(
        event_type="url_access",
        short_code=short_code,
        ip=client_ip,
        user_agent=request.headers.get("user-agent", ""),
    )

    if url is None:
        access_log.info(f"Unknown short code requested: {short_code}")
        return not_found(request, short_code)

    redirect_counter.add(1)
    access_log.info(f"URL accessed: {short_code}")
    return RedirectResponse(url=url.original_url, status_code=status.HTTP_302_FOUND)
