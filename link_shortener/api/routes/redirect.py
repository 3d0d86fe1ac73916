"""Short code redirection endpoint with click counting."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import RedirectResponse

from link_shortener.api.dependencies import get_click_tracker, get_link_service
from link_shortener.core.config import settings
from link_shortener.core.telemetry import get_meter
from link_shortener.db.session import get_db
from link_shortener.services.clicks import ClickTracker
from link_shortener.services.exceptions import LinkNotFoundError
from link_shortener.services.links import LinkService

meter = get_meter("link_shortener.redirect")

redirects_counter = meter.create_counter(
    name="link_shortener.redirects",
    description="Number of successful redirects",
    unit="1",
)

# Create router with tags
router = APIRouter(prefix=settings.REDIRECT_PREFIX, tags=["redirect"])


@router.get(
    "/{short_code}",
    response_class=RedirectResponse,
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    responses={404: {"description": "Link not found or expired"}}
)
async def redirect_to_original_url(
    request: Request,
    short_code: str,
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
    click_tracker: ClickTracker = Depends(get_click_tracker)
):
    """Redirect to the original URL; the click is counted without delaying the response."""
    try:
        link = await link_service.resolve_redirect(db, short_code)
    except LinkNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    click_tracker.track(link.id)
    redirects_counter.add(1)
    logger.debug("Redirecting", short_code=short_code, path=request.url.path)

    return RedirectResponse(url=link.original_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
