from fastapi import APIRouter, Depends, Path, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.api import schemas
from shortener.api.dependencies import get_shortener_service
from shortener.api.errors import not_found, problem_response
from shortener.db.session import get_db
from shortener.services.shortener import ShortenedURLService

router = APIRouter(tags=["urls"])


@router.post(
    "/urls",
    response_model=schemas.URLResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": schemas.ProblemDetails, "description": "Invalid URL"},
        409: {"model": schemas.ProblemDetails, "description": "Short code taken concurrently"},
    }
)
async def create_short_url(
    url_data: schemas.URLCreateRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    shortener_service: ShortenedURLService = Depends(get_shortener_service),
):
    result = await shortener_service.create_short_url(db=db, original_url=url_data.original_url)
    if not result.ok:
        return problem_response(request, result.failure)

    record = result.value
    response.headers["Location"] = str(request.url_for("get_url_info", short_code=record.short_code))
    return schemas.URLResponse.from_record(record)


@router.get(
    "/urls/{short_code}",
    response_model=schemas.URLResponse,
    responses={
        404: {"model": schemas.ProblemDetails, "description": "URL not found"},
    }
)
async def get_url_info(
    request: Request,
    short_code: str = Path(..., description="The short code of the URL"),
    db: AsyncSession = Depends(get_db),
    shortener_service: ShortenedURLService = Depends(get_shortener_service),
):
    record = await shortener_service.get_url_by_code(db, short_code)
    if record is None:
        return not_found(request, short_code)
    return schemas.URLResponse.from_record(record)
