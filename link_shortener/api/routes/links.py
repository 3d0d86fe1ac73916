"""Owner-scoped link management endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from link_shortener.api import schemas
from link_shortener.api.dependencies import get_current_user, get_link_service, get_short_url_base
from link_shortener.api.params import LimitParam, OffsetParam
from link_shortener.db.session import get_db
from link_shortener.models.user import User
from link_shortener.services.exceptions import (
    AliasConflictError,
    InvalidAliasError,
    InvalidURLError,
    LinkAccessDeniedError,
    LinkNotFoundError,
    ShortCodeExhaustedError,
)
from link_shortener.services.links import LinkService

router = APIRouter(prefix="/links", tags=["links"])


@router.post(
    "",
    response_model=schemas.LinkResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": schemas.ErrorResponse, "description": "Invalid URL or alias"},
        409: {"model": schemas.ErrorResponse, "description": "Alias already exists"},
        503: {"model": schemas.ErrorResponse, "description": "No free short code"}
    }
)
async def create_link(
    payload: schemas.LinkCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
    short_url_base: str = Depends(get_short_url_base)
):
    owner_id = current_user.id
    try:
        link = await link_service.create_link(
            db,
            owner_id=owner_id,
            original_url=payload.original_url,
            custom_alias=payload.custom_alias,
            title=payload.title,
            expires_at=payload.expires_at
        )
    except (InvalidURLError, InvalidAliasError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AliasConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ShortCodeExhaustedError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return schemas.LinkResponse.from_link(link, short_url_base)


@router.get("", response_model=schemas.LinkListResponse)
async def list_links(
    limit: int = LimitParam(),
    offset: int = OffsetParam(),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
    short_url_base: str = Depends(get_short_url_base)
):
    links, total = await link_service.list_links(db, current_user.id, limit=limit, offset=offset)
    return schemas.LinkListResponse(
        links=[schemas.LinkResponse.from_link(link, short_url_base) for link in links],
        total=total,
        limit=limit,
        offset=offset
    )


@router.get("/stats", response_model=schemas.LinkStatsResponse)
async def link_stats(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service)
):
    return schemas.LinkStatsResponse(**await link_service.get_stats(db, current_user.id))


@router.get(
    "/{link_id}",
    response_model=schemas.LinkResponse,
    responses={
        403: {"model": schemas.ErrorResponse, "description": "Link belongs to another user"},
        404: {"model": schemas.ErrorResponse, "description": "Link not found"}
    }
)
async def get_link(
    link_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
    short_url_base: str = Depends(get_short_url_base)
):
    try:
        link = await link_service.get_link(db, current_user.id, link_id)
    except LinkNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link not found")
    except LinkAccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    return schemas.LinkResponse.from_link(link, short_url_base)


@router.put(
    "/{link_id}",
    response_model=schemas.LinkResponse,
    responses={
        400: {"model": schemas.ErrorResponse, "description": "Invalid URL or alias"},
        403: {"model": schemas.ErrorResponse, "description": "Link belongs to another user"},
        404: {"model": schemas.ErrorResponse, "description": "Link not found"},
        409: {"model": schemas.ErrorResponse, "description": "Alias already exists"}
    }
)
async def update_link(
    link_id: uuid.UUID,
    payload: schemas.LinkUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
    short_url_base: str = Depends(get_short_url_base)
):
    owner_id = current_user.id
    try:
        link = await link_service.update_link(
            db,
            owner_id=owner_id,
            link_id=link_id,
            changes=payload.model_dump(exclude_unset=True)
        )
    except LinkNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link not found")
    except LinkAccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except (InvalidURLError, InvalidAliasError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AliasConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return schemas.LinkResponse.from_link(link, short_url_base)


@router.delete(
    "/{link_id}",
    response_model=schemas.MessageResponse,
    responses={
        403: {"model": schemas.ErrorResponse, "description": "Link belongs to another user"},
        404: {"model": schemas.ErrorResponse, "description": "Link not found"}
    }
)
async def delete_link(
    link_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service)
):
    owner_id = current_user.id
    try:
        await link_service.delete_link(db, owner_id=owner_id, link_id=link_id)
    except LinkNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link not found")
    except LinkAccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    return schemas.MessageResponse(message="Link deleted successfully")
