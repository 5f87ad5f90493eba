"""News route handlers."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clubhouse.database.db import get_db_session
from clubhouse.services import news_service
from clubhouse.api.auth_dependencies import require_manager_or_admin
from clubhouse.models.schemas import NewsCreate, NewsResponse
from clubhouse.utils.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/news", response_model=List[NewsResponse])
async def list_news(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    session: AsyncSession = Depends(get_db_session),
):
    """List news, newest first. Readable by guests."""
    try:
        return await news_service.list_news(session, limit=limit)
    except Exception as e:
        logger.error(f"Error fetching news: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching news")


@router.post("/api/news", response_model=NewsResponse)
async def create_news(
    payload: NewsCreate,
    user: dict = Depends(require_manager_or_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Publish a news article (managers and admins)."""
    try:
        return await news_service.create_news(
            session,
            created_by=user["id"],
            author=user["email"],
            title=payload.title,
            content=payload.content,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error publishing news: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error publishing news")


@router.get("/api/news/{news_id}", response_model=NewsResponse)
async def get_news(news_id: int, session: AsyncSession = Depends(get_db_session)):
    """Get a news article."""
    try:
        article = await news_service.get_news(session, news_id)
        if article is None:
            raise HTTPException(status_code=404, detail="News article not found")
        return article
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching news {news_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching news")
