"""
News service for club announcements.
"""

from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from clubhouse.database.models import NewsArticle
from clubhouse.utils.datetime_utils import isoformat_or_none
import logging

logger = logging.getLogger(__name__)


def news_to_dict(article: NewsArticle) -> Dict:
    return {
        "id": article.id,
        "title": article.title,
        "content": article.content,
        "author": article.author,
        "created_by": article.created_by,
        "created_at": isoformat_or_none(article.created_at),
    }


async def create_news(
    session: AsyncSession, created_by: int, author: str, title: str, content: str
) -> Dict:
    """
    Publish a news article.

    Raises:
        ValueError: If the title or content is blank
    """
    if not title or not title.strip() or not content or not content.strip():
        raise ValueError("Title and content are required")

    article = NewsArticle(
        title=title.strip(), content=content.strip(), author=author, created_by=created_by
    )
    session.add(article)
    await session.flush()
    await session.refresh(article)

    logger.info(f"News article {article.id} published by {created_by}")
    return news_to_dict(article)


async def list_news(session: AsyncSession, limit: int = 50) -> List[Dict]:
    """List news articles, newest first."""
    result = await session.execute(
        select(NewsArticle)
        .order_by(NewsArticle.created_at.desc(), NewsArticle.id.desc())
        .limit(limit)
    )
    return [news_to_dict(article) for article in result.scalars().all()]


async def get_news(session: AsyncSession, news_id: int) -> Optional[Dict]:
    article = await session.get(NewsArticle, news_id)
    return news_to_dict(article) if article else None
