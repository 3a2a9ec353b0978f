import logging
import uuid
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql.elements import ColumnElement

from article_publisher.dates import format_date, parse_date
from article_publisher.errors import NotFoundError, ValidationError
from article_publisher.models import (
    Article,
    DEFAULT_CATEGORY,
    DEFAULT_IMAGE,
    DEFAULT_SITES,
)
from article_publisher.schemas import ArticleIn, ArticleOut

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "description")
EDITABLE_FIELDS = ("title", "description", "image", "category")


def serialize_article(article: Article) -> ArticleOut:
    """Public representation of a stored article."""
    return ArticleOut(
        id=str(article.id),
        title=article.title,
        description=article.description,
        image=article.image,
        category=article.category,
        sites=list(article.sites),
        date=format_date(article.date),
        created_at=article.created_at,
    )


class ArticleStore:
    """Article persistence on top of a single SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, fields: ArticleIn) -> Article:
        missing = [name for name in REQUIRED_FIELDS if not getattr(fields, name)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        article = Article(
            title=fields.title,
            description=fields.description,
            image=fields.image or DEFAULT_IMAGE,
            category=fields.category or DEFAULT_CATEGORY,
            date=parse_date(fields.date),
        )
        article.sites = fields.sites or list(DEFAULT_SITES)
        self.db.add(article)
        self.db.commit()
        self.db.refresh(article)
        logger.info("Created article %s for sites %s", article.id, list(article.sites))
        return article

    def find(self, site_filter: Optional[ColumnElement] = None) -> List[Article]:
        query = self.db.query(Article).options(selectinload(Article.site_entries))
        if site_filter is not None:
            query = query.filter(site_filter)
        return query.order_by(Article.date.desc(), Article.created_at.desc()).all()

    def get(self, article_id: str) -> Article:
        try:
            key = uuid.UUID(str(article_id))
        except ValueError:
            raise NotFoundError(f"Article {article_id} not found")
        article = self.db.query(Article).filter(Article.id == key).first()
        if article is None:
            raise NotFoundError(f"Article {article_id} not found")
        return article

    def update(self, article_id: str, fields: ArticleIn) -> Article:
        article = self.get(article_id)
        manual_date = parse_date(fields.date) if fields.date else None

        for name in EDITABLE_FIELDS:
            value = getattr(fields, name)
            if value is not None:
                setattr(article, name, value)
        # Sites left out of the body are reset, not kept.
        article.sites = fields.sites or list(DEFAULT_SITES)
        if manual_date is not None:
            article.date = manual_date

        self.db.commit()
        self.db.refresh(article)
        logger.info("Updated article %s", article.id)
        return article

    def delete(self, article_id: str) -> None:
        article = self.get(article_id)
        self.db.delete(article)
        self.db.commit()
        logger.info("Deleted article %s", article_id)
