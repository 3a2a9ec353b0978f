from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Integer
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.ext.associationproxy import association_proxy
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime
import uuid


DEFAULT_IMAGE = (
    "https://images.unsplash.com/photo-1576091160550-217359f42f8c"
    "?q=80&w=2070&auto=format&fit=crop"
)
DEFAULT_CATEGORY = "General"
DEFAULT_SITES = ["rbiomeds"]

Base = declarative_base()


class ArticleSite(Base):
    """One entry of an article's ``sites`` list."""

    __tablename__ = "article_sites"

    id = Column(Integer, primary_key=True, autoincrement=True)
    article_id = Column(
        UUID(as_uuid=True),
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    site = Column(String, nullable=False, index=True)
    position = Column(Integer, nullable=False)

    article = relationship("Article", back_populates="site_entries")


class Article(Base):
    __tablename__ = "articles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    image = Column(String, nullable=False, default=DEFAULT_IMAGE)
    category = Column(String, nullable=False, default=DEFAULT_CATEGORY)
    date = Column(DateTime, nullable=False, default=datetime.now)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    version_id = Column(Integer, nullable=False)

    # Articles written before sites existed have no entries at all.
    site_entries = relationship(
        "ArticleSite",
        back_populates="article",
        order_by="ArticleSite.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )
    sites = association_proxy(
        "site_entries", "site", creator=lambda site: ArticleSite(site=site)
    )

    __mapper_args__ = {"version_id_col": version_id}
