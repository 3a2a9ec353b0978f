from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from article_publisher.models import Article, ArticleSite

RBIOMEDS = "rbiomeds"
ABC_INTERNATIONAL = "abc-international"
BOTH = "both"


def _has_site(site: str) -> ColumnElement:
    return Article.site_entries.any(ArticleSite.site == site)


def build_site_filter(site: Optional[str]) -> Optional[ColumnElement]:
    """Map the ``site`` query parameter to a filter on ``Article``.

    ``None`` means no filtering. ``rbiomeds`` also matches legacy articles
    that have no site entries, and ``both`` requires every known site.
    """
    if not site:
        return None
    if site == RBIOMEDS:
        return or_(_has_site(RBIOMEDS), ~Article.site_entries.any())
    if site == ABC_INTERNATIONAL:
        return _has_site(ABC_INTERNATIONAL)
    if site == BOTH:
        return and_(_has_site(RBIOMEDS), _has_site(ABC_INTERNATIONAL))
    return _has_site(site)
