"""Directory listings, analytics and platform statistics.

These are read-only queries over the :class:`~katika.core.store.PortfolioStore`.
The public portfolio listing is built as a small pipeline:

1. **filter** - public portfolios joined to active artists, then the optional
   category and search filters
2. **sort** - views descending, then creation time descending
3. **page** - skip/limit
4. **project** - a reduced field set with only the artist's first media item

The pagination total is the length of the filter stage alone, so it always
matches the filtered set regardless of which page is requested.
"""

from __future__ import annotations

import math
from collections import Counter
from datetime import datetime, timedelta

from katika.core.models import Artist, Portfolio, PortfolioAggregate, utcnow
from katika.core.store import PortfolioStore

RECENT_JOIN_WINDOW = timedelta(days=30)
RECENT_ACTIVITY_LIMIT = 5
TOP_LOCATIONS_LIMIT = 10


def build_pagination(page: int, limit: int, total: int) -> dict:
    """Build the pagination block for a listing.

    Args:
        page: One-based requested page.
        limit: Page size.
        total: Number of results in the filtered set.

    Returns:
        Dictionary with ``current``, ``pages``, ``total``, ``hasNext`` and
        ``hasPrev``.
    """
    return {
        "current": page,
        "pages": math.ceil(total / limit) if limit else 0,
        "total": total,
        "hasNext": page * limit < total,
        "hasPrev": page > 1,
    }


def _contains(haystack: str | None, needle: str) -> bool:
    return bool(haystack) and needle in haystack.casefold()


def _matches_search(aggregate: PortfolioAggregate, term: str) -> bool:
    needle = term.casefold()
    artist = aggregate.artist
    portfolio = aggregate.portfolio
    return (
        _contains(artist.name, needle)
        or _contains(portfolio.title, needle)
        or _contains(portfolio.description, needle)
        or any(_contains(genre, needle) for genre in artist.genres)
    )


def filter_public_portfolios(
    store: PortfolioStore,
    *,
    category: str | None = None,
    search: str | None = None,
) -> list[PortfolioAggregate]:
    """Run the filter stage of the public directory pipeline.

    Args:
        store: Document store to read from.
        category: Exact artist category to keep, if given.
        search: Case-insensitive substring matched against the artist name,
            portfolio title, portfolio description and each artist genre.

    Returns:
        Matching aggregates in store order.
    """
    artists = {artist.id: artist for artist in store.list_artists()}

    matches: list[PortfolioAggregate] = []
    for portfolio in store.list_portfolios():
        if not portfolio.is_public:
            continue
        artist = artists.get(portfolio.artist_id)
        if artist is None or not artist.is_active:
            continue
        if category and artist.category != category:
            continue
        aggregate = PortfolioAggregate(portfolio=portfolio, artist=artist)
        if search and not _matches_search(aggregate, search):
            continue
        matches.append(aggregate)
    return matches


def _project_listing(aggregate: PortfolioAggregate) -> dict:
    portfolio = aggregate.portfolio
    artist = aggregate.artist
    return {
        "id": portfolio.id,
        "title": portfolio.title,
        "description": portfolio.description,
        "template": portfolio.template,
        "views": portfolio.views,
        "createdAt": portfolio.created_at.isoformat(),
        "artist": {
            "name": artist.name,
            "category": artist.category,
            "genres": list(artist.genres),
            "location": artist.location.to_api(),
            "media": [item.to_api() for item in artist.media[:1]],
        },
    }


def query_public_portfolios(
    store: PortfolioStore,
    *,
    page: int = 1,
    limit: int = 12,
    category: str | None = None,
    search: str | None = None,
) -> dict:
    """Return one page of the public portfolio directory.

    Returns:
        Dictionary with ``portfolios`` (projected listings) and
        ``pagination`` (see :func:`build_pagination`).
    """
    matches = filter_public_portfolios(store, category=category, search=search)
    total = len(matches)

    # Two stable sorts: secondary key first, then the primary key.
    ordered = sorted(matches, key=lambda agg: agg.portfolio.created_at, reverse=True)
    ordered.sort(key=lambda agg: agg.portfolio.views, reverse=True)

    start = (page - 1) * limit
    page_items = ordered[start : start + limit]

    return {
        "portfolios": [_project_listing(aggregate) for aggregate in page_items],
        "pagination": build_pagination(page, limit, total),
    }


def portfolio_analytics(portfolio: Portfolio) -> dict:
    """Summarise usage of a single portfolio.

    ``recentActivity`` lists the five newest generated files, newest first.
    The stored list itself is left in generation order.
    """
    files = portfolio.generated_files
    recent = sorted(files, key=lambda item: item.generated_at, reverse=True)[:RECENT_ACTIVITY_LIMIT]
    return {
        "views": portfolio.views,
        "generatedFiles": len(files),
        "lastUpdated": portfolio.updated_at.isoformat(),
        "createdAt": portfolio.created_at.isoformat(),
        "sectionsCount": len(portfolio.sections),
        "isPublic": portfolio.is_public,
        "template": portfolio.template,
        "filesGenerated": {
            "pdf": sum(1 for item in files if item.format == "pdf"),
            "html": sum(1 for item in files if item.format == "html"),
        },
        "recentActivity": [item.to_api() for item in recent],
    }


def _location_matches(artist: Artist, term: str) -> bool:
    needle = term.casefold()
    return _contains(artist.location.city, needle) or _contains(artist.location.country, needle)


def artist_directory(
    store: PortfolioStore,
    *,
    category: str | None = None,
    location: str | None = None,
    featured: bool = False,
    limit: int = 20,
) -> list[dict]:
    """List active, verified artists for the public directory.

    Emails are never included.  Each entry carries a ``portfolio`` summary
    (``title``, ``views``, ``template``) or ``None``.

    Args:
        store: Document store to read from.
        category: Exact category filter.
        location: Case-insensitive substring matched on city or country.
        featured: Sort by views then rating instead of rating then recency.
        limit: Maximum number of artists to return.
    """
    portfolios = {portfolio.id: portfolio for portfolio in store.list_portfolios()}

    artists = [artist for artist in store.list_artists() if artist.is_active and artist.is_verified]
    if category:
        artists = [artist for artist in artists if artist.category == category]
    if location:
        artists = [artist for artist in artists if _location_matches(artist, location)]

    if featured:
        artists.sort(key=lambda artist: artist.rating.average, reverse=True)
        artists.sort(key=lambda artist: artist.views, reverse=True)
    else:
        artists.sort(key=lambda artist: artist.created_at, reverse=True)
        artists.sort(key=lambda artist: artist.rating.average, reverse=True)

    listing = []
    for artist in artists[:limit]:
        entry = artist.public_view()
        portfolio = portfolios.get(artist.portfolio_id) if artist.portfolio_id else None
        entry["portfolio"] = (
            {
                "id": portfolio.id,
                "title": portfolio.title,
                "views": portfolio.views,
                "template": portfolio.template,
            }
            if portfolio
            else None
        )
        listing.append(entry)
    return listing


def platform_stats(store: PortfolioStore, now: datetime | None = None) -> dict:
    """Compute platform-wide artist counters."""
    now = now or utcnow()
    active = [artist for artist in store.list_artists() if artist.is_active]
    total = len(active)
    verified = sum(1 for artist in active if artist.is_verified)
    recent = sum(1 for artist in active if artist.created_at >= now - RECENT_JOIN_WINDOW)

    categories = Counter(artist.category for artist in active)
    countries = Counter(artist.location.country for artist in active if artist.location.country)

    return {
        "totalArtists": total,
        "verifiedArtists": verified,
        "recentJoins": recent,
        "verificationRate": round(verified / total * 100) if total else 0,
        "categoryCounts": [{"category": name, "count": count} for name, count in categories.most_common()],
        "topLocations": [
            {"country": name, "count": count} for name, count in countries.most_common(TOP_LOCATIONS_LIMIT)
        ],
    }
