"""Katika portfolio backend - FastAPI application.

This module builds the web application and defines every REST route plus the
``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Configuration** is a :class:`~katika.core.config.KatikaConfig` passed into
  :func:`create_app`.  It is stored on ``app.state.config``; nothing is read
  from module-level globals.
- **Persistence** is a :class:`~katika.core.store.PortfolioStore` (a JSON
  document store) created by :func:`create_app` and kept on
  ``app.state.store``.
- **Documents** are rendered by :mod:`katika.render.pdf` and
  :mod:`katika.render.html` and written under ``config.uploads_dir``, which is
  mounted at ``/uploads``.
- **Errors** are raised as :class:`~katika.core.errors.KatikaError` subclasses
  and converted to JSON by the handlers registered in
  :func:`register_error_handlers`.

Endpoints
---------
========  ==================================  ==================================
Method    Path                                Purpose
========  ==================================  ==================================
POST      ``/artists``                        Create an artist
GET       ``/artists/directory``              Public artist listing
GET       ``/artists/stats``                  Platform-wide counters
GET       ``/artists/{id}``                   Public artist profile
POST      ``/portfolios``                     Create a portfolio for an artist
GET       ``/portfolios/public``              Paged public directory
GET       ``/portfolios/{id}``                Public portfolio (counts a view)
POST      ``/portfolios/{id}/generate-pdf``   Render and record a PDF
POST      ``/portfolios/{id}/generate-web``   Render and record a microsite
GET       ``/portfolios/{id}/analytics``      Usage stats for one portfolio
GET       ``/health``                         Liveness/readiness probe
========  ==================================  ==================================

Usage
-----
CLI (installed entry point)::

    katika

Direct invocation::

    python -m katika.api.main
"""

from __future__ import annotations

import logging
import os
import re
import resource
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from katika import __version__
from katika.api.models import ArtistCreateRequest, GenerateWebRequest, PortfolioCreateRequest
from katika.core.config import PDF_SUBDIR, WEB_SUBDIR, KatikaConfig
from katika.core.customization import apply_defaults
from katika.core.directory import (
    artist_directory,
    platform_stats,
    portfolio_analytics,
    query_public_portfolios,
)
from katika.core.errors import (
    GenerationError,
    KatikaError,
    NotFoundError,
    ValidationFailedError,
    error_payload,
)
from katika.core.logging_setup import configure_logging
from katika.core.models import GeneratedFile, PortfolioAggregate
from katika.core.store import PortfolioStore
from katika.render.html import render_portfolio_html
from katika.render.pdf import render_portfolio_pdf

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Dependencies.
# ---------------------------------------------------------------------------


def get_config(request: Request) -> KatikaConfig:
    return request.app.state.config


def get_store(request: Request) -> PortfolioStore:
    return request.app.state.store


# ---------------------------------------------------------------------------
# Helpers.
# ---------------------------------------------------------------------------


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def domain_slug(name: str) -> str:
    """Lower-case a name and collapse whitespace runs into hyphens.

    Characters that cannot appear in a DNS label are dropped, so the result
    may be empty for names written entirely in punctuation or non-ASCII
    letters.
    """
    slug = re.sub(r"\s+", "-", name.strip().lower())
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    return re.sub(r"-{2,}", "-", slug).strip("-")[:63].rstrip("-")


def _creation_view(aggregate: PortfolioAggregate) -> dict:
    """Portfolio with the owner's name, email, category and experience."""
    body = aggregate.portfolio.to_api()
    artist = aggregate.artist
    body["artist"] = {
        "id": artist.id,
        "name": artist.name,
        "email": artist.email,
        "category": artist.category,
        "experience": artist.experience,
    }
    return body


# ---------------------------------------------------------------------------
# Static uploads.
# ---------------------------------------------------------------------------

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


class UploadFiles(StaticFiles):
    """Static files for the uploads directory.

    PDFs are served for in-browser viewing and images are cacheable for a day.
    """

    def file_response(self, full_path, *args, **kwargs):
        response = super().file_response(full_path, *args, **kwargs)
        suffix = os.path.splitext(str(full_path))[1].lower()
        if suffix == ".pdf":
            response.headers["Content-Disposition"] = "inline"
        elif suffix in IMAGE_SUFFIXES:
            response.headers["Cache-Control"] = "public, max-age=86400"
        return response


# ---------------------------------------------------------------------------
# Artist routes.
# ---------------------------------------------------------------------------


@router.post("/artists", status_code=201)
async def create_artist(
    req: ArtistCreateRequest,
    store: PortfolioStore = Depends(get_store),
) -> dict:
    """Create an artist.

    Raises:
        DuplicateKeyError: 400 when the email is already registered.
    """
    artist = store.create_artist(req.model_dump(exclude_unset=True))
    return {"message": "Artist created successfully", "artist": artist.public_view()}


@router.get("/artists/directory")
async def get_artist_directory(
    category: str | None = None,
    location: str | None = None,
    featured: bool = False,
    limit: int | None = Query(default=None, ge=1, le=100),
    store: PortfolioStore = Depends(get_store),
    config: KatikaConfig = Depends(get_config),
) -> dict:
    """List active, verified artists.  Emails are never included."""
    artists = artist_directory(
        store,
        category=category,
        location=location,
        featured=featured,
        limit=limit or config.artist_directory_limit,
    )
    return {"artists": artists}


@router.get("/artists/stats")
async def get_artist_stats(store: PortfolioStore = Depends(get_store)) -> dict:
    """Return platform-wide artist counters."""
    return {"stats": platform_stats(store)}


@router.get("/artists/{artist_id}")
async def get_artist(artist_id: str, store: PortfolioStore = Depends(get_store)) -> dict:
    """Return the public profile of one artist."""
    return {"artist": store.get_artist(artist_id).public_view()}


# ---------------------------------------------------------------------------
# Portfolio routes.
# ---------------------------------------------------------------------------


@router.post("/portfolios", status_code=201)
async def create_portfolio(
    req: PortfolioCreateRequest,
    store: PortfolioStore = Depends(get_store),
) -> dict:
    """Create a portfolio for an existing artist.

    Customisation fields left out of the request are filled with platform
    defaults before the portfolio is stored.

    Raises:
        NotFoundError: 404 when the artist does not exist.
        DuplicateKeyError: 400 when the artist already owns a portfolio.
    """
    payload = req.model_dump(exclude_unset=True, exclude={"artist_id", "customizations"})
    payload["customizations"] = apply_defaults(req.customizations).to_record()
    if payload.get("template") is None:
        payload.pop("template", None)

    aggregate = store.create_portfolio(req.artist_id, payload)
    return {"message": "Portfolio created successfully", "portfolio": _creation_view(aggregate)}


@router.get("/portfolios/public")
async def list_public_portfolios(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1, le=100),
    category: str | None = None,
    search: str | None = None,
    store: PortfolioStore = Depends(get_store),
    config: KatikaConfig = Depends(get_config),
) -> dict:
    """Return one page of public portfolios with pagination metadata."""
    return query_public_portfolios(
        store,
        page=page,
        limit=limit or config.directory_page_size,
        category=category,
        search=search or None,
    )


@router.get("/portfolios/{portfolio_id}")
async def get_portfolio(portfolio_id: str, store: PortfolioStore = Depends(get_store)) -> dict:
    """Return a public portfolio with its artist profile and count the view.

    Private portfolios are reported as missing and their views are not counted.
    """
    if not store.get_portfolio(portfolio_id).is_public:
        raise NotFoundError("Portfolio not found")
    store.record_view(portfolio_id)
    aggregate = store.get_aggregate(portfolio_id)
    return {"portfolio": aggregate.to_api()}


@router.post("/portfolios/{portfolio_id}/generate-pdf")
async def generate_pdf(
    portfolio_id: str,
    store: PortfolioStore = Depends(get_store),
    config: KatikaConfig = Depends(get_config),
) -> dict:
    """Render a portfolio to PDF and record the generated file.

    The file is written and closed before its record is appended.  If the
    record cannot be saved, the file is removed again so that no PDF exists
    without a matching record.

    Raises:
        NotFoundError: 404 when the portfolio (or its artist) is missing.
        GenerationError: 500 when rendering or saving fails.
    """
    aggregate = store.get_aggregate(portfolio_id)

    filename = f"portfolio-{portfolio_id}-{_epoch_ms()}.pdf"
    filepath = config.pdf_dir / filename

    try:
        with open(filepath, "wb") as sink:
            pages = render_portfolio_pdf(
                aggregate,
                sink,
                brand_name=config.brand_name,
                brand_site=f"www.{config.brand_domain}",
            )
    except NotFoundError:
        filepath.unlink(missing_ok=True)
        raise
    except Exception as exc:
        logger.error(f"PDF rendering failed for portfolio {portfolio_id}: {exc}")
        filepath.unlink(missing_ok=True)
        raise GenerationError(f"Failed to render portfolio PDF: {exc}") from exc

    file_size = filepath.stat().st_size
    url = f"/uploads/{PDF_SUBDIR}/{filename}"

    try:
        store.append_generated_file(
            portfolio_id,
            GeneratedFile(format="pdf", filename=filename, url=url),
        )
    except Exception as exc:
        logger.error(f"Could not record PDF {filename}, removing it: {exc}")
        filepath.unlink(missing_ok=True)
        raise GenerationError("Failed to save portfolio file info") from exc

    return {
        "message": "Enhanced portfolio PDF generated successfully",
        "downloadUrl": url,
        "filename": filename,
        "fileSize": file_size,
        "pages": len(pages),
    }


@router.post("/portfolios/{portfolio_id}/generate-web")
async def generate_web(
    portfolio_id: str,
    req: GenerateWebRequest | None = None,
    store: PortfolioStore = Depends(get_store),
    config: KatikaConfig = Depends(get_config),
) -> dict:
    """Render a static HTML microsite and record the generated file.

    Raises:
        NotFoundError: 404 when the portfolio (or its artist) is missing.
        ValidationFailedError: 400 when no domain is given and none can be
            derived from the artist name.
        GenerationError: 500 when writing or saving fails.
    """
    req = req or GenerateWebRequest()
    aggregate = store.get_aggregate(portfolio_id)

    document = render_portfolio_html(
        aggregate,
        include_email=req.include_email,
        brand_name=config.brand_name,
    )

    domain = req.custom_domain or domain_slug(aggregate.artist.name)
    if not domain:
        raise ValidationFailedError(
            ["customDomain: no domain can be derived from the artist name; provide one"]
        )
    filename = f"{domain}-{_epoch_ms()}.html"
    filepath = config.web_dir / filename
    url = f"/uploads/{WEB_SUBDIR}/{filename}"

    try:
        filepath.write_text(document, encoding="utf-8")
        store.append_generated_file(
            portfolio_id,
            GeneratedFile(format="html", filename=filename, url=url),
        )
    except Exception as exc:
        logger.error(f"Could not write or record microsite {filename}: {exc}")
        filepath.unlink(missing_ok=True)
        raise GenerationError("Failed to save portfolio file info") from exc

    return {
        "message": "Web portfolio generated successfully",
        "liveUrl": f"https://{domain}.{config.brand_domain}",
        "previewUrl": url,
        "filename": filename,
        "domain": domain,
    }


@router.get("/portfolios/{portfolio_id}/analytics")
async def get_portfolio_analytics(
    portfolio_id: str,
    store: PortfolioStore = Depends(get_store),
) -> dict:
    """Return usage statistics for one portfolio."""
    return {"analytics": portfolio_analytics(store.get_portfolio(portfolio_id))}


# ---------------------------------------------------------------------------
# Health.
# ---------------------------------------------------------------------------


@router.get("/health")
async def health_check(request: Request) -> JSONResponse:
    """Report store connectivity, storage, memory and uptime."""
    config: KatikaConfig = request.app.state.config
    store: PortfolioStore = request.app.state.store
    timestamp = datetime.now(timezone.utc).isoformat()

    try:
        store.ping()
        artists = store.count_artists(active_only=True)
        portfolios = store.count_portfolios()
    except Exception as exc:
        logger.error(f"Health check failed: {exc}")
        return JSONResponse(
            status_code=500,
            content={"status": "ERROR", "message": str(exc), "timestamp": timestamp},
        )

    # ru_maxrss is reported in kilobytes on Linux.
    max_rss_mb = round(resource.getrusage(resource.RUSAGE_SELF).ru_maxrss / 1024)

    return JSONResponse(
        status_code=200,
        content={
            "status": "OK",
            "timestamp": timestamp,
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
            "environment": config.environment,
            "version": __version__,
            "database": {
                "status": "connected",
                "artists": artists,
                "portfolios": portfolios,
            },
            "storage": {"uploadsDirectory": config.uploads_dir.exists()},
            "memory": {"used": f"{max_rss_mb} MB"},
        },
    )


# ---------------------------------------------------------------------------
# Error handling.
# ---------------------------------------------------------------------------


def register_error_handlers(app: FastAPI) -> None:
    """Convert raised exceptions into the JSON error shapes."""

    def respond(request: Request, exc: Exception, status_code: int | None = None) -> JSONResponse:
        production = request.app.state.config.is_production
        payload_status, body = error_payload(exc, production=production)
        status_code = status_code or payload_status
        log = logger.error if status_code >= 500 else logger.info
        log(f"{request.method} {request.url.path} -> {status_code}: {body['error']}")
        return JSONResponse(status_code=status_code, content=body)

    @app.exception_handler(KatikaError)
    async def handle_katika_error(request: Request, exc: KatikaError) -> JSONResponse:
        return respond(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Routing failures (unknown path, wrong method) raised by Starlette itself.
        response = respond(request, KatikaError(str(exc.detail)), status_code=exc.status_code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = []
        for error in exc.errors():
            # Drop the leading "body"/"query" segment of the location.
            location = ".".join(str(part) for part in error["loc"][1:])
            details.append(f"{location}: {error['msg']}" if location else error["msg"])
        return respond(request, ValidationFailedError(details))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        return respond(request, exc)


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(config: KatikaConfig | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Configuration to run with.  When omitted, a
            :class:`KatikaConfig` is loaded from the environment.

    Returns:
        A configured application with its store, routes, static mount and
        error handlers in place.
    """
    config = config or KatikaConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(config.log_level)
        logger.info(f"Katika {__version__} starting ({config.environment}), store at {config.store_path}")
        yield
        logger.info("Katika shutting down.")

    app = FastAPI(
        title="Katika Portfolio API",
        description="Artist portfolios rendered as PDF documents and static microsites.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.store = PortfolioStore(config.store_path)
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Generated PDFs and microsites are served directly from the uploads dir.
    app.mount("/uploads", UploadFiles(directory=str(config.uploads_dir)), name="uploads")

    register_error_handlers(app)
    app.include_router(router)
    return app


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Host and port come from ``KATIKA_SERVER_HOST`` and ``KATIKA_SERVER_PORT``.
    This function is registered as the ``katika`` console script.
    """
    import uvicorn

    config = KatikaConfig()
    configure_logging(config.log_level)
    uvicorn.run(
        "katika.api.main:create_app",
        factory=True,
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
