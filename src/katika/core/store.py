"""File-backed document store for artists and portfolios.

The store keeps both collections in a single JSON document::

    {
      "artists": [ {...}, ... ],
      "portfolios": [ {...}, ... ]
    }

Records are kept in insertion order.  Every read-modify-write happens under
one re-entrant lock and rewrites the whole file through a temporary file and
``os.replace``, so a crash mid-write never leaves a truncated store behind and
two concurrent appends to the same portfolio cannot lose each other's entry.

The store owns the uniqueness and referential rules of the data model:

- artist ``email`` is unique
- a portfolio references an existing artist, and an artist owns at most one
  portfolio (tracked through ``Artist.portfolio_id``)
- ``generated_files`` only ever grows, in generation order
"""

from __future__ import annotations

import json
import logging
import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from pydantic import ValidationError

from katika.core.errors import DuplicateKeyError, NotFoundError, ValidationFailedError
from katika.core.models import Artist, GeneratedFile, Portfolio, PortfolioAggregate, utcnow

logger = logging.getLogger(__name__)


def _empty_document() -> dict:
    return {"artists": [], "portfolios": []}


def _validation_details(exc: ValidationError) -> list[str]:
    """Flatten pydantic errors to ``"field: message"`` strings."""
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        details.append(f"{location}: {error['msg']}" if location else error["msg"])
    return details


class PortfolioStore:
    """JSON document store for :class:`Artist` and :class:`Portfolio` records."""

    def __init__(self, path: Path):
        """Open (or lazily create) the store at ``path``.

        Args:
            path: Location of the JSON document.  The parent directory is
                created if it does not exist.
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        logger.info(f"Portfolio store at {self.path}")

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> dict:
        """Read the store document, returning an empty one if it is missing."""
        if not self.path.exists():
            return _empty_document()
        with open(self.path, encoding="utf-8") as handle:
            document = json.load(handle)
        if not isinstance(document, dict):
            raise ValueError(f"Store document at {self.path} is not a JSON object")
        document.setdefault("artists", [])
        document.setdefault("portfolios", [])
        return document

    def _save(self, document: dict) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as handle:
            json.dump(document, handle, indent=2)
        os.replace(tmp_path, self.path)

    @contextmanager
    def _transaction(self) -> Iterator[dict]:
        """Yield the document under the lock and persist it afterwards."""
        with self._lock:
            document = self._load()
            yield document
            self._save(document)

    def ping(self) -> bool:
        """Return ``True`` when the store document is readable."""
        with self._lock:
            self._load()
        return True

    # ------------------------------------------------------------------
    # Artists
    # ------------------------------------------------------------------

    def create_artist(self, payload: dict) -> Artist:
        """Validate and insert a new artist.

        Raises:
            ValidationFailedError: The payload violates the artist schema.
            DuplicateKeyError: Another artist already uses the email.
        """
        try:
            artist = Artist.model_validate(payload)
        except ValidationError as exc:
            raise ValidationFailedError(_validation_details(exc)) from exc

        with self._transaction() as document:
            email = artist.email.lower()
            if any(record["email"].lower() == email for record in document["artists"]):
                raise DuplicateKeyError("email")
            document["artists"].append(artist.to_record())

        logger.info(f"Created artist {artist.id}")
        return artist

    def get_artist(self, artist_id: str) -> Artist:
        with self._lock:
            document = self._load()
        for record in document["artists"]:
            if record["id"] == artist_id:
                return Artist.model_validate(record)
        raise NotFoundError("Artist not found")

    def list_artists(self) -> list[Artist]:
        with self._lock:
            document = self._load()
        return [Artist.model_validate(record) for record in document["artists"]]

    def count_artists(self, *, active_only: bool = False) -> int:
        artists = self.list_artists()
        if active_only:
            return sum(1 for artist in artists if artist.is_active)
        return len(artists)

    # ------------------------------------------------------------------
    # Portfolios
    # ------------------------------------------------------------------

    def create_portfolio(self, artist_id: str, payload: dict) -> PortfolioAggregate:
        """Create a portfolio for an existing artist.

        Args:
            artist_id: Owner of the new portfolio.
            payload: Portfolio fields (``title`` is required).

        Returns:
            The new portfolio with its artist populated.

        Raises:
            NotFoundError: The artist does not exist.
            DuplicateKeyError: The artist already owns a portfolio.
            ValidationFailedError: The payload violates the portfolio schema.
        """
        with self._transaction() as document:
            artist_record = next(
                (record for record in document["artists"] if record["id"] == artist_id),
                None,
            )
            if artist_record is None:
                raise NotFoundError("Artist not found")
            if artist_record.get("portfolio_id"):
                raise DuplicateKeyError("artist", "artist already owns a portfolio")

            try:
                portfolio = Portfolio.model_validate({**payload, "artist_id": artist_id})
            except ValidationError as exc:
                raise ValidationFailedError(_validation_details(exc)) from exc

            document["portfolios"].append(portfolio.to_record())
            artist_record["portfolio_id"] = portfolio.id
            artist_record["updated_at"] = utcnow().isoformat()
            artist = Artist.model_validate(artist_record)

        logger.info(f"Created portfolio {portfolio.id} for artist {artist_id}")
        return PortfolioAggregate(portfolio=portfolio, artist=artist)

    def get_portfolio(self, portfolio_id: str) -> Portfolio:
        with self._lock:
            document = self._load()
        for record in document["portfolios"]:
            if record["id"] == portfolio_id:
                return Portfolio.model_validate(record)
        raise NotFoundError("Portfolio not found")

    def list_portfolios(self) -> list[Portfolio]:
        with self._lock:
            document = self._load()
        return [Portfolio.model_validate(record) for record in document["portfolios"]]

    def count_portfolios(self) -> int:
        return len(self.list_portfolios())

    def get_aggregate(self, portfolio_id: str) -> PortfolioAggregate:
        """Load a portfolio with its artist populated.

        Raises:
            NotFoundError: The portfolio, or the artist it references, is
                missing.
        """
        with self._lock:
            portfolio = self.get_portfolio(portfolio_id)
            try:
                artist = self.get_artist(portfolio.artist_id)
            except NotFoundError:
                logger.error(f"Portfolio {portfolio_id} references missing artist {portfolio.artist_id}")
                raise NotFoundError("Portfolio not found") from None
        return PortfolioAggregate(portfolio=portfolio, artist=artist)

    def record_view(self, portfolio_id: str) -> Portfolio:
        """Increment a portfolio's view counter and return the updated record."""
        with self._transaction() as document:
            record = self._find_portfolio_record(document, portfolio_id)
            record["views"] = int(record.get("views", 0)) + 1
            portfolio = Portfolio.model_validate(record)
        return portfolio

    def append_generated_file(self, portfolio_id: str, generated: GeneratedFile) -> Portfolio:
        """Append a generated-file record to a portfolio.

        Existing entries are never removed or reordered.

        Raises:
            NotFoundError: The portfolio does not exist.
        """
        with self._transaction() as document:
            record = self._find_portfolio_record(document, portfolio_id)
            record.setdefault("generated_files", []).append(generated.to_record())
            record["updated_at"] = utcnow().isoformat()
            portfolio = Portfolio.model_validate(record)

        logger.info(f"Recorded {generated.format} file {generated.filename} for portfolio {portfolio_id}")
        return portfolio

    @staticmethod
    def _find_portfolio_record(document: dict, portfolio_id: str) -> dict:
        for record in document["portfolios"]:
            if record["id"] == portfolio_id:
                return record
        raise NotFoundError("Portfolio not found")
