"""Tests for katika.core.store — the JSON document store."""

from __future__ import annotations

import json
import threading

import pytest

from katika.core.errors import DuplicateKeyError, NotFoundError, ValidationFailedError
from katika.core.models import GeneratedFile
from katika.core.store import PortfolioStore


class TestArtists:
    """Test artist creation and lookup."""

    def test_create_and_get(self, store, artist_payload):
        artist = store.create_artist(artist_payload)
        loaded = store.get_artist(artist.id)
        assert loaded.name == "Amani Wanjiru"
        assert loaded.location.city == "Nairobi"
        assert loaded.social_links["instagram"] == "https://instagram.com/amani"

    def test_records_are_snake_case_on_disk(self, store, sample_artist):
        document = json.loads(store.path.read_text(encoding="utf-8"))
        record = document["artists"][0]
        assert record["id"] == sample_artist.id
        assert "social_links" in record
        assert "socialLinks" not in record

    def test_duplicate_email_rejected(self, store, artist_payload, sample_artist):
        """Email uniqueness ignores case."""
        payload = {**artist_payload, "email": artist_payload["email"].upper()}
        with pytest.raises(DuplicateKeyError) as exc_info:
            store.create_artist(payload)
        assert exc_info.value.field == "email"
        assert store.count_artists() == 1

    def test_invalid_payload_lists_fields(self, store):
        with pytest.raises(ValidationFailedError) as exc_info:
            store.create_artist({"name": "", "email": "nope"})
        details = exc_info.value.details
        assert any(detail.startswith("name") for detail in details)
        assert any(detail.startswith("email") for detail in details)

    def test_missing_artist(self, store):
        with pytest.raises(NotFoundError, match="Artist not found"):
            store.get_artist("does-not-exist")

    def test_count_active_only(self, store, artist_payload):
        store.create_artist(artist_payload)
        store.create_artist({**artist_payload, "email": "other@wanjiru.studio", "isActive": False})
        assert store.count_artists() == 2
        assert store.count_artists(active_only=True) == 1


class TestPortfolios:
    """Test portfolio creation and the artist/portfolio link."""

    def test_create_links_artist(self, store, sample_aggregate, sample_artist):
        assert sample_aggregate.artist.portfolio_id == sample_aggregate.portfolio.id
        assert store.get_artist(sample_artist.id).portfolio_id == sample_aggregate.portfolio.id

    def test_sections_keep_order(self, store, sample_aggregate):
        portfolio = store.get_portfolio(sample_aggregate.portfolio.id)
        assert [section.type for section in portfolio.sections] == ["experience", "gallery"]

    def test_unknown_artist(self, store):
        with pytest.raises(NotFoundError, match="Artist not found"):
            store.create_portfolio("missing", {"title": "Orphan"})
        assert store.count_portfolios() == 0

    def test_second_portfolio_rejected(self, store, sample_aggregate, sample_artist):
        with pytest.raises(DuplicateKeyError) as exc_info:
            store.create_portfolio(sample_artist.id, {"title": "Another"})
        assert exc_info.value.field == "artist"
        assert store.count_portfolios() == 1

    def test_missing_title_rejected(self, store, sample_artist):
        with pytest.raises(ValidationFailedError):
            store.create_portfolio(sample_artist.id, {"description": "No title"})
        assert store.get_artist(sample_artist.id).portfolio_id is None

    def test_get_aggregate(self, store, sample_aggregate):
        aggregate = store.get_aggregate(sample_aggregate.portfolio.id)
        assert aggregate.artist.name == "Amani Wanjiru"
        assert aggregate.portfolio.title == "Walls That Speak"

    def test_get_aggregate_missing(self, store):
        with pytest.raises(NotFoundError, match="Portfolio not found"):
            store.get_aggregate("missing")

    def test_record_view(self, store, sample_aggregate):
        portfolio_id = sample_aggregate.portfolio.id
        store.record_view(portfolio_id)
        updated = store.record_view(portfolio_id)
        assert updated.views == 2
        assert store.get_portfolio(portfolio_id).views == 2


class TestGeneratedFiles:
    """Test the append-only generated files list."""

    def test_append_keeps_order(self, store, sample_aggregate):
        portfolio_id = sample_aggregate.portfolio.id
        first = GeneratedFile(format="pdf", filename="a.pdf", url="/uploads/portfolios/a.pdf")
        second = GeneratedFile(format="html", filename="b.html", url="/uploads/web-portfolios/b.html")
        store.append_generated_file(portfolio_id, first)
        store.append_generated_file(portfolio_id, second)

        files = store.get_portfolio(portfolio_id).generated_files
        assert [item.filename for item in files] == ["a.pdf", "b.html"]

    def test_append_to_missing_portfolio(self, store):
        generated = GeneratedFile(format="pdf", filename="a.pdf", url="/uploads/portfolios/a.pdf")
        with pytest.raises(NotFoundError):
            store.append_generated_file("missing", generated)

    def test_concurrent_appends_are_not_lost(self, store, sample_aggregate):
        """Appends from several threads all land in the list."""
        portfolio_id = sample_aggregate.portfolio.id

        def append(index: int) -> None:
            generated = GeneratedFile(format="pdf", filename=f"{index}.pdf", url=f"/uploads/portfolios/{index}.pdf")
            store.append_generated_file(portfolio_id, generated)

        threads = [threading.Thread(target=append, args=(index,)) for index in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store.get_portfolio(portfolio_id).generated_files) == 10


class TestPersistence:
    """Test that the document survives reopening."""

    def test_reopen(self, test_config, sample_aggregate):
        reopened = PortfolioStore(test_config.store_path)
        assert reopened.count_artists() == 1
        assert reopened.get_portfolio(sample_aggregate.portfolio.id).title == "Walls That Speak"

    def test_ping_on_empty_store(self, store):
        assert store.ping() is True
        assert store.list_portfolios() == []
