"""Tests for katika.core.models — record models and their helpers."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from katika.core.models import Artist, Location, Portfolio, PortfolioAggregate, Section


class TestSection:
    """Test Section display helpers."""

    def test_title_takes_precedence(self):
        assert Section(type="gallery", title="Selected Works").display_title() == "Selected Works"

    def test_type_is_capitalised_when_untitled(self):
        assert Section(type="experience").display_title() == "Experience"

    def test_only_first_character_changes(self):
        """The rest of the type keeps its original case."""
        assert Section(type="myAwards").display_title() == "MyAwards"

    def test_empty_type_rejected(self):
        with pytest.raises(ValidationError):
            Section(type="")


class TestLocation:
    """Test Location.display()."""

    def test_city_and_country(self):
        assert Location(city="Accra", country="Ghana").display() == "Accra, Ghana"

    def test_country_only(self):
        assert Location(country="Ghana").display() == "Ghana"

    def test_empty(self):
        assert Location().display() == ""


class TestArtist:
    """Test Artist serialisation helpers."""

    def test_public_view_strips_email(self):
        artist = Artist(name="Ama", email="ama@serwaa.art")
        view = artist.public_view()
        assert "email" not in view
        assert view["name"] == "Ama"

    def test_api_uses_camel_case(self):
        artist = Artist(name="Ama", email="ama@serwaa.art", is_verified=True)
        view = artist.to_api()
        assert view["isVerified"] is True
        assert "socialLinks" in view

    def test_accepts_camel_and_snake_input(self):
        camel = Artist.model_validate({"name": "A", "email": "a@b.co", "socialLinks": {"x": "u"}})
        snake = Artist.model_validate({"name": "A", "email": "a@b.co", "social_links": {"x": "u"}})
        assert camel.social_links == snake.social_links == {"x": "u"}

    def test_populated_social_links_skip_empty(self):
        artist = Artist(
            name="Ama",
            email="ama@serwaa.art",
            social_links={"instagram": "https://i.g/ama", "twitter": "", "tiktok": None},
        )
        assert artist.populated_social_links() == [("instagram", "https://i.g/ama")]

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            Artist(name="   ", email="ama@serwaa.art")

    def test_name_is_stripped(self):
        assert Artist(name=" Ama ", email="ama@serwaa.art").name == "Ama"

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            Artist(name="Ama", email="not-an-email")


class TestPortfolioAggregate:
    """Test PortfolioAggregate serialisation."""

    def test_artist_email_hidden_by_default(self):
        artist = Artist(name="Ama", email="ama@serwaa.art")
        portfolio = Portfolio(artist_id=artist.id, title="Works")
        body = PortfolioAggregate(portfolio=portfolio, artist=artist).to_api()
        assert body["title"] == "Works"
        assert "email" not in body["artist"]

    def test_has_section(self):
        portfolio = Portfolio(artist_id="x", title="T", sections=[Section(type="gallery")])
        assert portfolio.has_section("gallery")
        assert not portfolio.has_section("experience")
