"""Tests for katika.core.errors — status codes and response bodies."""

from __future__ import annotations

import pytest

from katika.core.errors import (
    DuplicateKeyError,
    GenerationError,
    InvalidTokenError,
    NotFoundError,
    TokenExpiredError,
    UnexpectedUploadError,
    UploadTooLargeError,
    ValidationFailedError,
    error_payload,
)


class TestErrorPayload:
    """Test error_payload() for known and unknown exceptions."""

    @pytest.mark.parametrize(
        "exc, status, body",
        [
            (NotFoundError("Portfolio not found"), 404, {"error": "Portfolio not found"}),
            (
                ValidationFailedError(["title: Field required"]),
                400,
                {"error": "Validation failed", "details": ["title: Field required"]},
            ),
            (DuplicateKeyError("email"), 400, {"error": "email already exists", "field": "email"}),
            (InvalidTokenError(), 401, {"error": "Invalid token"}),
            (TokenExpiredError(), 401, {"error": "Token expired"}),
            (UploadTooLargeError(), 400, {"error": "File too large", "maxSize": "10MB"}),
            (
                UnexpectedUploadError(),
                400,
                {"error": "Too many files or unexpected field name"},
            ),
            (
                GenerationError("Failed to save portfolio file info"),
                500,
                {"error": "Failed to save portfolio file info"},
            ),
        ],
    )
    def test_known_errors(self, exc, status, body):
        """Known errors keep their status and body in every environment."""
        assert error_payload(exc, production=True) == (status, body)
        assert error_payload(exc, production=False) == (status, body)

    def test_unknown_error_in_development(self):
        try:
            raise RuntimeError("disk on fire")
        except RuntimeError as exc:
            status, body = error_payload(exc, production=False)
        assert status == 500
        assert body["error"] == "disk on fire"
        assert "RuntimeError: disk on fire" in body["stack"]

    def test_unknown_error_in_production(self):
        status, body = error_payload(RuntimeError("disk on fire"), production=True)
        assert status == 500
        assert body == {"error": "disk on fire"}

    def test_empty_message(self):
        _, body = error_payload(RuntimeError(), production=True)
        assert body == {"error": "Internal Server Error"}

    def test_custom_duplicate_message(self):
        exc = DuplicateKeyError("artist", "artist already owns a portfolio")
        assert error_payload(exc, production=True) == (
            400,
            {"error": "artist already owns a portfolio", "field": "artist"},
        )
