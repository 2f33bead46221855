"""Tests for the compressible media type table."""

import pytest

from mongofs.media_types import is_compressible


@pytest.mark.parametrize("media_type", [
    "text/plain",
    "text/html",
    "application/json",
    "application/xml",
    "image/svg+xml",
    "TEXT/CSV",
    "application/json; charset=utf-8",
])
def test_compressible_types(media_type):
    assert is_compressible(media_type)


@pytest.mark.parametrize("media_type", [
    "application/zip",
    "application/gzip",
    "image/png",
    "image/jpeg",
    "video/mp4",
    "application/octet-stream",
    "",
    None,
])
def test_incompressible_types(media_type):
    assert not is_compressible(media_type)


def test_configured_extra_types(monkeypatch):
    monkeypatch.setattr("mongofs.config.COMPRESSIBLE_TYPES", "application/x-custom, application/wasm")

    assert is_compressible("application/x-custom")
    assert is_compressible("application/wasm")
    assert not is_compressible("application/zip")
