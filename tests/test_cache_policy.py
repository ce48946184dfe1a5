"""Tests for per-path cache lifetimes."""

import pytest

from models import ProxiedResponse
from services.cache_policy import DEFAULT_CACHE_SECONDS, IMAGE_CACHE_SECONDS, classify, classify_image


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/library/sections", 600),
        ("/library/sections/5", 600),
        ("/library/sections/5/all", 1800),
        ("/library/metadata/42", 7200),
        ("/library/metadata/42/allLeaves", 1800),
        ("/status/sessions", 0),
        ("/something/unmapped", DEFAULT_CACHE_SECONDS),
    ],
)
def test_classify(path, expected):
    assert classify(path) == expected


def test_default_is_one_hour():
    assert classify("/something/unmapped") == 3600


def test_session_subpaths_use_default():
    # Only the exact live-sessions path is uncached
    assert classify("/status/sessions/history/all") == DEFAULT_CACHE_SECONDS


def test_classify_is_stable():
    results = {classify("/library/sections/3/all") for _ in range(10)}

    assert results == {1800}


def test_images_cached_for_a_day():
    assert classify_image("/library/metadata/1/thumb/1700000000") == IMAGE_CACHE_SECONDS == 86400


class TestCacheControl:

    def test_zero_is_no_store(self):
        assert ProxiedResponse(cache_seconds=0).cache_control == "no-cache, no-store"

    def test_positive_is_public(self):
        assert ProxiedResponse(cache_seconds=600).cache_control == "public, max-age=600, s-maxage=600"
