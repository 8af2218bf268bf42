# File: tests/test_utils.py
import pytest

from site_crawler.utils import (
    display_path,
    ensure_scheme,
    extract_domain,
    is_same_domain,
    is_valid_seed,
    normalize_url,
    remove_duplicates,
    should_skip,
)

BASE = "https://example.com/docs/intro"


@pytest.mark.parametrize(
    "href,expected",
    [
        ("/about", "https://example.com/about"),
        ("about/", "https://example.com/docs/about"),
        ("../team#people", "https://example.com/team"),
        ("//example.com/blog/", "https://example.com/blog"),
        ("https://EXAMPLE.com/Path/", "https://example.com/Path"),
        ("/search?q=a#top", "https://example.com/search?q=a"),
        ("https://example.com", "https://example.com/"),
        ("https://example.com/", "https://example.com/"),
        ("#section", "https://example.com/docs/intro"),
        ("  /spaced  ", "https://example.com/spaced"),
    ],
)
def test_normalize_url_resolves_and_canonicalises(href, expected):
    assert normalize_url(href, BASE) == expected


@pytest.mark.parametrize("href", ["http://[::1", "https://example.com:99999/", "http://"])
def test_normalize_url_rejects_malformed(href):
    assert normalize_url(href, BASE) is None


def test_normalize_url_without_absolute_base_is_none():
    assert normalize_url("page", "not-a-url") is None


def test_normalize_url_passes_other_schemes_through():
    assert normalize_url("mailto:x@y.com", BASE) == "mailto:x@y.com"
    assert normalize_url("tel:+123", BASE) == "tel:+123"


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com/a/b/",
        "https://example.com/a//",
        "https://example.com",
        "https://example.com/x?y=1#z",
        "/relative/path/",
        "https://Example.COM:8443/Case/",
    ],
)
def test_normalize_url_is_idempotent(url):
    once = normalize_url(url, BASE)
    assert once is not None
    assert normalize_url(once, url) == once


def test_ensure_scheme():
    assert ensure_scheme("example.com") == "https://example.com"
    assert ensure_scheme("  example.com/a ") == "https://example.com/a"
    assert ensure_scheme("//example.com") == "https://example.com"
    assert ensure_scheme("http://example.com") == "http://example.com"


@pytest.mark.parametrize(
    "url,valid",
    [
        ("https://example.com", True),
        ("http://127.0.0.1:8080/x", True),
        ("https://sub.example.co.uk/", True),
        ("https://not a url and no scheme???", False),
        ("ftp://example.com", False),
        ("https://", False),
        ("https://exa mple.com", False),
    ],
)
def test_is_valid_seed(url, valid):
    assert is_valid_seed(url) is valid


def test_same_domain_is_hostname_equality():
    assert is_same_domain("https://example.com/a", "example.com")
    assert is_same_domain("http://example.com:8080/a", "example.com")
    assert not is_same_domain("https://other.com/x", "example.com")
    assert not is_same_domain("https://www.example.com/", "example.com")
    assert not is_same_domain("mailto:x@example.com", "example.com")
    assert extract_domain("https://Example.com/a") == "example.com"


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com/file.PDF",
        "https://example.com/img/logo.png",
        "https://example.com/static/app.js",
        "https://example.com/theme.css?v=2",
        "https://example.com/download?file=report.docx",
        "mailto:x@y.com",
        "tel:+123456",
        "javascript:void(0)",
    ],
)
def test_should_skip_blocked_resources(url):
    assert should_skip(url, [])


def test_should_skip_disallowed_prefix():
    disallowed = ["/private", "/tmp/"]
    assert should_skip("https://example.com/private/page", disallowed)
    assert should_skip("https://example.com/privateer", disallowed)
    assert should_skip("https://example.com/tmp/x", disallowed)
    assert not should_skip("https://example.com/tmp", disallowed)
    assert not should_skip("https://example.com/public", disallowed)


def test_should_skip_ignores_extension_like_hostnames():
    assert not should_skip("https://cdn.js.example.com/page", [])
    assert not should_skip("https://example.com/about", [])


def test_display_path_and_dedup():
    assert display_path("https://example.com") == "/"
    assert display_path("https://example.com/a/b") == "/a/b"
    assert remove_duplicates(["a", "b", "a", "c", "b"]) == ["a", "b", "c"]
