import pytest

from search_intent.models.schemas import Category
from search_intent.service.classifier import classify, resolve
from search_intent.utils.loader import KeywordsLoader
from search_intent.utils.urls import build_search_url, encode_uri_component

CAFE_QUERY = "คาเฟ่พะเยา"
CAFE_URL = "/guide?search=%E0%B8%84%E0%B8%B2%E0%B9%80%E0%B8%9F%E0%B9%88%E0%B8%9E%E0%B8%B0%E0%B9%80%E0%B8%A2%E0%B8%B2"


@pytest.mark.parametrize("query", ["หางาน", "ครู", "เงินเดือน", "Part Time barista"])
def test_job_keywords_route_to_jobs(query):
    assert classify(query) is Category.JOBS


@pytest.mark.parametrize(
    "query, expected",
    [
        ("มือถือ", Category.MARKET),
        ("HOTEL near the lake", Category.GUIDES),
        ("กาแฟ", Category.GUIDES),
        ("กระทู้", Category.COMMUNITY),
        ("forum", Category.COMMUNITY),
    ],
)
def test_other_sections(query, expected):
    assert classify(query) is expected


def test_unmatched_query_defaults_to_market():
    assert classify("xyz123") is Category.MARKET


def test_job_keywords_take_precedence_over_market():
    # contains both "งาน" and "ขาย"
    assert classify("งานขายของ") is Category.JOBS


@pytest.mark.parametrize("query", ["", "   ", None])
def test_blank_query_is_not_classified(query):
    assert classify(query) is None
    assert resolve(query) is None


def test_resolve_builds_encoded_url():
    destination = resolve(CAFE_QUERY)
    assert destination.category is Category.GUIDES
    assert destination.query == CAFE_QUERY
    assert destination.url == CAFE_URL


def test_resolve_keeps_query_untrimmed():
    assert resolve(" cafe ").url == "/guide?search=%20cafe%20"


def test_encode_uri_component_matches_browser():
    assert encode_uri_component("a b&c/(x)!*'~-_.") == "a%20b%26c%2F(x)!*'~-_."
    assert build_search_url(Category.COMMUNITY, "q=1") == "/community?search=q%3D1"


def test_missing_keywords_fall_back_to_market(tmp_path, monkeypatch):
    loader = KeywordsLoader(tmp_path / "missing.json")
    monkeypatch.setattr("search_intent.service.classifier.get_keywords_loader", lambda: loader)
    assert classify("หางาน") is Category.MARKET
