import json

from search_intent.models.schemas import Category
from search_intent.utils.loader import KeywordsLoader, get_keywords_loader


def test_shipped_keywords_load():
    loader = get_keywords_loader()
    data = loader.get_keywords()
    assert data is not None
    assert [ks.category for ks in data.keyword_sets] == [
        Category.JOBS,
        Category.MARKET,
        Category.GUIDES,
        Category.COMMUNITY,
    ]
    assert [g.id for g in data.intent_groups] == ["job-1", "market-1", "guide-1", "community-1"]
    assert len(data.popular_searches) == 4
    assert loader.keyword_counts()[Category.COMMUNITY] == len(data.keyword_sets[3].keywords)


def test_missing_file(tmp_path):
    loader = KeywordsLoader(tmp_path / "nope.json")
    assert loader.get_rules() is None
    assert loader.keyword_counts() == {}


def test_malformed_json(tmp_path):
    path = tmp_path / "keywords.json"
    path.write_text("{not json", encoding="utf-8")
    loader = KeywordsLoader(path)
    assert loader.get_rules() is None
    assert loader.load_keywords() is False


def test_keyword_sets_must_follow_fixed_order(tmp_path):
    info = {"label": "x", "icon": "x"}
    raw = {
        "categories": {c: info for c in ("jobs", "market", "guides", "community")},
        "keyword_sets": [
            {"category": "market", "keywords": ["ขาย"]},
            {"category": "jobs", "keywords": ["งาน"]},
            {"category": "guides", "keywords": ["วัด"]},
            {"category": "community", "keywords": ["คุย"]},
        ],
    }
    path = tmp_path / "keywords.json"
    path.write_text(json.dumps(raw), encoding="utf-8")
    assert KeywordsLoader(path).get_rules() is None


def test_keywords_are_lower_cased(tmp_path):
    info = {"label": "x", "icon": "x"}
    raw = {
        "categories": {c: info for c in ("jobs", "market", "guides", "community")},
        "keyword_sets": [
            {"category": "jobs", "keywords": ["Barista", "  "]},
            {"category": "market", "keywords": ["ขาย"]},
            {"category": "guides", "keywords": ["วัด"]},
            {"category": "community", "keywords": ["คุย"]},
        ],
    }
    path = tmp_path / "keywords.json"
    path.write_text(json.dumps(raw), encoding="utf-8")
    rules = KeywordsLoader(path).get_rules()
    assert rules.data.keyword_sets[0].keywords == ["barista"]
    assert rules.first_matching_category("head barista wanted") is Category.JOBS
