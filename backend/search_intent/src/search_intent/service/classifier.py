import logging
from typing import Optional

from ..config import settings
from ..keyword_rules import KeywordRules
from ..models.schemas import Category, SearchDestination
from ..utils.loader import get_keywords_loader
from ..utils.urls import build_search_url

logger = logging.getLogger(settings.SERVICE_NAME + ".classifier")


def classify(query: Optional[str], rules: Optional[KeywordRules] = None) -> Optional[Category]:
    """
    Decide which section a free-text query belongs to.

    The lower-cased query is tested against the jobs, market, guides and
    community keyword sets in that order and the first set with a matching
    substring wins. Queries matching no set go to the market.

    Args:
        query: Raw text from the search box
        rules: Compiled keyword tables; defaults to the loaded keywords.json

    Returns:
        The destination Category, or None for an empty/whitespace-only query
    """
    if not query or not query.strip():
        return None

    if rules is None:
        rules = get_keywords_loader().get_rules()
    if rules is None:
        logger.error("Keyword rules not available. Falling back to the market section.")
        return Category.MARKET

    term = query.lower()
    category = rules.first_matching_category(term)
    if category is None:
        logger.debug(f"No keyword matched {query!r}; using default {rules.data.default_category.value}")
        return rules.data.default_category

    logger.debug(
        f"Classified {query!r} as {category.value} (keyword {rules.matched_keyword(category, term)!r})"
    )
    return category


def resolve(query: Optional[str], rules: Optional[KeywordRules] = None) -> Optional[SearchDestination]:
    """
    Classify a query and build the URL the search box navigates to.
    The URL carries the query as typed, without trimming.
    """
    category = classify(query, rules)
    if category is None:
        return None
    return SearchDestination(category=category, query=query, url=build_search_url(category, query))
