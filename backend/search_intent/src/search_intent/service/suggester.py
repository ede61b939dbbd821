import logging
from typing import List, Optional

from ..config import settings
from ..keyword_rules import KeywordRules
from ..models.schemas import CATEGORY_ORDER, CategorySummary, Suggestion, SuggestionTemplate
from ..utils.loader import get_keywords_loader
from ..utils.urls import build_search_url

logger = logging.getLogger(settings.SERVICE_NAME + ".suggester")


def _get_rules(rules: Optional[KeywordRules]) -> Optional[KeywordRules]:
    if rules is not None:
        return rules
    rules = get_keywords_loader().get_rules()
    if rules is None:
        logger.error("Keyword rules not available. Cannot build suggestions.")
    return rules


def _fill(template: SuggestionTemplate, query: str) -> Suggestion:
    return Suggestion(
        id=template.id,
        text=template.template.format(query=query),
        category=template.category,
        icon=template.icon,
        url=build_search_url(template.category, query),
    )


def generate_suggestions(
    query: Optional[str],
    show_suggestions: bool = True,
    rules: Optional[KeywordRules] = None,
) -> List[Suggestion]:
    """
    Build the dropdown suggestions for the text typed so far.

    Each intent group whose keywords appear in the lower-cased query adds one
    suggestion, in group order. When no group matches, the fixed fallback
    list (market, jobs, guides) is returned so the dropdown is never empty.

    Args:
        query: Current search box text
        show_suggestions: Feature flag; when False nothing is suggested
        rules: Compiled keyword tables; defaults to the loaded keywords.json

    Returns:
        Suggestions in display order
    """
    if not show_suggestions or not query or not query.strip():
        return []

    rules = _get_rules(rules)
    if rules is None:
        return []

    term = query.lower()
    suggestions = [_fill(group, query) for group in rules.matching_intent_groups(term)]
    if not suggestions:
        suggestions = [_fill(template, query) for template in rules.data.fallback_suggestions]

    logger.debug(f"Generated {len(suggestions)} suggestions for {query!r}")
    return suggestions


def popular_searches(rules: Optional[KeywordRules] = None) -> List[Suggestion]:
    """The static list shown before anything is typed."""
    rules = _get_rules(rules)
    if rules is None:
        return []
    return [
        Suggestion(
            id=entry.id,
            text=entry.text,
            category=entry.category,
            icon=entry.icon,
            url=build_search_url(entry.category, entry.search),
        )
        for entry in rules.data.popular_searches
    ]


def category_summaries(rules: Optional[KeywordRules] = None) -> List[CategorySummary]:
    rules = _get_rules(rules)
    if rules is None:
        return []
    counts = {ks.category: len(ks.keywords) for ks in rules.data.keyword_sets}
    return [
        CategorySummary(
            category=category,
            path=f"/{category.path}",
            label=rules.data.categories[category].label,
            icon=rules.data.categories[category].icon,
            keyword_count=counts.get(category, 0),
        )
        for category in CATEGORY_ORDER
    ]
