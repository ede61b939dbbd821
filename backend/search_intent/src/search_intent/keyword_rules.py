from typing import Iterable, List, Optional, Tuple

import regex as re

from .models.schemas import Category, IntentGroup, KeywordsData


def compile_keywords(keywords: Iterable[str]) -> Optional[re.Pattern]:
    """Compile keywords into one alternation; a hit means some keyword is a substring."""
    escaped = [re.escape(k) for k in keywords if k]
    if not escaped:
        return None
    # longest first so match spans report the most specific keyword
    escaped.sort(key=len, reverse=True)
    return re.compile("|".join(escaped))


def contains_any(pattern: Optional[re.Pattern], text: str) -> bool:
    return pattern is not None and pattern.search(text) is not None


class KeywordRules:
    """Keyword tables from keywords.json with their patterns compiled once."""

    def __init__(self, data: KeywordsData):
        self.data = data
        self.keyword_sets: List[Tuple[Category, Optional[re.Pattern]]] = [
            (ks.category, compile_keywords(ks.keywords)) for ks in data.keyword_sets
        ]
        self.intent_groups: List[Tuple[IntentGroup, Optional[re.Pattern]]] = [
            (group, compile_keywords(group.keywords)) for group in data.intent_groups
        ]

    def first_matching_category(self, term: str) -> Optional[Category]:
        """Category of the first keyword set containing a substring of the lower-cased term."""
        for category, pattern in self.keyword_sets:
            if contains_any(pattern, term):
                return category
        return None

    def matching_intent_groups(self, term: str) -> List[IntentGroup]:
        return [group for group, pattern in self.intent_groups if contains_any(pattern, term)]

    def matched_keyword(self, category: Category, term: str) -> Optional[str]:
        for set_category, pattern in self.keyword_sets:
            if set_category is category and pattern is not None:
                match = pattern.search(term)
                return match.group(0) if match else None
        return None
