import json
import logging
import threading
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from ..config import settings
from ..keyword_rules import KeywordRules
from ..models.schemas import Category, KeywordsData

logger = logging.getLogger(settings.SERVICE_NAME + ".loader")


class KeywordsLoader:
    """
    Loads the keyword tables once and provides access to the compiled rules.
    The tables are immutable for the life of the process.
    """

    def __init__(self, keywords_file_path: Optional[Path] = None):
        self.keywords_file_path = keywords_file_path or settings.get_absolute_keywords_path()
        self.rules: Optional[KeywordRules] = None
        self.lock = threading.Lock()

        self.load_keywords()

    def load_keywords(self) -> bool:
        """
        Load and validate the keywords file.
        Returns True if the file was successfully loaded and parsed.
        """
        with self.lock:
            if self.rules is not None:
                logger.debug("Keywords already loaded; tables are immutable.")
                return True
            try:
                if not self.keywords_file_path.exists():
                    logger.error(f"Keywords file not found: {self.keywords_file_path}")
                    return False

                logger.info(f"Loading keywords from {self.keywords_file_path}")
                with open(self.keywords_file_path, "r", encoding="utf-8") as f:
                    raw_data = json.load(f)

                data = KeywordsData(**raw_data)
                self.rules = KeywordRules(data)
                logger.info(
                    "Keywords loaded successfully: "
                    + ", ".join(f"{ks.category.value}={len(ks.keywords)}" for ks in data.keyword_sets)
                    + f", {len(data.intent_groups)} intent groups, {len(data.popular_searches)} popular searches"
                )
                return True

            except json.JSONDecodeError as e:
                logger.error(f"Failed to parse keywords file: {e}", exc_info=True)
                return False
            except ValidationError as e:
                logger.error(f"Keywords file failed validation: {e}")
                return False
            except OSError as e:
                logger.error(f"Error reading keywords file: {e}", exc_info=True)
                return False

    def get_rules(self) -> Optional[KeywordRules]:
        """Get the compiled keyword rules, or None if loading failed."""
        with self.lock:
            return self.rules

    def get_keywords(self) -> Optional[KeywordsData]:
        rules = self.get_rules()
        return rules.data if rules else None

    def keyword_counts(self) -> Dict[Category, int]:
        data = self.get_keywords()
        if not data:
            return {}
        return {ks.category: len(ks.keywords) for ks in data.keyword_sets}


_loader_instance: Optional[KeywordsLoader] = None


def get_keywords_loader() -> KeywordsLoader:
    """
    Get the singleton instance of KeywordsLoader.
    """
    global _loader_instance
    if _loader_instance is None:
        _loader_instance = KeywordsLoader()
    return _loader_instance


if __name__ == "__main__":
    loader = get_keywords_loader()
    keywords = loader.get_keywords()

    if keywords:
        for keyword_set in keywords.keyword_sets:
            print(f"{keyword_set.category.value}: {len(keyword_set.keywords)} keywords")
        print(f"\nIntent groups: {[g.id for g in keywords.intent_groups]}")
        print(f"Popular searches: {[p.text for p in keywords.popular_searches]}")
