import logging
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Union

from ..config import settings
from ..keyword_rules import KeywordRules
from ..models.schemas import Navigation, Suggestion
from .classifier import resolve
from .debounce import Debouncer
from .suggester import generate_suggestions, popular_searches

logger = logging.getLogger(settings.SERVICE_NAME + ".search_box")


class SelectionState(str, Enum):
    CLOSED = "closed"
    OPEN_NO_SELECTION = "open_no_selection"
    OPEN_SELECTION = "open_selection"


class SearchBox:
    """
    State of one search input and its suggestion dropdown.

    Keystrokes update the query immediately; suggestions for non-empty input
    are computed after the debounce delay, and only for the latest text.
    Keyboard navigation moves a clamped selection index over the list that is
    currently visible: the popular searches while the query is empty, the
    computed suggestions otherwise.
    """

    def __init__(
        self,
        navigate: Callable[[Navigation], Any],
        *,
        show_suggestions: bool = False,
        on_search: Optional[Callable[[str], Any]] = None,
        on_suggestions: Optional[Callable[[List[Suggestion]], Union[Awaitable[Any], Any]]] = None,
        debounce_seconds: Optional[float] = None,
        rules: Optional[KeywordRules] = None,
    ):
        self.navigate = navigate
        self.show_suggestions = show_suggestions
        self.on_search = on_search
        self.on_suggestions = on_suggestions
        self.rules = rules

        self.query: str = ""
        self.suggestions: List[Suggestion] = []
        self.is_open: bool = False
        self.focused: bool = False
        self.selected_index: int = -1
        # True while a suggestion computation is scheduled
        self.is_loading: bool = False

        self.popular: List[Suggestion] = popular_searches(rules)
        delay = settings.debounce_seconds if debounce_seconds is None else debounce_seconds
        self._debouncer: Debouncer[str] = Debouncer(delay, self._compute_suggestions)

    # --- Derived state ---

    @property
    def displayed(self) -> List[Suggestion]:
        return self.suggestions if self.query else self.popular

    @property
    def dropdown_visible(self) -> bool:
        return self.is_open and self.show_suggestions and len(self.displayed) > 0

    @property
    def state(self) -> SelectionState:
        if not self.is_open:
            return SelectionState.CLOSED
        if self.selected_index < 0:
            return SelectionState.OPEN_NO_SELECTION
        return SelectionState.OPEN_SELECTION

    def _navigable(self) -> List[Suggestion]:
        return self.displayed if self.dropdown_visible else []

    # --- Events ---

    def focus(self) -> None:
        self.focused = True
        self.is_open = True
        self.selected_index = -1

    def change(self, text: str) -> None:
        """Handle a keystroke: store the text and (re)schedule suggestions."""
        self.query = text
        self.selected_index = -1
        if not text.strip() or not self.show_suggestions:
            self._debouncer.cancel()
            self.suggestions = []
            self.is_loading = False
            return
        self.is_loading = True
        self._debouncer.submit(text)

    def key_down(self, key: str) -> Optional[Navigation]:
        items = self._navigable()
        if key == "ArrowDown":
            if items:
                self.selected_index = min(self.selected_index + 1, len(items) - 1)
        elif key == "ArrowUp":
            if items:
                self.selected_index = self.selected_index - 1 if self.selected_index > 0 else -1
        elif key == "Enter":
            if 0 <= self.selected_index < len(items):
                return self.commit(items[self.selected_index])
            return self.submit()
        elif key == "Escape":
            self.close()
            self.focused = False
        return None

    def select(self, index: int) -> Optional[Navigation]:
        """Mouse click on the item at `index` of the visible list."""
        items = self._navigable()
        if not 0 <= index < len(items):
            logger.warning(f"Ignoring selection of index {index}; {len(items)} items visible")
            return None
        return self.commit(items[index])

    def click_outside(self) -> None:
        self.close()

    def close(self) -> None:
        self.is_open = False
        self.selected_index = -1

    def submit(self) -> Optional[Navigation]:
        """
        Submit the typed query. The classifier picks the destination unless
        an on_search hook is installed, in which case the hook gets the query.
        """
        if not self.query.strip():
            return None

        navigation: Optional[Navigation] = None
        if self.on_search is not None:
            self.on_search(self.query)
        else:
            destination = resolve(self.query, self.rules)
            navigation = Navigation(url=destination.url, category=destination.category)
            logger.info(f"Search {self.query!r} routed to {destination.category.value}")
            self.navigate(navigation)

        self.close()
        self.focused = False
        return navigation

    def commit(self, suggestion: Suggestion) -> Navigation:
        """Navigate to a suggestion, then clear the query and close."""
        navigation = Navigation(url=suggestion.url, category=suggestion.category)
        logger.info(f"Suggestion {suggestion.id} selected, navigating to {suggestion.url}")
        self.navigate(navigation)
        self.change("")
        self.close()
        return navigation

    def dispose(self) -> None:
        self._debouncer.cancel()

    async def wait_for_suggestions(self) -> None:
        """Wait until the scheduled suggestion computation, if any, has run."""
        await self._debouncer.wait()

    def _compute_suggestions(self, text: str) -> Union[Awaitable[Any], Any]:
        self.suggestions = generate_suggestions(text, self.show_suggestions, self.rules)
        self.is_loading = False
        self.selected_index = -1
        if self.on_suggestions is not None:
            return self.on_suggestions(self.suggestions)
        return None
