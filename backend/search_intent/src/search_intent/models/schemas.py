from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, Generic, List, Literal, Optional, TypeVar, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from ..config import settings


class AppBaseModel(BaseModel):
    """Base Pydantic model with common configuration."""

    model_config = {
        "frozen": False,
        "extra": "forbid",
        "populate_by_name": True,
    }


# --- Categories ---

class Category(str, Enum):
    """Destination sections a search query can route to."""

    JOBS = "jobs"
    MARKET = "market"
    GUIDES = "guides"
    COMMUNITY = "community"

    @property
    def path(self) -> str:
        # guides are served from the singular /guide page
        return "guide" if self is Category.GUIDES else self.value


# Fixed order in which keyword sets are tested; first match wins.
CATEGORY_ORDER: tuple = (Category.JOBS, Category.MARKET, Category.GUIDES, Category.COMMUNITY)


class CategoryInfo(AppBaseModel):
    """Display metadata for a category."""
    label: str
    icon: str


# --- Keyword data (data/keywords.json) ---

class KeywordSet(AppBaseModel):
    """
    Ordered collection of lowercase substrings associated with one category.
    """
    category: Category
    keywords: List[str] = Field(min_length=1)

    @field_validator("keywords")
    @classmethod
    def normalize_keywords(cls, values: List[str]) -> List[str]:
        """Lower-case keywords and drop blanks; matching is done on lower-cased queries."""
        return [v.lower() for v in values if v and v.strip()]


class SuggestionTemplate(AppBaseModel):
    """A suggestion whose text and URL are filled in from the typed query."""
    id: str
    category: Category
    icon: str
    template: str = Field(description="Display text with a '{query}' placeholder.")


class IntentGroup(SuggestionTemplate):
    """Short keyword group used by the suggestion generator."""
    keywords: List[str] = Field(min_length=1)

    @field_validator("keywords")
    @classmethod
    def normalize_keywords(cls, values: List[str]) -> List[str]:
        return [v.lower() for v in values if v and v.strip()]


class PopularSearch(AppBaseModel):
    id: str
    text: str
    category: Category
    icon: str
    search: str = Field(description="Term passed to the destination page.")


class KeywordsData(AppBaseModel):
    """
    Internal model representing the structure of the keywords.json file.
    Used for loading and validating the keyword tables.
    """
    categories: Dict[Category, CategoryInfo]
    default_category: Category = Category.MARKET
    keyword_sets: List[KeywordSet]
    intent_groups: List[IntentGroup] = Field(default_factory=list)
    fallback_suggestions: List[SuggestionTemplate] = Field(default_factory=list)
    popular_searches: List[PopularSearch] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_keyword_set_order(self) -> "KeywordsData":
        order = tuple(ks.category for ks in self.keyword_sets)
        if order != CATEGORY_ORDER:
            raise ValueError(
                "keyword_sets must list each category once in the order "
                f"{[c.value for c in CATEGORY_ORDER]}, got {[c.value for c in order]}"
            )
        missing = [c.value for c in CATEGORY_ORDER if c not in self.categories]
        if missing:
            raise ValueError(f"categories is missing display metadata for: {missing}")
        return self


# --- Search results ---

class Suggestion(AppBaseModel):
    """A suggested query shown in the search dropdown."""
    id: str
    text: str
    category: Category
    icon: str
    url: str


class SearchDestination(AppBaseModel):
    """Where a submitted query navigates to."""
    category: Category
    query: str
    url: str


class Navigation(AppBaseModel):
    """A client-side route change issued by the search box."""
    url: str
    category: Optional[Category] = None


class CategorySummary(AppBaseModel):
    category: Category
    path: str
    label: str
    icon: str
    keyword_count: int


def check_query_text(value: str, name: str) -> str:
    """Reject text that is too long or cannot be percent-encoded into a URL."""
    if len(value) > settings.MAX_QUERY_LENGTH:
        raise ValueError(f"{name} must be at most {settings.MAX_QUERY_LENGTH} characters")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        # lone surrogates, e.g. from a JSON "\ud800" escape
        raise ValueError(f"{name} must be valid Unicode text") from None
    return value


class ClassifyRequest(AppBaseModel):
    query: str = Field(description="Free-text query typed into the search box.")

    @field_validator("query")
    @classmethod
    def check_query(cls, value: str) -> str:
        return check_query_text(value, "query")


# --- Sessions ---

class SessionState(AppBaseModel):
    """
    Per-visitor state that the portal used to keep in browser storage:
    the suggestions flag, cookie consent and the opaque auth token.
    """
    session_id: UUID = Field(default_factory=uuid4)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    last_activity_at: datetime = Field(default_factory=datetime.utcnow)
    show_suggestions: bool = Field(default_factory=lambda: settings.SHOW_SUGGESTIONS_DEFAULT)
    cookie_consent: Optional[bool] = None
    token: Optional[str] = None


class SessionUpdate(AppBaseModel):
    """
    Partial update of a session. Fields left out are unchanged; null resets
    cookie_consent and token but is not a valid suggestions flag.
    """
    show_suggestions: Optional[bool] = None
    cookie_consent: Optional[bool] = None
    token: Optional[str] = None

    @field_validator("show_suggestions")
    @classmethod
    def reject_null_flag(cls, value: Optional[bool]) -> bool:
        if value is None:
            raise ValueError("show_suggestions must be true or false")
        return value


# --- Response envelopes ---

T = TypeVar("T")


class SuccessResult(AppBaseModel, Generic[T]):
    """Successful API response carrying a payload."""
    success: Literal[True] = True
    data: T
    total: Optional[int] = None


class FailureResult(AppBaseModel):
    """Failed API response carrying a human-readable message."""
    success: Literal[False] = False
    error: str


class HealthResponse(AppBaseModel):
    status: Literal["ok", "degraded"]
    service: str
    keywords_loaded: bool
    keyword_counts: Dict[Category, int] = Field(default_factory=dict)
    message: Optional[str] = None


# --- WebSocket messages (client -> server) ---

class ClientFocusMessage(AppBaseModel):
    kind: Literal["focus"] = "focus"


class ClientInputMessage(AppBaseModel):
    kind: Literal["input"] = "input"
    text: str

    @field_validator("text")
    @classmethod
    def check_text(cls, value: str) -> str:
        return check_query_text(value, "text")


class ClientKeyMessage(AppBaseModel):
    kind: Literal["key"] = "key"
    key: str = Field(description="DOM key name, e.g. 'ArrowDown', 'Enter', 'Escape'.")


class ClientSubmitMessage(AppBaseModel):
    kind: Literal["submit"] = "submit"


class ClientSelectMessage(AppBaseModel):
    kind: Literal["select"] = "select"
    index: int = Field(ge=0, description="Index of the clicked item in the displayed list.")


class ClientClickOutsideMessage(AppBaseModel):
    kind: Literal["click_outside"] = "click_outside"


SearchBoxIncomingMessage = Annotated[
    Union[
        ClientFocusMessage,
        ClientInputMessage,
        ClientKeyMessage,
        ClientSubmitMessage,
        ClientSelectMessage,
        ClientClickOutsideMessage,
    ],
    Field(discriminator="kind"),
]


# --- WebSocket messages (server -> client) ---

class WSStateMessage(AppBaseModel):
    """Snapshot of the search box after a client event or a suggestion update."""
    kind: Literal["state"] = "state"
    query: str
    is_open: bool
    dropdown_visible: bool
    selected_index: int
    is_loading: bool
    items: List[Suggestion] = Field(default_factory=list)


class WSNavigateMessage(Navigation):
    kind: Literal["navigate"] = "navigate"


class WSErrorMessage(AppBaseModel):
    kind: Literal["error"] = "error"
    message: str
    detail: Optional[str] = None
