from urllib.parse import quote

from ..models.schemas import Category

# Characters encodeURIComponent leaves alone on top of quote()'s own "_.-~"
_URI_COMPONENT_SAFE = "!'()*"


def encode_uri_component(value: str) -> str:
    """Percent-encode a string the way the browser's encodeURIComponent does."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


def build_search_url(category: Category, query: str) -> str:
    """Destination URL for a query on a section's listing page."""
    return f"/{category.path}?search={encode_uri_component(query)}"
