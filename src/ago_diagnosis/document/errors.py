"""Error types for document access."""

from ago_diagnosis.fetch.models import FetchError


class DocumentFetchError(Exception):
    """The target page could not be retrieved or parsed.

    Attributes:
        url: Requested URL.
        error: Structured fetch error.
    """

    def __init__(self, url: str, error: FetchError) -> None:
        super().__init__(f"Failed to fetch {url}: {error.message}")
        self.url = url
        self.error = error


class SelectorError(Exception):
    """A selector could not be applied to the document.

    Attributes:
        selector: The offending selector expression.
    """

    def __init__(self, selector: str, reason: str) -> None:
        super().__init__(f"Invalid selector '{selector}': {reason}")
        self.selector = selector
        self.reason = reason
