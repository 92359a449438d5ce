"""Selector queries over a parsed HTML document."""

from collections.abc import Iterator, Sequence

import soupsieve
from bs4 import BeautifulSoup, Tag

from ago_diagnosis.document.errors import SelectorError


class ElementSet:
    """Elements matched by a selector.

    Mirrors the small subset of a jQuery-style result that rubric checks
    need: a count, combined text, markup and the first element's
    attributes.
    """

    def __init__(self, elements: Sequence[Tag]) -> None:
        self._elements = list(elements)

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._elements)

    @property
    def length(self) -> int:
        """Number of matched elements."""
        return len(self._elements)

    def text(self) -> str:
        """Combined, whitespace-normalized text of all matched elements."""
        parts = [el.get_text(" ", strip=True) for el in self._elements]
        return " ".join(part for part in parts if part)

    def html(self) -> str:
        """Inner markup of the first matched element, or an empty string."""
        if not self._elements:
            return ""
        return self._elements[0].decode_contents().strip()

    def outer_html(self, separator: str = "\n") -> str:
        """Outer markup of every matched element, in document order."""
        return separator.join(str(el).strip() for el in self._elements)

    def attr(self, name: str) -> str | None:
        """Attribute value on the first matched element.

        Multi-valued attributes such as ``class`` are joined with spaces.
        """
        if not self._elements:
            return None
        value = self._elements[0].get(name)
        if value is None:
            return None
        if isinstance(value, list):
            return " ".join(value)
        return str(value)


class HtmlDocument:
    """Read-only document answering CSS selector queries.

    Safe for concurrent reads once constructed; nothing mutates the
    underlying tree after parsing.
    """

    def __init__(self, soup: BeautifulSoup, url: str = "") -> None:
        self._soup = soup
        self.url = url

    @classmethod
    def from_markup(cls, markup: str | bytes, url: str = "") -> "HtmlDocument":
        """Parse markup with the lxml HTML parser."""
        return cls(BeautifulSoup(markup, "lxml"), url=url)

    def query(self, selector: str) -> ElementSet:
        """Select elements matching a CSS selector.

        Args:
            selector: CSS selector expression.

        Returns:
            ElementSet with every match in document order.

        Raises:
            SelectorError: If the selector cannot be compiled.
        """
        try:
            return ElementSet(self._soup.select(selector))
        except soupsieve.SelectorSyntaxError as exc:
            raise SelectorError(selector, str(exc).splitlines()[0]) from exc
        except (ValueError, NotImplementedError) as exc:
            raise SelectorError(selector, str(exc)) from exc
