"""Process-wide rubric cache."""

import threading
from collections.abc import Sequence
from typing import Protocol

import structlog

from ago_diagnosis.rubric.models import RubricItem


logger = structlog.get_logger()


class RubricSource(Protocol):
    """Anything that can produce an ordered list of rubric items."""

    def load(self) -> list[RubricItem]:
        """Load rubric items in evaluation order."""
        ...


class StaticRubricSource:
    """Rubric source over an in-memory sequence of items."""

    def __init__(self, items: Sequence[RubricItem]) -> None:
        self._items = tuple(items)

    def load(self) -> list[RubricItem]:
        """Return the configured items."""
        return list(self._items)


class RubricRepository:
    """Loads a rubric once and shares it read-only across requests.

    Loading is lazy and guarded by a lock, so concurrent first requests
    trigger a single load. The cached tuple is never mutated; call
    ``invalidate`` to force a reload on next access.
    """

    def __init__(self, source: RubricSource) -> None:
        """Initialize the repository.

        Args:
            source: Rubric source to load from.
        """
        self._source = source
        self._items: tuple[RubricItem, ...] | None = None
        self._lock = threading.Lock()
        self._log = logger.bind(component="rubric")

    @property
    def is_loaded(self) -> bool:
        """Whether the rubric is currently cached."""
        return self._items is not None

    def get(self) -> tuple[RubricItem, ...]:
        """Return the cached rubric, loading it on first use.

        Raises:
            RubricLoadError: If the underlying source fails to load.
        """
        items = self._items
        if items is not None:
            return items

        with self._lock:
            if self._items is None:
                self._items = tuple(self._source.load())
                self._log.info("rubric_loaded", item_count=len(self._items))
            return self._items

    def invalidate(self) -> None:
        """Drop the cached rubric."""
        with self._lock:
            self._items = None
        self._log.info("rubric_invalidated")
