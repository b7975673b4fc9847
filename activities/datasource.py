import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from django.conf import settings
from django.db import DatabaseError

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """A list query failed against the database."""


@dataclass
class FetchResult:
    rows: list
    source: str  # "live", "fixture" or "empty"
    error: Optional[FetchError] = None

    @property
    def is_fixture(self) -> bool:
        return self.source == "fixture"


class DataSource:
    """
    Run a list query once and optionally fall back to static demo rows.

    Fixture rows are only served when ``use_fixtures`` is on (the
    ``DEMO_FIXTURES_ENABLED`` setting by default), either because the query
    failed or because it came back empty. There is no retry.
    """

    def __init__(self, name: str, query: Callable[[], list], fixture: Optional[Callable[[], list]] = None, use_fixtures=None):
        self.name = name
        self.query = query
        self.fixture = fixture
        if use_fixtures is None:
            use_fixtures = getattr(settings, "DEMO_FIXTURES_ENABLED", False)
        self.use_fixtures = bool(use_fixtures) and fixture is not None

    def _fixture_rows(self) -> List:
        return list(self.fixture())

    def fetch(self) -> FetchResult:
        try:
            rows = list(self.query())
        except DatabaseError as exc:
            error = FetchError(f"{self.name}: {exc}")
            logger.warning("List query failed", extra={"source": self.name, "error": str(exc)})
            if self.use_fixtures:
                return FetchResult(rows=self._fixture_rows(), source="fixture", error=error)
            return FetchResult(rows=[], source="empty", error=error)

        if rows:
            return FetchResult(rows=rows, source="live")
        if self.use_fixtures:
            logger.info("Serving demo rows for empty result", extra={"source": self.name})
            return FetchResult(rows=self._fixture_rows(), source="fixture")
        return FetchResult(rows=[], source="empty")
