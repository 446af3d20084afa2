"""Data models shared by the crawl pipeline."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class WikiPage:
    """One wiki page, identified by its percent-decoded URL path."""

    path: str
    raw_html: Optional[str] = None
    sanitized_html: Optional[str] = None
    assets: List[str] = field(default_factory=list)


@dataclass
class SanitizedPage:
    """Static HTML for a page and the asset references it still points at."""

    html: str
    assets: List[str]


@dataclass
class FetchFailure:
    path: str
    cause: str


@dataclass
class ErrorLog:
    """Fetch failures collected during one crawl run."""

    failures: List[FetchFailure] = field(default_factory=list)

    def record(self, path: str, cause: str) -> None:
        self.failures.append(FetchFailure(path, cause))

    @property
    def paths(self) -> List[str]:
        return [failure.path for failure in self.failures]

    def __len__(self) -> int:
        return len(self.failures)
