# Module deciding which discovered wiki pages are left out of the export
import re
from dataclasses import dataclass
from typing import FrozenSet, Pattern

import constants


@dataclass(frozen=True)
class SkipRule:
    """A path regex anchored at the start, minus a set of exact paths it lets through."""

    pattern: Pattern
    allow: FrozenSet[str] = frozenset()

    def matches(self, page_path: str) -> bool:
        return bool(self.pattern.match(page_path)) and page_path not in self.allow


def build_skip_rules(entries=None):
    """
    Builds skip rules from config entries.

    Each entry is either a regex string or a dict with a 'pattern' regex and an
    optional 'allow' list of exact paths. Raises ValueError on a bad regex.
    """
    if entries is None:
        entries = constants.DEFAULT_SKIP_PATTERNS
    rules = []
    for entry in entries:
        if isinstance(entry, dict):
            pattern, allow = entry['pattern'], entry.get('allow', [])
        else:
            pattern, allow = entry, []
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise ValueError(f"Invalid skip pattern {pattern!r}: {e}") from e
        rules.append(SkipRule(compiled, frozenset(allow)))
    return rules


def should_skip(page_path, rules):
    """True if any rule excludes the page path from the crawl."""
    return any(rule.matches(page_path) for rule in rules)
