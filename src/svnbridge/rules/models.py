"""Error rule data model — svn diagnostic substrings mapped to outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class OperationFamily(str, Enum):
    STATUS = "status"
    UPDATE = "update"
    COMMIT = "commit"
    LOCK = "lock"
    UNLOCK = "unlock"


@dataclass
class ErrorRule:
    """One row of a classification table.

    The rule matches when any of ``patterns`` is a substring of the
    diagnostic text and every ``requires`` flag equals the value passed in
    the classification context. ``outcome`` is the value of the family's
    outcome enum; ``message`` is an optional remediation text and may
    reference context values (``{cli_path}``).
    """

    id: str
    family: OperationFamily
    patterns: List[str]
    outcome: str
    description: str = ""
    message: Optional[str] = None
    requires: Dict[str, Any] = field(default_factory=dict)
    enabled: bool = True

    def matches(self, text: str, context: Dict[str, Any]) -> bool:
        for key, expected in self.requires.items():
            if context.get(key) != expected:
                return False
        return any(p in text for p in self.patterns)

    def render_message(self, context: Dict[str, Any]) -> str:
        if not self.message:
            return ""
        try:
            return self.message.format(**context)
        except (KeyError, IndexError):
            return self.message


@dataclass(frozen=True)
class Classification:
    """Result of classifying one diagnostic text."""

    outcome: Any
    rule_id: Optional[str] = None  # None when the family fallback applied
    message: str = ""

    @property
    def matched(self) -> bool:
        return self.rule_id is not None
