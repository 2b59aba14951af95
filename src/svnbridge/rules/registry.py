"""Error classifier — ordered rule tables, one per operation family."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

import yaml

from svnbridge.config.schema import SvnBridgeConfig
from svnbridge.logging_config import get_logger
from svnbridge.rules.models import Classification, ErrorRule, OperationFamily
from svnbridge.svn.models import (
    CommitOutcome,
    LockOutcome,
    StatusErrorOutcome,
    UpdateOutcome,
)

logger = get_logger(__name__)

OUTCOME_TYPES: Dict[OperationFamily, Type] = {
    OperationFamily.STATUS: StatusErrorOutcome,
    OperationFamily.UPDATE: UpdateOutcome,
    OperationFamily.COMMIT: CommitOutcome,
    OperationFamily.LOCK: LockOutcome,
    OperationFamily.UNLOCK: LockOutcome,
}

FALLBACKS: Dict[OperationFamily, Any] = {
    OperationFamily.STATUS: StatusErrorOutcome.CRITICAL,
    OperationFamily.UPDATE: UpdateOutcome.UNKNOWN_ERROR,
    OperationFamily.COMMIT: CommitOutcome.UNKNOWN_ERROR,
    OperationFamily.LOCK: LockOutcome.FAILED,
    OperationFamily.UNLOCK: LockOutcome.FAILED,
}


class RuleError(Exception):
    """Raised when a rule definition is malformed."""


class ErrorClassifier:
    """First-match-wins table of error rules for one operation family.

    Rules are evaluated in registration order; custom rules are put in
    front of the built-ins. No match yields the family fallback outcome.
    """

    def __init__(self, family: OperationFamily, fallback: Any = None) -> None:
        self.family = family
        self.fallback = fallback if fallback is not None else FALLBACKS[family]
        self._outcome_type = OUTCOME_TYPES[family]
        self._rules: List[ErrorRule] = []

    # ---- registration ----

    def register(self, rule: ErrorRule, *, first: bool = False) -> None:
        if rule.family != self.family:
            raise RuleError(
                f"Rule {rule.id} belongs to '{rule.family.value}', not '{self.family.value}'"
            )
        try:
            self._outcome_type(rule.outcome)
        except ValueError:
            raise RuleError(
                f"Rule {rule.id} has unknown {self.family.value} outcome '{rule.outcome}'"
            ) from None
        self._rules = [r for r in self._rules if r.id != rule.id]
        if first:
            self._rules.insert(0, rule)
        else:
            self._rules.append(rule)

    def register_many(self, rules: List[ErrorRule], *, first: bool = False) -> None:
        if first:
            for r in reversed(rules):
                self.register(r, first=True)
        else:
            for r in rules:
                self.register(r)

    # ---- queries ----

    @property
    def all_rules(self) -> List[ErrorRule]:
        return list(self._rules)

    def get(self, rule_id: str) -> Optional[ErrorRule]:
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def enabled_rules(self) -> List[ErrorRule]:
        return [r for r in self._rules if r.enabled]

    # ---- classification ----

    def classify(self, text: str, **context: Any) -> Classification:
        """Return the outcome of the first enabled rule matching *text*."""
        for rule in self.enabled_rules():
            if rule.matches(text, context):
                logger.debug("%s: matched rule %s", self.family.value, rule.id)
                return Classification(
                    outcome=self._outcome_type(rule.outcome),
                    rule_id=rule.id,
                    message=rule.render_message(context),
                )
        return Classification(outcome=self.fallback)

    # ---- config filtering ----

    def apply_config(self, config: SvnBridgeConfig) -> None:
        disable_list = config.rules.disable
        for rule in self._rules:
            if rule.id in disable_list:
                rule.enabled = False

    # ---- custom rule loading ----

    def load_custom_rules(self, directory: Path) -> int:
        """Load this family's rules from YAML files in *directory*. Returns count loaded."""
        if not directory.is_dir():
            return 0
        loaded: List[ErrorRule] = []
        for path in sorted(directory.iterdir()):
            if path.suffix in (".yaml", ".yml"):
                loaded.extend(r for r in load_yaml_rules(path) if r.family == self.family)
        self.register_many(loaded, first=True)
        return len(loaded)


def load_yaml_rules(path: Path) -> List[ErrorRule]:
    """Parse a YAML file holding one rule or a list of rules."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return []
    if not isinstance(data, list):
        data = [data]

    rules: List[ErrorRule] = []
    for entry in data:
        try:
            patterns = entry["patterns"] if "patterns" in entry else [entry["pattern"]]
            rules.append(
                ErrorRule(
                    id=entry["id"],
                    family=OperationFamily(entry["family"]),
                    patterns=[str(p) for p in patterns],
                    outcome=entry["outcome"],
                    description=entry.get("description", ""),
                    message=entry.get("message"),
                    requires=dict(entry.get("requires") or {}),
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise RuleError(f"Invalid rule in {path}: {exc}") from exc
    return rules


def build_classifier(
    family: OperationFamily,
    config: Optional[SvnBridgeConfig] = None,
    project_root: Optional[Path] = None,
) -> ErrorClassifier:
    """Create a populated, config-filtered classifier for *family*."""
    from svnbridge.rules.builtin import BUILTIN_RULES

    classifier = ErrorClassifier(family)
    # Copies, so disabling a rule here never leaks into other classifiers.
    classifier.register_many([replace(r) for r in BUILTIN_RULES[family]])

    if config is not None:
        if project_root is not None and config.rules.custom_dir:
            count = classifier.load_custom_rules(project_root / config.rules.custom_dir)
            if count:
                logger.info("Loaded %d custom %s rule(s)", count, family.value)
        classifier.apply_config(config)

    return classifier


def build_classifiers(
    config: Optional[SvnBridgeConfig] = None,
    project_root: Optional[Path] = None,
) -> Dict[OperationFamily, ErrorClassifier]:
    return {
        family: build_classifier(family, config, project_root)
        for family in OperationFamily
    }
