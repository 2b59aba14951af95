"""Error classification — models, classifier, built-in rules."""

from svnbridge.rules.models import Classification, ErrorRule, OperationFamily
from svnbridge.rules.registry import (
    ErrorClassifier,
    RuleError,
    build_classifier,
    build_classifiers,
)

__all__ = [
    "Classification",
    "ErrorClassifier",
    "ErrorRule",
    "OperationFamily",
    "RuleError",
    "build_classifier",
    "build_classifiers",
]
