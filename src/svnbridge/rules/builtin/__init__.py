"""Built-in rules — one ordered table per operation family.

``RULESET_VERSION`` is bumped whenever a table changes; the diagnostic
codes come from the svn client and may move between svn releases.
"""

from typing import Dict, List

from svnbridge.rules.builtin.commit import ALL_COMMIT_RULES
from svnbridge.rules.builtin.locks import ALL_LOCK_RULES, ALL_UNLOCK_RULES
from svnbridge.rules.builtin.status import ALL_STATUS_RULES
from svnbridge.rules.builtin.update import ALL_UPDATE_RULES
from svnbridge.rules.models import ErrorRule, OperationFamily

RULESET_VERSION = "1.2"

BUILTIN_RULES: Dict[OperationFamily, List[ErrorRule]] = {
    OperationFamily.STATUS: ALL_STATUS_RULES,
    OperationFamily.UPDATE: ALL_UPDATE_RULES,
    OperationFamily.COMMIT: ALL_COMMIT_RULES,
    OperationFamily.LOCK: ALL_LOCK_RULES,
    OperationFamily.UNLOCK: ALL_UNLOCK_RULES,
}

__all__ = ["BUILTIN_RULES", "RULESET_VERSION"]
