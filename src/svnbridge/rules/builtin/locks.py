"""Lock and unlock rules."""

from svnbridge.rules.models import ErrorRule, OperationFamily
from svnbridge.svn.models import LockOutcome

# svn: warning: W160035: Path '...' is already locked by user '...'
# Locked by another working copy (possibly the same user). Use force to steal it.
ALREADY_LOCKED = ErrorRule(
    id="LOCK_ALREADY_LOCKED",
    family=OperationFamily.LOCK,
    patterns=["W160035"],
    outcome=LockOutcome.LOCKED_BY_OTHER,
    description="Path is locked by another working copy.",
    requires={"force": False},
)

ALL_LOCK_RULES = [ALREADY_LOCKED]

# svn: E195013: '...' is not locked in this working copy
UNLOCK_NOT_LOCKED_HERE = ErrorRule(
    id="UNLOCK_NOT_LOCKED_HERE",
    family=OperationFamily.UNLOCK,
    patterns=["E195013"],
    outcome=LockOutcome.SUCCESS,
    description="This working copy holds no lock (offline check without force).",
)

# svn: warning: W170007: '...' is not locked in the repository
UNLOCK_NOT_LOCKED_IN_REPOSITORY = ErrorRule(
    id="UNLOCK_NOT_LOCKED_IN_REPOSITORY",
    family=OperationFamily.UNLOCK,
    patterns=["W170007"],
    outcome=LockOutcome.SUCCESS,
    description="Already unlocked (with force).",
)

# svn: warning: W160040: No lock on path '...' (400 Bad Request)
# The lock held here was stolen or broken; svn drops it, so this shows up once.
UNLOCK_LOCK_STOLEN = ErrorRule(
    id="UNLOCK_LOCK_STOLEN",
    family=OperationFamily.UNLOCK,
    patterns=["W160040"],
    outcome=LockOutcome.LOCKED_BY_OTHER,
    description="The lock was stolen or broken.",
)

ALL_UNLOCK_RULES = [
    UNLOCK_NOT_LOCKED_HERE,
    UNLOCK_NOT_LOCKED_IN_REPOSITORY,
    UNLOCK_LOCK_STOLEN,
]
