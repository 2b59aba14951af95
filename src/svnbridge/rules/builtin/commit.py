"""Commit rules."""

from svnbridge.rules.builtin.connectivity import CONNECTIVITY_CODES
from svnbridge.rules.models import ErrorRule, OperationFamily
from svnbridge.svn.models import CommitOutcome

# svn: E155011: File '...' is out of date
# svn: E160024: resource out of date; try updating
OUT_OF_DATE = ErrorRule(
    id="COMMIT_OUT_OF_DATE",
    family=OperationFamily.COMMIT,
    patterns=["E160024", "E155011"],
    outcome=CommitOutcome.OUT_OF_DATE,
    description="Pending changes in the repository. Update before committing.",
)

# svn: E155015: Aborting commit: '...' remains in conflict
HAS_CONFLICTS = ErrorRule(
    id="COMMIT_HAS_CONFLICTS",
    family=OperationFamily.COMMIT,
    patterns=["E155015"],
    outcome=CommitOutcome.HAS_CONFLICTS,
    description="Resolve conflicts before committing.",
)

# svn: E200009: '...' is not under version control
CONTAINS_UNVERSIONED = ErrorRule(
    id="COMMIT_CONTAINS_UNVERSIONED",
    family=OperationFamily.COMMIT,
    patterns=["E200009"],
    outcome=CommitOutcome.CONTAINS_UNVERSIONED,
    description="Unversioned paths must be added before committing.",
)

# svn: E165001: Commit blocked by pre-commit hook (exit code 1) with output: ...
PRECOMMIT_HOOK_REJECTED = ErrorRule(
    id="COMMIT_PRECOMMIT_HOOK_REJECTED",
    family=OperationFamily.COMMIT,
    patterns=["E165001"],
    outcome=CommitOutcome.PRECOMMIT_HOOK_REJECTED,
    description="The server-side pre-commit hook denied the commit.",
)

COMMIT_UNABLE_TO_CONNECT = ErrorRule(
    id="COMMIT_UNABLE_TO_CONNECT",
    family=OperationFamily.COMMIT,
    patterns=CONNECTIVITY_CODES,
    outcome=CommitOutcome.UNABLE_TO_CONNECT,
    description="Network or server problem.",
)

ALL_COMMIT_RULES = [
    OUT_OF_DATE,
    HAS_CONFLICTS,
    CONTAINS_UNVERSIONED,
    PRECOMMIT_HOOK_REJECTED,
    COMMIT_UNABLE_TO_CONNECT,
]
