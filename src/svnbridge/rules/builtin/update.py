"""Update rules."""

from svnbridge.rules.builtin.connectivity import CONNECTIVITY_CODES
from svnbridge.rules.models import ErrorRule, OperationFamily
from svnbridge.svn.models import UpdateOutcome

# svn: E155027: Tree conflict can only be resolved to 'working' state; '...' not resolved
# The working copy was still updated; "Summary of conflicts" is not printed in this case.
TREE_CONFLICT_UNRESOLVED = ErrorRule(
    id="UPDATE_TREE_CONFLICT_UNRESOLVED",
    family=OperationFamily.UPDATE,
    patterns=["E155027"],
    outcome=UpdateOutcome.SUCCESS_WITH_CONFLICTS,
    description="Updated, but tree conflicts could not be auto-resolved.",
)

UPDATE_UNABLE_TO_CONNECT = ErrorRule(
    id="UPDATE_UNABLE_TO_CONNECT",
    family=OperationFamily.UPDATE,
    patterns=CONNECTIVITY_CODES,
    outcome=UpdateOutcome.UNABLE_TO_CONNECT,
    description="Network or server problem.",
)

ALL_UPDATE_RULES = [TREE_CONFLICT_UNRESOLVED, UPDATE_UNABLE_TO_CONNECT]
