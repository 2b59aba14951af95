"""Status query rules — which diagnostics still mean "not versioned"."""

from svnbridge.rules.models import ErrorRule, OperationFamily
from svnbridge.svn.adapter import EXECUTABLE_NOT_FOUND
from svnbridge.svn.models import StatusErrorOutcome

# svn: warning: W155010: The node '...' was not found.
# Returned for paths under an unversioned directory.
NODE_NOT_FOUND = ErrorRule(
    id="STATUS_NODE_NOT_FOUND",
    family=OperationFamily.STATUS,
    patterns=["W155010"],
    outcome=StatusErrorOutcome.NOT_VERSIONED,
    description="Path is under an unversioned directory.",
)

# svn: warning: W155007: '...' is not a working copy!
NOT_A_WORKING_COPY = ErrorRule(
    id="STATUS_NOT_A_WORKING_COPY",
    family=OperationFamily.STATUS,
    patterns=["W155007"],
    outcome=StatusErrorOutcome.NOT_VERSIONED,
    description="Project is not a valid svn checkout.",
)

CLI_NOT_INSTALLED = ErrorRule(
    id="STATUS_CLI_NOT_INSTALLED",
    family=OperationFamily.STATUS,
    patterns=[EXECUTABLE_NOT_FOUND],
    outcome=StatusErrorOutcome.MISSING_EXECUTABLE,
    description="No svn executable on PATH and no custom path configured.",
    message=(
        "SVN CLI (Command Line Interface) not found. "
        "Please install it or set [svn] cli_path in .svnbridge.toml to a valid svn executable.\n\n"
        "You can also disable the SVN integration."
    ),
    requires={"custom_cli_path": False},
)

CLI_PATH_INVALID = ErrorRule(
    id="STATUS_CLI_PATH_INVALID",
    family=OperationFamily.STATUS,
    patterns=[EXECUTABLE_NOT_FOUND],
    outcome=StatusErrorOutcome.MISSING_EXECUTABLE,
    description="The configured svn executable does not exist.",
    message=(
        "Cannot find the svn executable configured in .svnbridge.toml:\n{cli_path}\n\n"
        "Fix [svn] cli_path or remove it to use svn from PATH.\n\n"
        "You can also disable the SVN integration."
    ),
    requires={"custom_cli_path": True},
)

ALL_STATUS_RULES = [NODE_NOT_FOUND, NOT_A_WORKING_COPY, CLI_NOT_INSTALLED, CLI_PATH_INVALID]
