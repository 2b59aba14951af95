"""svnbridge — typed results from the Subversion command-line client."""

__version__ = "0.4.0"
