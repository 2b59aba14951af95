"""Network failures shared by every operation that talks to the server."""

# svn: E170013: Unable to connect to a repository at URL '...'
UNABLE_TO_CONNECT = "E170013"
# svn: E731001: No such host is known.
UNKNOWN_HOST = "E731001"

CONNECTIVITY_CODES = [UNABLE_TO_CONNECT, UNKNOWN_HOST]
