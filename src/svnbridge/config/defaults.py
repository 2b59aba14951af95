"""Starter .svnbridge.toml template."""

DEFAULT_TOML = """\
# svnbridge configuration
version = "1.0"

[svn]
# cli_path = "Tools/svn/bin/svn"   # empty = svn from PATH; relative to the project root
timeout_ms = 35000
trace_operations = false

[integration]
enabled = true

[meta]
suffix = ".meta"
roots = ["Assets"]

[rules]
# disable = ["COMMIT_OUT_OF_DATE"]
custom_dir = ".svnbridge-rules"

[output]
format = "terminal"       # terminal | json
"""
