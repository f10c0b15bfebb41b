"""downrelease - fetch and unpack the latest GitHub release of a command-line tool."""

__version__ = "1.0.0"
