"""covdiff: compare per-line coverage between two test suites."""

__version__ = "0.1.0"
