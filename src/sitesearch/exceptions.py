"""Custom exception hierarchy for sitesearch.

These exceptions allow callers to discriminate error categories
and convert them into user-visible status messages while preserving the
original context.
"""

from __future__ import annotations


class SiteSearchError(Exception):
    """Base class for all sitesearch exceptions."""


class ConfigError(SiteSearchError):
    """Raised when configuration loading or validation fails."""


class StateError(SiteSearchError):
    """Raised when the installed search state is used incorrectly (e.g., installed twice)."""


class IndexLoadError(SiteSearchError):
    """Raised when the index artifact cannot be turned into a searchable index."""


class IndexFetchFailed(IndexLoadError):
    """Raised when retrieving the index artifact fails (network, HTTP status, filesystem)."""


class IndexMalformed(IndexLoadError):
    """Raised when the artifact was retrieved but does not expose the expected structure."""


class IndexNotReady(SiteSearchError):
    """Raised when a search is attempted before an index has been installed."""


class SearchExecutionFailed(SiteSearchError):
    """Raised when the underlying ranking call fails."""
