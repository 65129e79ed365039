"""Exception types for navtree.

Navigation calls never raise these across the public API; they are used
internally and reported through logging.
"""


class NavTreeError(Exception):
    """Base class for navtree errors."""


class HostAlreadyBoundError(NavTreeError):
    """A host navigator was claimed by a second history."""


class ConfigError(NavTreeError):
    """A configuration file could not be parsed."""
