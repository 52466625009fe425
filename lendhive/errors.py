class LendHiveError(Exception):
    """Base class for system faults. Domain refusals are returned as Result, not raised."""


class RepositoryError(LendHiveError):
    """A store could not complete a read or write."""
