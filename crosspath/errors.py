"""Exception types raised by the crosspath engine."""


class CrossPathError(Exception):
    """Base class for crosspath errors."""


class DuplicateIdentity(CrossPathError):
    """A profile for this (platform, username) pair is already registered."""


class UnknownProfile(CrossPathError, KeyError):
    """No profile with the requested id exists."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class PersistenceFailure(CrossPathError):
    """The settings blob or a document could not be written."""


class MalformedIdentifier(CrossPathError):
    """A location identifier contains an escape sequence that cannot be decoded."""
