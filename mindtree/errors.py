"""Exception types raised by MindTree."""


class MindTreeError(Exception):
    """Base class for MindTree errors."""


class PatchError(MindTreeError, ValueError):
    """A node property patch carries an invalid value."""


class SessionError(MindTreeError, ValueError):
    """Persisted session state is malformed."""
