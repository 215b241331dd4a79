"""
Error taxonomy for Labelled.
"""


class LabelledError(Exception):
    """Base class for errors surfaced to the user."""


class StoreUnavailable(LabelledError):
    """The entity store is unreachable or rejected a query or mutation."""


class ValidationError(LabelledError):
    """A required field is empty or a value is out of range."""


class UploadFailure(LabelledError):
    """The object store rejected a file."""


class IdentityMissing(LabelledError):
    """A mutation was attempted with no signed-in identity."""


class AuthError(LabelledError):
    """Sign-in or sign-up was rejected."""
