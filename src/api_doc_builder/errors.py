"""Exceptions raised by the document builder."""


class ApiDocError(Exception):
    """Base class for builder errors."""


class ManifestError(ApiDocError, ValueError):
    """The application manifest cannot be read or is malformed."""


class RouterMethodNotFound(ApiDocError, LookupError):
    """A router declaration names a handler method the bean does not have."""
