"""Exceptions raised while building direct upload signatures."""


class DirectUploadError(Exception):
    """Base class for all direct upload errors."""

    pass


class InvalidValueError(DirectUploadError, ValueError):
    """Raised when a value is not a member of its fixed allowed set."""

    pass


class InvalidRegionError(InvalidValueError):
    """Raised when a region name is not a known AWS region."""

    pass


class InvalidAclError(InvalidValueError):
    """Raised when an ACL name is not a canned AWS ACL."""

    pass


class UnknownOptionError(DirectUploadError, LookupError):
    """Raised when an option name is not part of the options schema."""

    pass


class InvalidCredentialError(DirectUploadError, ValueError):
    """Raised when the access key or secret is empty or a placeholder."""

    pass


class InvalidOptionError(DirectUploadError, ValueError):
    """Raised when an option holds a malformed value."""

    pass


class InvalidExpiryError(DirectUploadError, ValueError):
    """Raised when the policy expiration is unparseable or out of range."""

    pass
