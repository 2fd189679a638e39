"""
Direct-to-S3 browser upload signatures.

Builds the AWS Signature Version 4 policy and hidden form fields a browser
needs to POST a file straight into an S3 bucket.
"""

__version__ = "1.0.0"

from direct_upload.errors import (
    DirectUploadError,
    InvalidAclError,
    InvalidCredentialError,
    InvalidExpiryError,
    InvalidOptionError,
    InvalidRegionError,
    InvalidValueError,
    UnknownOptionError,
)
from direct_upload.models import Acl, Region, UploadForm, UploadOptions
from direct_upload.signature import Signature
from direct_upload.credentials import signature_from_env, signature_from_session

__all__ = [
    "Acl",
    "DirectUploadError",
    "InvalidAclError",
    "InvalidCredentialError",
    "InvalidExpiryError",
    "InvalidOptionError",
    "InvalidRegionError",
    "InvalidValueError",
    "Region",
    "Signature",
    "UnknownOptionError",
    "UploadForm",
    "UploadOptions",
    "signature_from_env",
    "signature_from_session",
    "__version__",
]
