"""AWS Signature Version 4 key derivation and signing.

The signing key is derived from the secret through a chain of four
HMAC-SHA256 operations, each keyed with the raw digest of the previous one:

    kDate    = HMAC("AWS4" + secret, date)
    kRegion  = HMAC(kDate, region)
    kService = HMAC(kRegion, service)
    kSigning = HMAC(kService, "aws4_request")

The base64 encoded policy is then signed with kSigning and rendered as
lower-case hex.
"""

import hashlib
import hmac
from datetime import datetime, timezone
from typing import Union

from direct_upload.models import Region

ALGORITHM = "AWS4-HMAC-SHA256"
SERVICE = "s3"
REQUEST_TYPE = "aws4_request"

SHORT_DATE_FORMAT = "%Y%m%d"
FULL_DATE_FORMAT = "%Y%m%dT%H%M%SZ"


def as_utc(moment: datetime) -> datetime:
    """Return ``moment`` in UTC; naive datetimes are taken to be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def short_date(moment: datetime) -> str:
    """Format ``moment`` as a UTC ``YYYYMMDD`` date."""
    return as_utc(moment).strftime(SHORT_DATE_FORMAT)


def full_date(moment: datetime) -> str:
    """Format ``moment`` as a UTC ISO 8601 basic timestamp."""
    return as_utc(moment).strftime(FULL_DATE_FORMAT)


def credential_scope(
    key: str,
    date: str,
    region: Union[Region, str],
    service: str = SERVICE,
    request_type: str = REQUEST_TYPE,
) -> str:
    """Build the credential scope, e.g. ``KEY/20240101/eu-west-1/s3/aws4_request``."""
    return "/".join([key, date, str(region), service, request_type])


def _hmac_sha256(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def derive_signing_key(
    secret: str,
    date: str,
    region: Union[Region, str],
    service: str = SERVICE,
    request_type: str = REQUEST_TYPE,
) -> bytes:
    """Derive the SigV4 signing key for one date, region and service.

    Args:
        secret: The AWS secret access key.
        date: Short UTC date, ``YYYYMMDD``.
        region: Region the signature is bound to.
        service: Service identifier.
        request_type: Request type terminator.

    Returns:
        The 32 byte raw signing key.
    """
    signing_key = ("AWS4" + secret).encode("utf-8")
    for data in (date, str(region), service, request_type):
        signing_key = _hmac_sha256(signing_key, data)
    return signing_key


def sign(string_to_sign: str, signing_key: bytes) -> str:
    """Sign ``string_to_sign`` and return the lower-case hex digest."""
    return hmac.new(
        signing_key, string_to_sign.encode("utf-8"), hashlib.sha256
    ).hexdigest()
