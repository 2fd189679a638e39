"""Destination URL for the upload form."""

from typing import Union
from urllib.parse import quote_plus

import httpx

from direct_upload.errors import InvalidOptionError
from direct_upload.models import Region, UploadOptions
from direct_upload.signing import SERVICE

# The legacy default region has no region segment in its hostname
LEGACY_REGION = Region.US_EAST_1


def validate_custom_url(custom_url: str) -> str:
    """Check ``custom_url`` is an absolute http(s) URL and return it trimmed.

    Raises:
        InvalidOptionError: If the URL is malformed or not absolute.
    """
    candidate = custom_url.strip() if isinstance(custom_url, str) else ""
    try:
        parsed = httpx.URL(candidate)
    except (httpx.InvalidURL, ValueError) as e:
        raise InvalidOptionError(f"Invalid custom_url: {custom_url!r}") from e

    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise InvalidOptionError(
            f"Invalid custom_url: {custom_url!r}, must include http:// or https://"
        )
    return candidate


def build_url(bucket: str, region: Union[Region, str], options: UploadOptions) -> str:
    """Build the URL the form should POST to.

    Args:
        bucket: Destination bucket. Case is preserved, reserved characters
                are percent-encoded.
        region: Region the bucket lives in.
        options: Upload options; ``custom_url`` and ``accelerate`` change the
                 endpoint.

    Returns:
        The form action URL. AWS URLs are scheme-relative.

    Raises:
        InvalidOptionError: If ``custom_url`` is set but malformed.
    """
    encoded_bucket = quote_plus(bucket)

    if options.custom_url:
        base = validate_custom_url(options.custom_url)
        return base.rstrip("/") + "/" + encoded_bucket

    if options.accelerate:
        return f"//{encoded_bucket}.{SERVICE}-accelerate.amazonaws.com"

    region = Region.parse(region)
    middle = "" if region is LEGACY_REGION else f"-{region}"
    return f"//{SERVICE}{middle}.amazonaws.com/{encoded_bucket}"
