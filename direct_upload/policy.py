"""Policy document construction for browser POST uploads.

The policy is a JSON document holding an expiration time and a list of
conditions S3 checks every form field against. It is sent base64 encoded
as the ``policy`` form field and is also the string that gets signed.
"""

import base64
import json
import math
import re
from datetime import datetime, timedelta
from typing import Any, Union

from direct_upload.errors import InvalidExpiryError, InvalidOptionError
from direct_upload.models import UploadOptions
from direct_upload.signing import ALGORITHM, as_utc

# S3 refuses policies valid for less than a second or more than 7 days
MIN_EXPIRY_SECONDS = 1
MAX_EXPIRY_SECONDS = 604800

EXPIRATION_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_UNIT_SECONDS = {
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
    "w": 604800,
    "week": 604800,
    "weeks": 604800,
}

_SECONDS_PATTERN = re.compile(r"\+?\d+")
_TERM_PATTERN = re.compile(r"\s*([+-]?)\s*(\d+)\s*([a-zA-Z]+)\s*")


def _relative_seconds(expression: str) -> int:
    """Convert e.g. ``"+6 hours"`` or ``"+1 day 2 hours"`` to seconds."""
    text = expression.strip()
    if not text:
        raise InvalidExpiryError("Expiry expression is empty")

    if _SECONDS_PATTERN.fullmatch(text):
        return int(text)

    total = 0
    pos = 0
    while pos < len(text):
        match = _TERM_PATTERN.match(text, pos)
        if match is None:
            raise InvalidExpiryError(f"Invalid expiry expression: {expression!r}")

        sign, amount, unit = match.groups()
        unit_seconds = _UNIT_SECONDS.get(unit.lower())
        if unit_seconds is None:
            raise InvalidExpiryError(f"Unknown time unit in expiry: {unit!r}")

        seconds = int(amount) * unit_seconds
        total += -seconds if sign == "-" else seconds
        pos = match.end()

    return total


def parse_expires(
    expires: Union[str, int, float, timedelta, datetime],
    now: datetime,
) -> datetime:
    """Resolve the ``expires`` option to an absolute UTC expiration time.

    Args:
        expires: Seconds from now, a relative expression such as
                 ``"+6 hours"``, a ``timedelta`` or an absolute ``datetime``.
        now: The signature's captured current time.

    Returns:
        The expiration time in UTC.

    Raises:
        InvalidExpiryError: If the value can't be parsed or the expiration is
                            not between 1 and 604800 seconds from ``now``.
    """
    now = as_utc(now)

    if isinstance(expires, bool):
        raise InvalidExpiryError("Expiry must be a time expression or seconds")

    if isinstance(expires, datetime):
        expiration = as_utc(expires)
        seconds = (expiration - now).total_seconds()
    elif isinstance(expires, timedelta):
        seconds = expires.total_seconds()
    elif isinstance(expires, (int, float)):
        seconds = expires
    elif isinstance(expires, str):
        seconds = _relative_seconds(expires)
    else:
        raise InvalidExpiryError(
            f"Expiry must be a time expression or seconds, got {type(expires).__name__}"
        )

    # Checked before any arithmetic so huge values can't overflow datetime
    if not (MIN_EXPIRY_SECONDS <= seconds <= MAX_EXPIRY_SECONDS):
        raise InvalidExpiryError(
            f"Expiry must be between {MIN_EXPIRY_SECONDS} and "
            f"{MAX_EXPIRY_SECONDS} seconds, got {seconds}"
        )

    if isinstance(expires, datetime):
        return expiration
    return now + timedelta(seconds=seconds)


def mb_to_bytes(megabytes: Any) -> int:
    """Convert a size in megabytes to bytes.

    Raises:
        InvalidOptionError: If ``megabytes`` is not a finite, non-negative number.
    """
    if isinstance(megabytes, bool):
        raise InvalidOptionError("max_file_size must be a number of megabytes")
    try:
        size = float(megabytes) * 1024 * 1024
    except (TypeError, ValueError, OverflowError):
        raise InvalidOptionError(
            f"max_file_size must be a number of megabytes, got {megabytes!r}"
        ) from None

    if not math.isfinite(size) or size < 0:
        raise InvalidOptionError(
            f"max_file_size must be a finite, non-negative size, got {megabytes!r}"
        )
    return int(size)


def _content_type_condition(options: UploadOptions) -> list:
    if options.content_type:
        return ["eq", "$Content-Type", options.content_type]
    if options.content_type_starts_with:
        return ["starts-with", "$Content-Type", options.content_type_starts_with]
    return ["starts-with", "$Content-Type", ""]


def build_conditions(
    bucket: str,
    options: UploadOptions,
    credential_scope: str,
    full_date: str,
) -> list:
    """Build the ordered list of policy conditions."""
    conditions: list = [
        {"bucket": bucket},
        {"acl": str(options.acl)},
        ["starts-with", "$key", options.valid_prefix],
        _content_type_condition(options),
        ["content-length-range", 0, mb_to_bytes(options.max_file_size)],
        {"success_action_status": options.success_status},
        {"x-amz-credential": credential_scope},
        {"x-amz-algorithm": ALGORITHM},
        {"x-amz-date": full_date},
    ]

    # Values are supplied by the form itself, so any value is accepted
    for name in options.additional_inputs:
        conditions.append(["starts-with", f"${name}", ""])

    return conditions


def encode_policy(policy: dict[str, Any]) -> str:
    """Serialize the policy to compact JSON and base64 encode it."""
    document = json.dumps(policy, separators=(",", ":"))
    return base64.b64encode(document.encode("utf-8")).decode("ascii")


def decode_policy(base64_policy: str) -> dict[str, Any]:
    """Decode a base64 policy back into its JSON document."""
    return json.loads(base64.b64decode(base64_policy).decode("utf-8"))


def build_policy(
    bucket: str,
    options: UploadOptions,
    credential_scope: str,
    full_date: str,
    now: datetime,
) -> tuple[dict[str, Any], str]:
    """Build the policy document and its base64 encoding.

    Args:
        bucket: Destination bucket name.
        options: Upload options.
        credential_scope: Credential scope string for this signature.
        full_date: ISO 8601 basic timestamp for this signature.
        now: The signature's captured current time.

    Returns:
        Tuple of (policy document, base64 encoded policy).

    Raises:
        InvalidExpiryError: If ``options.expires`` is out of range.
        InvalidOptionError: If ``options.max_file_size`` is not numeric.
    """
    expiration = parse_expires(options.expires, now)
    policy = {
        "expiration": expiration.strftime(EXPIRATION_FORMAT),
        "conditions": build_conditions(bucket, options, credential_scope, full_date),
    }
    return policy, encode_policy(policy)
