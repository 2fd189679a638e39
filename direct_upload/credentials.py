"""Credential discovery for signatures.

Two ways to find the AWS key and secret without passing them in:

1. The ``AWS_ACCESS_KEY_ID`` and ``AWS_SECRET_ACCESS_KEY`` environment
   variables.
2. The boto3 default credential chain (environment, shared credentials
   file, config profiles, instance metadata).
"""

import logging
import os
from typing import Any, Mapping, Optional, Union

import boto3
from botocore.exceptions import ProfileNotFound

from direct_upload.errors import InvalidCredentialError
from direct_upload.models import Region, UploadOptions
from direct_upload.signature import Signature

logger = logging.getLogger(__name__)

ENV_ACCESS_KEY = "AWS_ACCESS_KEY_ID"
ENV_SECRET_KEY = "AWS_SECRET_ACCESS_KEY"

# Temporary credentials must send their session token with the upload
SECURITY_TOKEN_FIELD = "x-amz-security-token"


def credentials_from_env(
    environ: Optional[Mapping[str, str]] = None,
) -> tuple[str, str]:
    """Read the key and secret from the environment.

    Args:
        environ: Mapping to read from, defaults to ``os.environ``.

    Returns:
        Tuple of (key, secret). Missing values are returned empty so the
        ``Signature`` constructor rejects them.
    """
    if environ is None:
        environ = os.environ
    return environ.get(ENV_ACCESS_KEY, ""), environ.get(ENV_SECRET_KEY, "")


def credentials_from_session(
    profile_name: Optional[str] = None,
) -> tuple[str, str, Optional[str]]:
    """Resolve the key, secret and session token through the boto3 credential chain.

    Args:
        profile_name: Named profile from the shared AWS config, or None for
                      the default chain.

    Returns:
        Tuple of (key, secret, token). The token is None for long-lived
        credentials.

    Raises:
        InvalidCredentialError: If no credentials could be resolved.
    """
    try:
        session = boto3.Session(profile_name=profile_name)
    except ProfileNotFound as e:
        raise InvalidCredentialError(str(e)) from e

    credentials = session.get_credentials()
    if credentials is None:
        raise InvalidCredentialError(
            f"No AWS credentials found for profile {profile_name or 'default'}"
        )

    frozen = credentials.get_frozen_credentials()
    logger.debug(
        "Resolved AWS credentials",
        extra={"profile": profile_name, "method": credentials.method},
    )
    return frozen.access_key, frozen.secret_key, frozen.token


def signature_from_env(
    bucket: str,
    region: Union[Region, str] = Region.US_EAST_1,
    options: Union[Mapping[str, Any], UploadOptions, None] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Signature:
    """Build a ``Signature`` using credentials from environment variables.

    Raises:
        InvalidCredentialError: If either variable is missing or empty.
    """
    key, secret = credentials_from_env(environ)
    return Signature(key, secret, bucket, region, options)


def signature_from_session(
    bucket: str,
    region: Union[Region, str] = Region.US_EAST_1,
    options: Union[Mapping[str, Any], UploadOptions, None] = None,
    profile_name: Optional[str] = None,
) -> Signature:
    """Build a ``Signature`` using credentials from the boto3 credential chain.

    Temporary credentials add their session token as an extra form field,
    which also puts it into the signed policy.
    """
    key, secret, token = credentials_from_session(profile_name)
    options = UploadOptions.create(options)
    if token:
        additional_inputs = dict(options.additional_inputs)
        additional_inputs[SECURITY_TOKEN_FIELD] = token
        options.merge({"additional_inputs": additional_inputs})
    return Signature(key, secret, bucket, region, options)
