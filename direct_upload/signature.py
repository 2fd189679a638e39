"""Signature for direct browser uploads to S3.

Builds the AWS Signature Version 4 policy, the signature over it and the
hidden form fields a browser POSTs alongside the file.

Example:
    >>> signature = Signature("AKIA...", "secret", "my-bucket", "eu-west-1")
    >>> signature.get_form_url()
    '//s3-eu-west-1.amazonaws.com/my-bucket'
    >>> inputs = signature.get_form_inputs()
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from direct_upload.errors import InvalidCredentialError
from direct_upload.models import Region, UploadForm, UploadOptions
from direct_upload.policy import build_policy
from direct_upload import signing
from direct_upload.urls import build_url

logger = logging.getLogger(__name__)

# Values left in from the example configuration
PLACEHOLDER_KEY = "YOUR_S3_KEY"
PLACEHOLDER_SECRET = "YOUR_S3_SECRET"


class Signature:
    """Signed upload policy for one bucket.

    The current time is captured once at construction, so every date in the
    policy, credential scope and form fields agrees. The credential scope,
    policy and signature are computed on first use and cached; changing the
    options through ``set_options()`` discards the cache.

    A lock guards the first computation, so one instance may be shared
    between threads.
    """

    ALGORITHM = signing.ALGORITHM
    SERVICE = signing.SERVICE
    REQUEST_TYPE = signing.REQUEST_TYPE

    def __init__(
        self,
        key: str,
        secret: str,
        bucket: str,
        region: Union[Region, str] = Region.US_EAST_1,
        options: Union[Mapping[str, Any], UploadOptions, None] = None,
        now: Optional[datetime] = None,
    ):
        """Initialize the signature.

        Args:
            key: AWS access key id.
            secret: AWS secret access key.
            bucket: Bucket to upload the file into.
            region: Region the bucket is within.
            options: Option overrides, see ``UploadOptions``.
            now: Time to sign at, defaults to the current time.

        Raises:
            InvalidCredentialError: If the key or secret is empty or a placeholder.
            InvalidRegionError: If the region is not a known AWS region.
            UnknownOptionError: If an option name is not recognized.
            InvalidAclError: If the acl option is not a canned ACL.
        """
        self._set_credentials(key, secret)
        self.bucket = bucket
        self.region = Region.parse(region)
        self.options = UploadOptions.create(options)

        if now is None:
            now = datetime.now(timezone.utc)
        self.time = signing.as_utc(now).replace(microsecond=0)

        self._lock = threading.Lock()
        self._credential_scope: Optional[str] = None
        self._policy: Optional[dict[str, Any]] = None
        self._base64_policy: Optional[str] = None
        self._signature: Optional[str] = None

    def _set_credentials(self, key: str, secret: str) -> None:
        if not key or key == PLACEHOLDER_KEY:
            raise InvalidCredentialError("Invalid AWS key")
        if not secret or secret == PLACEHOLDER_SECRET:
            raise InvalidCredentialError("Invalid AWS secret")
        self.key = key
        self._secret = secret

    def __repr__(self) -> str:
        return (
            f"Signature(key={self.key!r}, bucket={self.bucket!r}, "
            f"region={str(self.region)!r})"
        )

    def get_form_url(self) -> str:
        """URL the form should POST to, including the bucket."""
        return build_url(self.bucket, self.region, self.options)

    def get_options(self) -> UploadOptions:
        return self.options

    def set_options(self, overrides: Union[Mapping[str, Any], UploadOptions]) -> None:
        """Overwrite some options and discard any cached signature."""
        with self._lock:
            self.options.merge(overrides)
            self._credential_scope = None
            self._policy = None
            self._base64_policy = None
            self._signature = None

    def get_short_date(self) -> str:
        return signing.short_date(self.time)

    def get_full_date(self) -> str:
        return signing.full_date(self.time)

    def get_credential_scope(self) -> str:
        self._ensure_signed()
        return self._credential_scope

    def get_policy(self) -> dict[str, Any]:
        """The policy document before encoding."""
        self._ensure_signed()
        return self._policy

    def get_base64_policy(self) -> str:
        self._ensure_signed()
        return self._base64_policy

    def get_signature(self) -> str:
        """The hex encoded SigV4 signature of the policy."""
        self._ensure_signed()
        return self._signature

    def get_form_inputs(self, add_key: bool = True) -> dict[str, str]:
        """Hidden form fields to POST along with the file.

        Args:
            add_key: Whether to add the ``key`` field (the object name).

        Returns:
            Ordered mapping of field name to string value.
        """
        self._ensure_signed()

        inputs = {
            "Content-Type": self.options.content_type or "",
            "acl": str(self.options.acl),
            "success_action_status": self.options.success_status,
            "policy": self._base64_policy,
            "X-amz-credential": self._credential_scope,
            "X-amz-algorithm": self.ALGORITHM,
            "X-amz-date": self.get_full_date(),
            "X-amz-signature": self._signature,
        }

        for name, value in self.options.additional_inputs.items():
            inputs[name] = str(value)

        if add_key:
            # ${filename} is expanded by S3; change the field client-side
            # for any other name
            inputs["key"] = self.options.valid_prefix + self.options.default_filename

        return inputs

    def build_form(self, add_key: bool = True) -> UploadForm:
        """URL and form fields together, ready for a renderer."""
        return UploadForm(url=self.get_form_url(), inputs=self.get_form_inputs(add_key))

    def _ensure_signed(self) -> None:
        if self._signature is not None:
            return
        with self._lock:
            if self._signature is None:
                self._sign()

    def _sign(self) -> None:
        # Step 1: credential scope
        short_date = self.get_short_date()
        full_date = self.get_full_date()
        scope = signing.credential_scope(self.key, short_date, self.region)

        # Step 2: base64 policy
        policy, base64_policy = build_policy(
            self.bucket, self.options, scope, full_date, self.time
        )

        # Step 3: sign the policy with the derived key
        signing_key = signing.derive_signing_key(self._secret, short_date, self.region)
        signature = signing.sign(base64_policy, signing_key)

        self._credential_scope = scope
        self._policy = policy
        self._base64_policy = base64_policy
        self._signature = signature

        logger.debug(
            "Signed upload policy",
            extra={
                "bucket": self.bucket,
                "region": str(self.region),
                "credential_scope": scope,
                "expiration": policy["expiration"],
            },
        )
