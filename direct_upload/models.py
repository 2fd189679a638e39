"""Value objects and records for direct upload signatures."""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Mapping, Optional, Union

from direct_upload.errors import (
    InvalidAclError,
    InvalidRegionError,
    InvalidValueError,
    UnknownOptionError,
)

# Header injected into the policy and the form when encryption is enabled
ENCRYPTION_FIELD = "X-amz-server-side-encryption"
ENCRYPTION_ALGORITHM = "AES256"

# Joined into form fields and policy conditions, so always strings
STRING_OPTIONS = ("valid_prefix", "default_filename", "content_type", "content_type_starts_with")


class ValidatedEnum(Enum):
    """Enum whose members are looked up case-insensitively by value.

    Subclasses hold a fixed allowed set. Use ``parse()`` to turn raw input
    into a member, which raises an ``InvalidValueError`` subclass instead of
    a bare ``ValueError``.
    """

    @classmethod
    def _missing_(cls, value: object) -> Optional["ValidatedEnum"]:
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None

    @classmethod
    def _invalid(cls, raw: object) -> InvalidValueError:
        return InvalidValueError(f"Invalid {cls.__name__.lower()}: {raw!r}")

    @classmethod
    def parse(cls, raw: Union[str, "ValidatedEnum"]):
        """Return the member matching ``raw``.

        Args:
            raw: A member of this enum or its value in any casing.

        Raises:
            InvalidValueError: If ``raw`` is not in the allowed set.
        """
        try:
            return cls(raw)
        except ValueError:
            raise cls._invalid(raw) from None

    def __str__(self) -> str:
        return self.value


class Region(ValidatedEnum):
    """An AWS region, identified by its hyphenated name."""

    AF_SOUTH_1 = "af-south-1"
    AP_EAST_1 = "ap-east-1"
    AP_NORTHEAST_1 = "ap-northeast-1"
    AP_NORTHEAST_2 = "ap-northeast-2"
    AP_NORTHEAST_3 = "ap-northeast-3"
    AP_SOUTH_1 = "ap-south-1"
    AP_SOUTHEAST_1 = "ap-southeast-1"
    AP_SOUTHEAST_2 = "ap-southeast-2"
    CA_CENTRAL_1 = "ca-central-1"
    EU_CENTRAL_1 = "eu-central-1"
    EU_NORTH_1 = "eu-north-1"
    EU_SOUTH_1 = "eu-south-1"
    EU_WEST_1 = "eu-west-1"
    EU_WEST_2 = "eu-west-2"
    EU_WEST_3 = "eu-west-3"
    ME_SOUTH_1 = "me-south-1"
    SA_EAST_1 = "sa-east-1"
    US_EAST_1 = "us-east-1"
    US_EAST_2 = "us-east-2"
    US_WEST_1 = "us-west-1"
    US_WEST_2 = "us-west-2"

    @classmethod
    def _invalid(cls, raw: object) -> InvalidValueError:
        return InvalidRegionError(f"Invalid region: {raw!r}")


class Acl(ValidatedEnum):
    """A canned access control list applied to the uploaded object."""

    AUTHENTICATED_READ = "authenticated-read"
    AWS_EXEC_READ = "aws-exec-read"
    BUCKET_OWNER_FULL_CONTROL = "bucket-owner-full-control"
    BUCKET_OWNER_READ = "bucket-owner-read"
    LOG_DELIVERY_WRITE = "log-delivery-write"
    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"

    @classmethod
    def _invalid(cls, raw: object) -> InvalidValueError:
        return InvalidAclError(f"Invalid acl: {raw!r}")


@dataclass
class UploadOptions:
    """Options controlling the upload policy and the generated form.

    Every field has a default; callers override a subset through
    ``create()`` or ``merge()``. After any change the derived fields are
    recomputed: ``acl`` becomes an ``Acl``, ``success_status`` a string, and
    ``encryption`` adds the server-side encryption field to
    ``additional_inputs``.
    """

    # HTTP status S3 answers with on success
    success_status: Any = 201
    # Canned ACL for the uploaded object, not the bucket
    acl: Any = Acl.PRIVATE
    # ${filename} is expanded by S3 to the name of the uploaded file
    default_filename: str = "${filename}"
    # Megabytes
    max_file_size: Any = 500
    # Relative time expression or seconds, 1 second to 7 days
    expires: Any = "+6 hours"
    valid_prefix: str = ""
    # Exact Content-Type; blank allows all
    content_type: str = ""
    # Content-Type prefix, only used when content_type is blank
    content_type_starts_with: str = ""
    encryption: bool = False
    # S3 compatible endpoint to POST to instead of AWS
    custom_url: Optional[str] = None
    accelerate: bool = False
    # Extra form fields, e.g. {"Content-Disposition": "attachment"}
    additional_inputs: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._derive()

    @classmethod
    def names(cls) -> list[str]:
        """Names of every recognized option."""
        return [f.name for f in fields(cls)]

    @classmethod
    def _check_name(cls, name: str) -> None:
        if name not in cls.names():
            raise UnknownOptionError(f"Unknown option: {name!r}")

    @classmethod
    def create(
        cls,
        overrides: Union[Mapping[str, Any], "UploadOptions", None] = None,
    ) -> "UploadOptions":
        """Build options from the defaults with ``overrides`` applied.

        Raises:
            UnknownOptionError: If an override key is not a recognized option.
            InvalidAclError: If the ``acl`` override is not a canned ACL.
        """
        options = cls()
        if overrides:
            options.merge(overrides)
        return options

    def merge(self, overrides: Union[Mapping[str, Any], "UploadOptions"]) -> None:
        """Overwrite the given options, keeping the rest, and re-derive."""
        if isinstance(overrides, UploadOptions):
            overrides = overrides.as_dict()

        for name in overrides:
            self._check_name(name)

        # Derive on a copy so a rejected value leaves these options intact
        candidate = replace(self, **overrides)
        for f in fields(self):
            setattr(self, f.name, getattr(candidate, f.name))

    def get(self, name: str) -> Any:
        self._check_name(name)
        return getattr(self, name)

    def set(self, name: str, value: Any) -> None:
        self.merge({name: value})

    def as_dict(self) -> dict[str, Any]:
        """Return every option as a plain dictionary."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["additional_inputs"] = dict(self.additional_inputs)
        return data

    def _derive(self) -> None:
        self.acl = Acl.parse(self.acl)

        # S3 echoes the status back as a form field, so it must be a string
        self.success_status = str(self.success_status)

        for name in STRING_OPTIONS:
            value = getattr(self, name)
            setattr(self, name, "" if value is None else str(value))

        # Never share the caller's mapping
        self.additional_inputs = dict(self.additional_inputs or {})

        # Set early so the field reaches both the policy and the inputs
        if self.encryption:
            self.additional_inputs[ENCRYPTION_FIELD] = ENCRYPTION_ALGORITHM


@dataclass
class UploadForm:
    """Destination URL and ordered hidden fields for a browser upload form."""

    url: str
    inputs: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "fields": dict(self.inputs)}


@dataclass
class UploadProfile:
    """A configured upload target."""

    key: str
    bucket: str
    region: str = "us-east-1"
    options: dict[str, Any] = field(default_factory=dict)
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    enabled: bool = True

    @property
    def has_credentials(self) -> bool:
        """True if the profile carries its own key and secret."""
        return bool(self.aws_access_key_id and self.aws_secret_access_key)
