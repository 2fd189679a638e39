"""Configuration loading for upload profiles.

Supports two configuration sources:
1. Environment variables (for CI/CD and servers) - takes priority
2. config.json file (for local development)

Environment Variable Format:
    UPLOAD_{KEY}=Bucket|Region
    {KEY}_ACCESS_KEY=xxx        (optional)
    {KEY}_SECRET_KEY=xxx        (optional)
    {KEY}_OPTIONS={"acl": ...}  (optional, JSON object)

Example:
    UPLOAD_AVATARS=my-avatar-bucket|eu-west-1
    AVATARS_OPTIONS={"acl": "public-read", "valid_prefix": "avatars/"}

Profiles without their own credentials fall back to AWS_ACCESS_KEY_ID and
AWS_SECRET_ACCESS_KEY (or the boto3 credential chain) when signing.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from direct_upload.models import UploadProfile

logger = logging.getLogger(__name__)

ENV_PREFIX = "UPLOAD_"
DEFAULT_REGION = "us-east-1"


class ConfigError(Exception):
    """Raised when configuration loading fails."""

    pass


# Required fields for a profile configuration
REQUIRED_FIELDS = [
    "bucket",
]


def _parse_options(raw: Any, source: str) -> dict[str, Any]:
    if raw is None:
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in options for {source}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Options for {source} must be a JSON object")
    return raw


def load_from_json(config_path: str) -> dict[str, UploadProfile]:
    """Load upload profiles from a JSON file.

    Args:
        config_path: Path to the config.json file.

    Returns:
        Dictionary mapping profile keys to UploadProfile objects.
        Only enabled profiles are included.

    Raises:
        ConfigError: If file doesn't exist, contains invalid JSON,
                    or is missing required fields.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a JSON object of profiles")

    profiles: dict[str, UploadProfile] = {}

    for key, config in data.items():
        if not isinstance(config, dict):
            raise ConfigError(f"Profile '{key}' must be a JSON object")

        # Skip disabled profiles
        if not config.get("enabled", True):
            continue

        for field in REQUIRED_FIELDS:
            if field not in config:
                raise ConfigError(
                    f"Missing required field '{field}' for profile '{key}'"
                )

        profiles[key] = UploadProfile(
            key=key,
            bucket=config["bucket"],
            region=config.get("region", DEFAULT_REGION),
            options=_parse_options(config.get("options"), f"profile '{key}'"),
            aws_access_key_id=config.get("aws_access_key_id"),
            aws_secret_access_key=config.get("aws_secret_access_key"),
            enabled=True,
        )

    logger.debug("Loaded profiles from file", extra={"path": str(path), "count": len(profiles)})
    return profiles


def load_from_env() -> dict[str, UploadProfile]:
    """Load upload profiles from environment variables.

    Discovers profiles by looking for UPLOAD_* environment variables.

    Returns:
        Dictionary mapping profile keys to UploadProfile objects.

    Raises:
        ConfigError: If environment variables are malformed or only one of
                    a profile's credential variables is set.
    """
    profiles: dict[str, UploadProfile] = {}

    for env_key, env_value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue

        # Extract profile key (e.g., "UPLOAD_AVATARS" -> "AVATARS")
        profile_key = env_key[len(ENV_PREFIX):]
        if not profile_key:
            continue

        # Parse pipe-delimited value: Bucket|Region
        parts = env_value.split("|")
        if len(parts) not in (1, 2) or not parts[0]:
            raise ConfigError(
                f"Invalid format for {env_key}. Expected: Bucket|Region"
            )

        bucket = parts[0]
        region = parts[1] if len(parts) == 2 and parts[1] else DEFAULT_REGION

        access_key_var = f"{profile_key}_ACCESS_KEY"
        secret_key_var = f"{profile_key}_SECRET_KEY"
        access_key = os.environ.get(access_key_var)
        secret_key = os.environ.get(secret_key_var)

        if bool(access_key) != bool(secret_key):
            missing = secret_key_var if access_key else access_key_var
            raise ConfigError(f"Missing environment variable: {missing}")

        options_var = f"{profile_key}_OPTIONS"
        options = _parse_options(os.environ.get(options_var), options_var)

        profiles[profile_key] = UploadProfile(
            key=profile_key,
            bucket=bucket,
            region=region,
            options=options,
            aws_access_key_id=access_key or None,
            aws_secret_access_key=secret_key or None,
            enabled=True,
        )

    return profiles


def has_env_profiles() -> bool:
    """Check if any UPLOAD_* environment variables exist."""
    return any(key.startswith(ENV_PREFIX) and key != ENV_PREFIX for key in os.environ)


def load_profiles(
    config_path: str = "config.json",
) -> dict[str, UploadProfile]:
    """Load upload profiles with environment priority.

    Priority order:
    1. Environment variables (if any UPLOAD_* vars exist)
    2. config.json file

    Args:
        config_path: Path to config.json (used as fallback).

    Returns:
        Dictionary mapping profile keys to UploadProfile objects.

    Raises:
        ConfigError: If no profiles are configured or all are disabled.
    """
    profiles: dict[str, UploadProfile] = {}

    if has_env_profiles():
        profiles = load_from_env()
    elif Path(config_path).exists():
        profiles = load_from_json(config_path)

    if not profiles:
        raise ConfigError(
            "No upload profiles configured. Set UPLOAD_* environment variables "
            "or create a config.json file with at least one enabled profile."
        )

    return profiles


def select_profile(
    profiles: dict[str, UploadProfile],
    name: Optional[str] = None,
) -> UploadProfile:
    """Pick a profile by name, or the only one when no name is given.

    Raises:
        ConfigError: If the name is unknown, or no name is given and more
                    than one profile exists.
    """
    if name is not None:
        if name not in profiles:
            raise ConfigError(f"No matching profile found: {name}")
        return profiles[name]

    if len(profiles) != 1:
        raise ConfigError(
            "Several profiles configured, choose one with --profile: "
            + ", ".join(sorted(profiles))
        )
    return next(iter(profiles.values()))
