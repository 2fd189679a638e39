"""Command-line interface for generating direct upload forms.

Provides argument parsing and main entry point for signing an upload
policy from the command line.
"""

import argparse
import json
import logging
import sys
from typing import Any, Optional

from direct_upload.config import ConfigError, load_profiles, select_profile
from direct_upload.credentials import (
    credentials_from_env,
    signature_from_session,
)
from direct_upload.errors import DirectUploadError
from direct_upload.logging_config import configure_logging
from direct_upload.models import UploadProfile
from direct_upload.renderers import ConsoleRenderer, HtmlRenderer, JsonRenderer, Renderer
from direct_upload.signature import Signature

logger = logging.getLogger(__name__)

FORMATS = ("console", "json", "html")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="direct-upload",
        description="Generate signed form fields for direct browser uploads to S3",
    )

    parser.add_argument(
        "-c", "--config",
        default="config.json",
        help="Path to configuration file (default: config.json)",
    )

    parser.add_argument(
        "-p", "--profile",
        metavar="NAME",
        help="Upload profile to sign for",
    )

    parser.add_argument(
        "-b", "--bucket",
        help="Bucket to upload into (skips the configuration file)",
    )

    parser.add_argument(
        "-r", "--region",
        help="Region of the bucket (default: profile region or us-east-1)",
    )

    parser.add_argument(
        "-o", "--option",
        metavar="NAME=VALUE",
        action="append",
        default=[],
        help="Override an upload option, may be repeated; VALUE is parsed as JSON if possible",
    )

    parser.add_argument(
        "-f", "--format",
        choices=FORMATS,
        default="console",
        help="Output format (default: console)",
    )

    parser.add_argument(
        "--output",
        metavar="PATH",
        help="Write json or html output to a file instead of stdout",
    )

    parser.add_argument(
        "--no-key",
        action="store_true",
        help="Leave out the key field, for forms that set it client-side",
    )

    parser.add_argument(
        "--inputs-only",
        action="store_true",
        help="With --format html, emit only the hidden inputs",
    )

    parser.add_argument(
        "--aws-profile",
        metavar="NAME",
        help="Resolve credentials through boto3 using this AWS profile",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log more detail (-v info, -vv debug)",
    )

    args = parser.parse_args(argv)
    if args.output and args.format == "console":
        parser.error("--output needs --format json or html")
    return args


def parse_option(raw: str) -> tuple[str, Any]:
    """Parse a NAME=VALUE override.

    Raises:
        ValueError: If there is no ``=``.
    """
    name, sep, value = raw.partition("=")
    if not sep or not name.strip():
        raise ValueError(f"Invalid option '{raw}', expected NAME=VALUE")

    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    return name.strip(), parsed


def resolve_profile(args: argparse.Namespace) -> UploadProfile:
    """Build the profile from --bucket or load it from configuration.

    Raises:
        ConfigError: If configuration is missing or ambiguous.
    """
    if args.bucket:
        profile = UploadProfile(key="cli", bucket=args.bucket)
    else:
        profiles = load_profiles(args.config)
        profile = select_profile(profiles, args.profile)

    if args.region:
        profile.region = args.region

    for raw in args.option:
        try:
            name, value = parse_option(raw)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        profile.options[name] = value

    return profile


def build_signature(profile: UploadProfile, aws_profile: Optional[str] = None) -> Signature:
    """Sign for ``profile`` using the best available credentials.

    Profile credentials win, then ``--aws-profile`` through boto3, then
    the AWS environment variables.
    """
    if profile.has_credentials:
        key, secret = profile.aws_access_key_id, profile.aws_secret_access_key
    elif aws_profile:
        return signature_from_session(
            profile.bucket, profile.region, profile.options, profile_name=aws_profile
        )
    else:
        key, secret = credentials_from_env()
    return Signature(key, secret, profile.bucket, profile.region, profile.options)


def create_renderer(args: argparse.Namespace) -> Renderer:
    """Create the renderer for the requested output format."""
    if args.format == "json":
        return JsonRenderer(output_path=args.output)
    if args.format == "html":
        return HtmlRenderer(inputs_only=args.inputs_only, output_path=args.output)
    return ConsoleRenderer()


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 for success, 2 for configuration or signing errors
    """
    args = parse_args(argv)

    if args.verbose:
        configure_logging("DEBUG" if args.verbose > 1 else "INFO")
    else:
        configure_logging()

    # Load configuration
    try:
        profile = resolve_profile(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    logger.info(
        "Signing upload form",
        extra={"profile": profile.key, "bucket": profile.bucket, "region": profile.region},
    )

    # Sign and build the form
    try:
        signature = build_signature(profile, args.aws_profile)
        form = signature.build_form(add_key=not args.no_key)
    except DirectUploadError as e:
        print(f"Signing error: {e}", file=sys.stderr)
        return 2

    create_renderer(args).render(form)

    if args.output:
        logger.info("Form written", extra={"output": args.output})

    return 0


if __name__ == "__main__":
    sys.exit(main())
