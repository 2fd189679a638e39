"""Tests for CLI entry point.

Tests the command-line interface and argument parsing.
"""

import json
import os
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from direct_upload.cli import (
    build_signature,
    create_renderer,
    main,
    parse_args,
    parse_option,
    resolve_profile,
)
from direct_upload.config import ConfigError
from direct_upload.models import UploadProfile
from direct_upload.renderers import ConsoleRenderer, HtmlRenderer, JsonRenderer

CREDENTIAL_ENV = {
    "AWS_ACCESS_KEY_ID": "env-key",
    "AWS_SECRET_ACCESS_KEY": "env-secret",
}


class TestParseArgs:
    """Tests for argument parsing."""

    def test_default_args(self):
        """Should have sensible defaults."""
        args = parse_args([])

        assert args.config == "config.json"
        assert args.profile is None
        assert args.bucket is None
        assert args.region is None
        assert args.option == []
        assert args.format == "console"
        assert args.output is None
        assert args.no_key is False
        assert args.aws_profile is None
        assert args.verbose == 0

    def test_short_flags(self):
        args = parse_args(["-c", "custom.json", "-p", "media", "-b", "bucket", "-r", "eu-west-1"])

        assert args.config == "custom.json"
        assert args.profile == "media"
        assert args.bucket == "bucket"
        assert args.region == "eu-west-1"

    def test_repeated_options(self):
        args = parse_args(["-o", "acl=public-read", "--option", "max_file_size=5"])
        assert args.option == ["acl=public-read", "max_file_size=5"]

    def test_format_choices(self):
        assert parse_args(["-f", "json"]).format == "json"
        with pytest.raises(SystemExit):
            parse_args(["-f", "xml"])

    def test_verbosity(self):
        assert parse_args(["-vv"]).verbose == 2

    def test_output_rejected_for_console(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--output", "form.txt"])

        assert exc_info.value.code == 2
        assert "--output" in capsys.readouterr().err


class TestParseOption:
    """Tests for NAME=VALUE parsing."""

    def test_string_value(self):
        assert parse_option("acl=public-read") == ("acl", "public-read")

    def test_json_value(self):
        assert parse_option("max_file_size=5") == ("max_file_size", 5)
        assert parse_option("encryption=true") == ("encryption", True)
        assert parse_option('additional_inputs={"a": "b"}') == ("additional_inputs", {"a": "b"})

    def test_value_with_equals(self):
        assert parse_option("default_filename=a=b") == ("default_filename", "a=b")

    @pytest.mark.parametrize("raw", ["acl", "=value"])
    def test_invalid(self, raw: str):
        with pytest.raises(ValueError):
            parse_option(raw)


class TestResolveProfile:
    """Tests for resolve_profile function."""

    def test_bucket_flag_skips_config(self):
        args = parse_args(["-b", "bucket", "-r", "eu-west-1", "-o", "acl=public-read"])

        with patch("direct_upload.cli.load_profiles") as mock_load:
            profile = resolve_profile(args)

        mock_load.assert_not_called()
        assert profile.bucket == "bucket"
        assert profile.region == "eu-west-1"
        assert profile.options == {"acl": "public-read"}

    @patch("direct_upload.cli.load_profiles")
    def test_loads_named_profile(self, mock_load: Mock):
        mock_load.return_value = {
            "media": UploadProfile(key="media", bucket="media-bucket", options={"acl": "private"}),
            "docs": UploadProfile(key="docs", bucket="docs-bucket"),
        }

        profile = resolve_profile(parse_args(["-c", "test.json", "-p", "media", "-o", "acl=public-read"]))

        mock_load.assert_called_once_with("test.json")
        assert profile.bucket == "media-bucket"
        assert profile.options == {"acl": "public-read"}

    def test_bad_option_is_config_error(self):
        with pytest.raises(ConfigError, match="NAME=VALUE"):
            resolve_profile(parse_args(["-b", "bucket", "-o", "acl"]))


class TestBuildSignature:
    """Tests for credential selection."""

    def test_profile_credentials_win(self):
        profile = UploadProfile(
            key="media",
            bucket="b",
            aws_access_key_id="profile-key",
            aws_secret_access_key="profile-secret",
        )

        with patch.dict(os.environ, CREDENTIAL_ENV, clear=False):
            signature = build_signature(profile)

        assert signature.key == "profile-key"

    def test_falls_back_to_env(self):
        with patch.dict(os.environ, CREDENTIAL_ENV, clear=False):
            signature = build_signature(UploadProfile(key="media", bucket="b"))

        assert signature.key == "env-key"

    @patch("direct_upload.cli.signature_from_session")
    def test_aws_profile_uses_session(self, mock_from_session: Mock):
        profile = UploadProfile(key="media", bucket="b", region="eu-west-1")

        build_signature(profile, aws_profile="dev")

        mock_from_session.assert_called_once_with("b", "eu-west-1", {}, profile_name="dev")


class TestCreateRenderer:
    """Tests for renderer creation based on args."""

    def test_console_by_default(self):
        assert isinstance(create_renderer(parse_args([])), ConsoleRenderer)

    def test_json(self):
        renderer = create_renderer(parse_args(["-f", "json", "--output", "form.json"]))
        assert isinstance(renderer, JsonRenderer)
        assert renderer.output_path == "form.json"

    def test_html_inputs_only(self):
        renderer = create_renderer(parse_args(["-f", "html", "--inputs-only"]))
        assert isinstance(renderer, HtmlRenderer)
        assert renderer.inputs_only is True


class TestMain:
    """Tests for main entry point."""

    def test_json_output_to_file(self, tmp_path: Path):
        output = tmp_path / "form.json"

        with patch.dict(os.environ, CREDENTIAL_ENV, clear=False):
            result = main(["-b", "test/bucket", "-r", "eu-west-1", "-f", "json", "--output", str(output)])

        assert result == 0
        data = json.loads(output.read_text())
        assert data["url"] == "//s3-eu-west-1.amazonaws.com/test%2Fbucket"
        assert data["fields"]["X-amz-credential"].startswith("env-key/")
        assert data["fields"]["key"] == "${filename}"

    def test_numeric_prefix_option(self, tmp_path: Path):
        """JSON-looking values for text options still sign as strings."""
        output = tmp_path / "form.json"

        with patch.dict(os.environ, CREDENTIAL_ENV, clear=False):
            result = main(["-b", "bucket", "-o", "valid_prefix=2024", "-f", "json", "--output", str(output)])

        assert result == 0
        assert json.loads(output.read_text())["fields"]["key"] == "2024${filename}"

    def test_no_key(self, tmp_path: Path):
        output = tmp_path / "form.json"

        with patch.dict(os.environ, CREDENTIAL_ENV, clear=False):
            main(["-b", "bucket", "-f", "json", "--output", str(output), "--no-key"])

        assert "key" not in json.loads(output.read_text())["fields"]

    def test_html_to_stdout(self, capsys):
        with patch.dict(os.environ, CREDENTIAL_ENV, clear=False):
            result = main(["-b", "bucket", "-f", "html", "--inputs-only"])

        assert result == 0
        out = capsys.readouterr().out
        assert out.startswith("<input type")
        assert 'name="X-amz-signature"' in out

    def test_console_output(self, capsys):
        with patch.dict(os.environ, CREDENTIAL_ENV, clear=False):
            result = main(["-b", "bucket"])

        assert result == 0
        assert "//s3.amazonaws.com/bucket" in capsys.readouterr().out

    @patch("direct_upload.cli.load_profiles")
    def test_returns_2_on_config_error(self, mock_load: Mock, capsys):
        mock_load.side_effect = ConfigError("No config found")

        assert main([]) == 2
        assert "Configuration error: No config found" in capsys.readouterr().err

    def test_returns_2_on_missing_credentials(self, capsys):
        env = {k: v for k, v in os.environ.items() if k not in CREDENTIAL_ENV}

        with patch.dict(os.environ, env, clear=True):
            result = main(["-b", "bucket"])

        assert result == 2
        assert "Signing error" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "argv",
        [
            ["-b", "bucket", "-r", "moon-1"],
            ["-b", "bucket", "-o", "acl=everyone"],
            ["-b", "bucket", "-o", "colour=blue"],
            ["-b", "bucket", "-o", "expires=+30 days"],
            ["-b", "bucket", "-o", "custom_url=nowhere"],
            ["-b", "bucket", "-o", "max_file_size=-1"],
        ],
    )
    def test_returns_2_on_invalid_input(self, argv, capsys):
        with patch.dict(os.environ, CREDENTIAL_ENV, clear=False):
            assert main(argv) == 2
        assert "Signing error" in capsys.readouterr().err
