"""
Test the command line interface.
"""

import argparse
from pathlib import Path

import pytest

from ts_oas_types.cli import (
    EXIT_FILE_NOT_FOUND,
    EXIT_GENERATION_ERROR,
    EXIT_INVALID_DOCUMENT,
    EXIT_SUCCESS,
    _http_header,
    build_options,
    main,
    parse_command_line_args,
)


@pytest.fixture
def petstore_path(fixtures_dir: Path) -> str:
    """Path of the OpenAPI 3 petstore fixture."""
    return str(fixtures_dir / "petstore.yaml")


class TestArguments:
    """Test argument parsing and option building."""

    def test_defaults(self) -> None:
        """Test that every type generation flag is off by default."""
        options = build_options(parse_command_line_args(["api.yaml"]))

        assert options.version is None
        assert not options.immutable_types
        assert not options.raw_schema
        assert options.http_method == "GET"
        assert options.http_headers == {}
        assert options.cwd == Path.cwd()

    def test_flags(self) -> None:
        """Test that flags map onto generator options."""
        args = parse_command_line_args(
            [
                "api.yaml",
                "--openapi-version",
                "2",
                "--immutable-types",
                "--content-never",
                "--export-type",
                "--header",
                "",
                "--http-header",
                "X-Api-Key: abc",
                "--http-header",
                "Accept:application/json",
            ]
        )

        options = build_options(args)

        assert options.version == 2  # noqa: PLR2004
        assert options.immutable_types
        assert options.content_never
        assert options.export_type
        assert options.comment_header == ""
        assert options.http_headers == {"X-Api-Key": "abc", "Accept": "application/json"}

    def test_invalid_http_header(self) -> None:
        """Test that headers without a separator are rejected."""
        with pytest.raises(argparse.ArgumentTypeError):
            _http_header("no-separator")

    def test_unsupported_version_choice(self) -> None:
        """Test that argparse rejects unsupported versions."""
        with pytest.raises(SystemExit):
            parse_command_line_args(["api.yaml", "--openapi-version", "4"])


class TestMain:
    """Test running the CLI end to end."""

    def test_writes_to_stdout(self, petstore_path: str, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that declarations go to stdout without --output."""
        exit_code = main([petstore_path, "--silent"])

        captured = capsys.readouterr()
        assert exit_code == EXIT_SUCCESS
        assert "export interface paths {" in captured.out
        assert "export interface operations {" in captured.out

    def test_writes_output_file(
        self, petstore_path: str, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test that --output writes the file, creating directories."""
        output = tmp_path / "generated" / "api.d.ts"

        exit_code = main([petstore_path, "--output", str(output), "--verbose"])

        captured = capsys.readouterr()
        assert exit_code == EXIT_SUCCESS
        assert output.read_text(encoding="utf-8").startswith("/**\n * This file was auto-generated")
        assert "TypeScript types generated successfully" in captured.out
        assert "Generated 3 declarations:" in captured.out
        assert "export interface" not in captured.out

    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test the exit code for a document that doesn't exist."""
        exit_code = main([str(tmp_path / "missing.yaml")])

        assert exit_code == EXIT_FILE_NOT_FOUND
        assert "not found" in capsys.readouterr().err

    def test_invalid_document(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test the exit code for a document that can't be parsed."""
        source = tmp_path / "broken.yaml"
        source.write_text("openapi: [3.0\n", encoding="utf-8")

        exit_code = main([str(source)])

        assert exit_code == EXIT_INVALID_DOCUMENT
        assert "Invalid OpenAPI document" in capsys.readouterr().err

    def test_generation_error(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test the exit code for a document whose references don't resolve."""
        source = tmp_path / "api.yaml"
        source.write_text(
            "openapi: 3.0.0\n"
            "paths: {}\n"
            "components:\n"
            "  schemas:\n"
            "    Pet:\n"
            "      $ref: '#/components/schemas/Missing'\n",
            encoding="utf-8",
        )

        exit_code = main([str(source)])

        assert exit_code == EXIT_GENERATION_ERROR
        assert "#/components/schemas/Missing" in capsys.readouterr().err

    def test_raw_schema_needs_version(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that a configuration error is reported as a generation error."""
        source = tmp_path / "schemas.yaml"
        source.write_text("Pet:\n  type: object\n", encoding="utf-8")

        assert main([str(source), "--raw-schema"]) == EXIT_GENERATION_ERROR
        assert main([str(source), "--raw-schema", "--openapi-version", "3"]) == EXIT_SUCCESS
        assert "export interface schemas {" in capsys.readouterr().out
