#!/usr/bin/env python3
"""Command-line interface for the TypeScript OpenAPI type generator."""

import argparse
import logging
import sys
import traceback
from pathlib import Path
from typing import TextIO

from ts_oas_types import __version__
from ts_oas_types.config import GeneratorOptions
from ts_oas_types.constants import DEFAULT_COMMENT_HEADER, DEFAULT_HTTP_METHOD, SUPPORTED_VERSIONS
from ts_oas_types.errors import DocumentLoadError
from ts_oas_types.generator.engine import GenerationResult, TypeScriptGenerator
from ts_oas_types.loader import load_document
from ts_oas_types.utils.file_utils import write_output

# Exit codes for better error reporting
EXIT_SUCCESS = 0
EXIT_FILE_NOT_FOUND = 1
EXIT_INVALID_DOCUMENT = 2
EXIT_GENERATION_ERROR = 3


def _http_header(value: str) -> tuple[str, str]:
    name, separator, header_value = value.partition(":")
    if not separator or not name.strip():
        msg = f"expected NAME:VALUE, got {value!r}"
        raise argparse.ArgumentTypeError(msg)
    return name.strip(), header_value.strip()


def parse_command_line_args(args: list[str] | None = None) -> argparse.Namespace:
    """Create and configure the command line argument parser."""
    parser = argparse.ArgumentParser(
        prog="ts-oas-types",
        description="Generate TypeScript type declarations from an OpenAPI 2 or 3 document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s petstore.yaml
  %(prog)s petstore.yaml --output ./src/api.d.ts --immutable-types
  %(prog)s https://example.com/openapi.json --auth "Bearer TOKEN"
  %(prog)s schemas.yaml --raw-schema --openapi-version 3
        """,
    )
    parser.add_argument(
        "source",
        help="Path or http(s) URL of the OpenAPI document (JSON or YAML)",
        metavar="SOURCE",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Output file (default: write to stdout)",
        dest="output",
    )
    parser.add_argument(
        "--openapi-version",
        type=int,
        choices=sorted(SUPPORTED_VERSIONS),
        help="Major OpenAPI version of the document (default: read from the document)",
        dest="openapi_version",
    )

    types_group = parser.add_argument_group("type generation")
    types_group.add_argument(
        "--additional-properties",
        action="store_true",
        help="Allow arbitrary properties on objects without additionalProperties",
    )
    types_group.add_argument(
        "--default-non-nullable",
        action="store_true",
        help="Treat nullable schemas with a default value as non-nullable",
    )
    types_group.add_argument(
        "--immutable-types",
        action="store_true",
        help="Emit readonly members, arrays and tuples",
    )
    types_group.add_argument(
        "--content-never",
        action="store_true",
        help="Type responses without a body as never instead of unknown",
    )
    types_group.add_argument(
        "--make-paths-enum",
        action="store_true",
        help="Emit an enum of every path",
    )
    types_group.add_argument(
        "--path-params-as-types",
        action="store_true",
        help="Type path keys as template literals of their path parameters",
    )
    types_group.add_argument(
        "--support-array-length",
        action="store_true",
        help="Emit tuples for arrays whose minItems equals maxItems",
    )
    types_group.add_argument(
        "--export-type",
        action="store_true",
        help="Emit 'export type' aliases instead of interfaces",
    )
    types_group.add_argument(
        "--raw-schema",
        action="store_true",
        help="Treat the document as a bare {name: schema} collection (needs --openapi-version)",
    )
    types_group.add_argument(
        "--header",
        default=DEFAULT_COMMENT_HEADER,
        help="Comment prepended to the output (default: auto-generated notice)",
        dest="comment_header",
    )

    http_group = parser.add_argument_group("remote documents")
    http_group.add_argument(
        "--auth",
        help="Authorization header value used when fetching the document",
    )
    http_group.add_argument(
        "--http-header",
        type=_http_header,
        action="append",
        default=[],
        help="Extra request header as NAME:VALUE (repeatable)",
        dest="http_headers",
    )
    http_group.add_argument(
        "--http-method",
        default=DEFAULT_HTTP_METHOD,
        help="HTTP method used when fetching the document (default: %(default)s)",
    )

    parser.add_argument(
        "--silent",
        action="store_true",
        help="Don't log schema diagnostics",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser.parse_args(args)


def build_options(parsed_args: argparse.Namespace) -> GeneratorOptions:
    """Translate command line arguments into generator options."""
    return GeneratorOptions(
        version=parsed_args.openapi_version,
        additional_properties=parsed_args.additional_properties,
        default_non_nullable=parsed_args.default_non_nullable,
        immutable_types=parsed_args.immutable_types,
        content_never=parsed_args.content_never,
        make_paths_enum=parsed_args.make_paths_enum,
        path_params_as_types=parsed_args.path_params_as_types,
        support_array_length=parsed_args.support_array_length,
        export_type=parsed_args.export_type,
        raw_schema=parsed_args.raw_schema,
        comment_header=parsed_args.comment_header,
        silent=parsed_args.silent,
        auth=parsed_args.auth,
        http_headers=dict(parsed_args.http_headers),
        http_method=parsed_args.http_method,
        cwd=Path.cwd(),
    )


def configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def print_generation_summary(result: GenerationResult, stream: TextIO) -> None:
    """Print summary of the generated declarations."""
    print(f"Generated {len(result.graph.declarations)} declarations:", file=stream)
    for declaration in result.graph.declarations:
        print(f"  {declaration.name} ({len(declaration.type.members)} members)", file=stream)
    print(f"{len(result.graph.operations)} operations, {len(result.diagnostics)} diagnostics", file=stream)


def generate_from_source(source: str, options: GeneratorOptions) -> GenerationResult:
    """Load a document (and its external documents) and generate declarations for it."""
    loaded = load_document(source, options)
    return TypeScriptGenerator(options).generate(loaded.document, loaded.external)


def main(args: list[str] | None = None) -> int:
    """Generate TypeScript declarations from an OpenAPI document."""
    parsed_args = parse_command_line_args(args)
    configure_logging(verbose=parsed_args.verbose)
    # Keep stdout clean when it carries the declarations
    info_stream = sys.stdout if parsed_args.output else sys.stderr

    try:
        result = generate_from_source(parsed_args.source, build_options(parsed_args))

        if parsed_args.output:
            write_output(parsed_args.output, result.text)
        else:
            sys.stdout.write(result.text)

        if parsed_args.verbose:
            print_generation_summary(result, info_stream)
        if parsed_args.output:
            print(f"TypeScript types generated successfully in {parsed_args.output}", file=info_stream)

        return EXIT_SUCCESS

    except FileNotFoundError:
        print(f"Error: OpenAPI document not found: {parsed_args.source}", file=sys.stderr)
        return EXIT_FILE_NOT_FOUND
    except DocumentLoadError as e:
        print(f"Error: Invalid OpenAPI document: {e}", file=sys.stderr)
        return EXIT_INVALID_DOCUMENT
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if parsed_args.verbose:
            traceback.print_exc()
        return EXIT_GENERATION_ERROR


if __name__ == "__main__":
    sys.exit(main())
