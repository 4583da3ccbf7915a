#!/usr/bin/env python3
"""
CLI entrypoint for cvbindgen.

Usage:
  python -m app.cli <header.h>... -o OpenCV.pd [flags]

Flags:
  --manifest PATH        also write an XML binding manifest
  --config PATH          JSON/YAML file with GeneratorConfig fields
  --types-profile PATH   (repeatable) extra type aliases / matrix types
  --cpp CMD              preprocessor command (default: "cpp -P")
  -I DIR                 (repeatable) include directory for the preprocessor
  --prefix P             library function prefix (default: cv)
  --export-macro M       export annotation macro (default: CVAPI)
  --module NAME          host module name (default: PDL::OpenCV)
  --no-strict-constants  keep going when the preprocessor fails for a header
  -v / -q                verbose / quiet logging
"""
from __future__ import annotations

import argparse
import logging
import shlex
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from app.config import GeneratorConfig, load_config_file
from core.emitter import BindingEmitter
from core.errors import BindgenError
from gen.manifest.writer import write_manifest
from gen.pp.writer import write_pp_module
from utils.logging_config import configure_logging, level_for

logger = logging.getLogger(__name__)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cvbindgen",
        description="Generate PDL::PP bindings from OpenCV C API headers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Bind imgproc and write OpenCV.pd
    cvbindgen /usr/include/opencv2/imgproc/imgproc_c.h -o OpenCV.pd -I /usr/include

    # Several headers plus an XML manifest of everything that was bound
    cvbindgen core_c.h imgproc_c.h -o OpenCV.pd --manifest bindings.xml
        """)

    parser.add_argument('headers', nargs='+', help='C header files to scan, in processing order')
    parser.add_argument('-o', '--output', help='Output .pd file (default: from config)')
    parser.add_argument('--manifest', help='Also write an XML manifest of the bindings')
    parser.add_argument('--config', help='JSON/YAML configuration file')
    parser.add_argument('--types-profile', action='append', default=None,
                        help='Type profile with aliases / extra matrix types (repeatable)')
    parser.add_argument('--cpp', help='C preprocessor command, e.g. "gcc -E -P"')
    parser.add_argument('-I', dest='include_dirs', action='append', default=None,
                        help='Include directory for the preprocessor (repeatable)')
    parser.add_argument('--prefix', help='Library function prefix to require and strip')
    parser.add_argument('--export-macro', help='Export annotation macro wrapping return types')
    parser.add_argument('--module', help='Host module name')
    parser.add_argument('--no-strict-constants', action='store_true',
                        help='Skip constants of headers the preprocessor rejects')

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    verbosity.add_argument('--quiet', '-q', action='store_true', help='Warnings and errors only')
    return parser


def build_config(args: argparse.Namespace) -> GeneratorConfig:
    config = load_config_file(args.config) if args.config else GeneratorConfig()

    if args.output:
        config.output_pd = args.output
    if args.manifest:
        config.output_manifest = args.manifest
    if args.types_profile:
        config.types_profiles = (config.types_profiles or []) + args.types_profile
    if args.cpp:
        config.preprocessor = shlex.split(args.cpp)
    if args.include_dirs:
        config.include_dirs = list(config.include_dirs) + args.include_dirs
    if args.prefix:
        config.function_prefix = args.prefix
    if args.export_macro:
        config.export_macro = args.export_macro
    if args.module:
        config.module_name = args.module
    if args.no_strict_constants:
        config.strict_constants = False

    config.validate()
    return config


def existing_headers(paths: List[str]) -> List[str]:
    headers = []
    for p in paths:
        if Path(p).is_file():
            headers.append(p)
        else:
            logger.warning(f"Header not found, skipping: {p}")
    return headers


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    configure_logging(level_for(args.verbose, args.quiet))

    try:
        config = build_config(args)
    except (BindgenError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Configuration error: {e}")
        return 2

    headers = existing_headers(args.headers)
    if not headers:
        logger.error("No readable header files given")
        return 2

    try:
        emitter = BindingEmitter(config=config)
    except (BindgenError, RuntimeError, ValueError, OSError, yaml.YAMLError) as e:
        # type profiles are loaded here
        logger.error(f"Configuration error: {e}")
        return 2

    try:
        result = emitter.run(headers)
        write_pp_module(result, config.output_pd, headers, config.module_name)
        if config.output_manifest:
            write_manifest(result, config.output_manifest, config.module_name)
    except BindgenError as e:
        logger.error(f"Generation failed: {e}")
        return 1
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1

    logger.info(
        f"Bound {result.stats.registered} functions, skipped {result.stats.skipped}; "
        f"{result.stats.constants} constants"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
