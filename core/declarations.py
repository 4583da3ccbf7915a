#!/usr/bin/env python3
"""
Declaration scanner for export-macro wrapped C function declarations:

    CVAPI(void) cvSmooth(const CvArr* src, CvArr* dst, int smoothtype CV_DEFAULT(CV_GAUSSIAN));
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Optional
import logging
import re

from core.header_text import strip_comments

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_MACRO = "CVAPI"
DEFAULT_PREFIX = "cv"


@dataclass(frozen=True)
class RawDeclaration:
    """Straight regex capture of one declaration"""
    return_type: str
    name: str
    arguments: str
    line: int = 0


def declaration_pattern(export_macro: str = DEFAULT_EXPORT_MACRO) -> re.Pattern:
    return re.compile(
        rf'\b{re.escape(export_macro)}\s*\(\s*([^();]*?)\s*\)\s*([A-Za-z_]\w*)\s*\(([^;]*?)\)\s*;',
    )


def short_name(name: str, prefix: str = DEFAULT_PREFIX) -> Optional[str]:
    """Binding name with the library prefix stripped, or None if the prefix is missing"""
    if not name.startswith(prefix) or len(name) == len(prefix):
        return None
    return name[len(prefix):]


def scan_declarations(text: str, export_macro: str = DEFAULT_EXPORT_MACRO,
                      prefix: str = DEFAULT_PREFIX) -> Iterator[RawDeclaration]:
    """Lazily yield prefixed declarations in textual order; others are logged and skipped"""
    source = strip_comments(text)
    for match in declaration_pattern(export_macro).finditer(source):
        return_type, name, arguments = match.groups()
        line = source.count('\n', 0, match.start()) + 1

        if short_name(name, prefix) is None:
            logger.info(f"Skipping {name} (line {line}): name does not start with '{prefix}'")
            continue

        yield RawDeclaration(
            return_type=return_type,
            name=name,
            arguments=' '.join(arguments.split()),
            line=line,
        )


__all__ = [
    "DEFAULT_EXPORT_MACRO",
    "DEFAULT_PREFIX",
    "RawDeclaration",
    "declaration_pattern",
    "short_name",
    "scan_declarations",
]
