#!/usr/bin/env python3
"""
Header text loading and normalization.
"""

from __future__ import annotations
import logging
import re
from pathlib import Path
from typing import Union

from core.errors import HeaderReadError

logger = logging.getLogger(__name__)

_CONTINUATION_RE = re.compile(r'\\\n')
_BLOCK_COMMENT_RE = re.compile(r'/\*.*?\*/', re.DOTALL)
_LINE_COMMENT_RE = re.compile(r'//[^\n]*')


def normalize_header_text(text: str) -> str:
    """Strip carriage returns, turn tabs into spaces and join line continuations."""
    text = text.replace('\r', '')
    text = text.replace('\t', ' ')
    return _CONTINUATION_RE.sub('', text)


def strip_comments(text: str) -> str:
    """Blank out C comments, keeping newlines so line numbers stay valid."""
    def _blank(match: re.Match) -> str:
        return re.sub(r'[^\n]', ' ', match.group(0))

    text = _BLOCK_COMMENT_RE.sub(_blank, text)
    return _LINE_COMMENT_RE.sub(_blank, text)


def read_header(path: Union[str, Path]) -> str:
    """Slurp and normalize one header file"""
    path = Path(path)
    if not path.is_file():
        raise HeaderReadError(f"Header not found: {path}")
    try:
        raw = path.read_text(encoding='utf-8', errors='replace')
    except OSError as e:
        raise HeaderReadError(f"Failed to read {path}: {e}") from e

    logger.debug(f"Read {len(raw)} bytes from {path}")
    return normalize_header_text(raw)


__all__ = ["normalize_header_text", "strip_comments", "read_header"]
