#!/usr/bin/env python3
"""
External C preprocessor used to resolve macro values.

The preprocessor is fed a synthesized translation unit on stdin:

    #include "<header>"
    __CVBINDGEN_CONSTANT_MARKER__
    NAME_1
    __CVBINDGEN_CONSTANT_MARKER__
    NAME_2
    ...

and its output is cut on the marker lines. The first segment is the header's
own expansion and is thrown away; segment N+1 is the expansion of NAME_N.
"""

from __future__ import annotations
import logging
import re
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from core.errors import PreprocessorError

logger = logging.getLogger(__name__)

DEFAULT_MARKER = "__CVBINDGEN_CONSTANT_MARKER__"
DEFAULT_COMMAND = ("cpp", "-P")


def build_translation_unit(header_path: Union[str, Path], names: Sequence[str],
                           marker: str = DEFAULT_MARKER) -> str:
    lines = [f'#include "{Path(header_path).resolve()}"']
    for name in names:
        lines.append(marker)
        lines.append(name)
    return "\n".join(lines) + "\n"


def split_marker_segments(output: str, marker: str = DEFAULT_MARKER) -> List[str]:
    """Return the stripped segments that follow each marker line."""
    parts = re.split(rf'^[ \t]*{re.escape(marker)}[ \t]*$', output, flags=re.MULTILINE)
    return [part.strip() for part in parts[1:]]


class CPreprocessor:
    """MacroExpander backed by a real C preprocessor process"""

    def __init__(self,
                 command: Sequence[str] = DEFAULT_COMMAND,
                 include_dirs: Optional[Sequence[Union[str, Path]]] = None,
                 marker: str = DEFAULT_MARKER) -> None:
        if not command:
            raise ValueError("Preprocessor command must not be empty")
        self.command = list(command)
        self.include_dirs = [str(d) for d in (include_dirs or [])]
        self.marker = marker

    def command_line(self, header_path: Union[str, Path]) -> List[str]:
        args = list(self.command)
        args.append(f"-I{Path(header_path).resolve().parent}")
        args.extend(f"-I{d}" for d in self.include_dirs)
        args.append("-")
        return args

    def run(self, source: str, header_path: Union[str, Path]) -> str:
        args = self.command_line(header_path)
        logger.debug(f"Running preprocessor: {' '.join(args)}")
        try:
            result = subprocess.run(
                args,
                input=source,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as e:
            raise PreprocessorError(
                f"Preprocessor not found: {self.command[0]}", header=str(header_path)
            ) from e

        if result.returncode != 0:
            raise PreprocessorError(
                f"Preprocessor exited with status {result.returncode} for {header_path}",
                header=str(header_path),
                stderr=result.stderr,
            )
        return result.stdout

    def expand(self, header_path: Union[str, Path], names: Sequence[str]) -> List[str]:
        if not names:
            return []
        source = build_translation_unit(header_path, names, self.marker)
        output = self.run(source, header_path)
        return split_marker_segments(output, self.marker)


__all__ = [
    "DEFAULT_MARKER",
    "DEFAULT_COMMAND",
    "build_translation_unit",
    "split_marker_segments",
    "CPreprocessor",
]
