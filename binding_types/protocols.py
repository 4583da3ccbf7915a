#!/usr/bin/env python3
"""
Protocols for cvbindgen collaborators.
"""

from pathlib import Path
from typing import List, Protocol, Sequence, Union


class MacroExpander(Protocol):
    """Expands object-like macro names in the context of one header."""
    def expand(self, header_path: Union[str, Path], names: Sequence[str]) -> List[str]: ...
