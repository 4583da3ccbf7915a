#!/usr/bin/env python3
"""
Core module: header parsing and type inference pipeline.

The emitter lives in core.emitter and is not re-exported here because it
depends on app.config, which itself imports from core.
"""

import sys
from pathlib import Path

# Single point of path configuration
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

# Re-export commonly used core components
from .errors import BindgenError, ClassificationError
from .arguments import ArgumentDescriptor, classify_argument, classify_arguments, split_arguments
from .declarations import RawDeclaration, scan_declarations
from .constants import ConstantExtractor, ConstantTable
from .signature import assemble_signature, parse_signature

__all__ = [
    'BindgenError', 'ClassificationError',
    'ArgumentDescriptor', 'classify_argument', 'classify_arguments', 'split_arguments',
    'RawDeclaration', 'scan_declarations',
    'ConstantExtractor', 'ConstantTable',
    'assemble_signature', 'parse_signature'
]
