#!/usr/bin/env python3
"""
Binding Emitter - drives the header -> binding pipeline

For every header, in the order given:
1. Read and normalize the header text
2. Resolve numeric #define constants and merge them (first definition wins)
3. Scan CVAPI declarations, classify their arguments and assemble signatures
4. Register each function whose whole classification chain succeeds

Per-function rejections are logged and skipped; header I/O and preprocessor
failures end the run.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union
import logging

from app.config import GeneratorConfig
from binding_types import ConstantValue, FunctionName, MacroExpander, ShortName
from core.arguments import ArgumentDescriptor, classify_arguments
from core.constants import ConstantExtractor, ConstantTable
from core.declarations import RawDeclaration, scan_declarations, short_name
from core.errors import ClassificationError, PreprocessorError
from core.header_text import read_header
from core.preprocessor import CPreprocessor
from core.signature import CallPlan, assemble_signature
from types_profiles.registry import TypeRuleRegistry, load_profiles

logger = logging.getLogger(__name__)

# ===============================================
# BINDING MODEL
# ===============================================


@dataclass(frozen=True)
class FunctionBinding:
    """One exported binding, ready to be written out"""
    name: ShortName
    native_name: FunctionName
    arguments: Tuple[ArgumentDescriptor, ...]
    pars: str
    generic_types: Tuple[str, ...]
    code: str
    doc: str
    plan: CallPlan
    source: str = ""
    line: int = 0

    @property
    def has_return(self) -> bool:
        return bool(self.arguments) and self.arguments[0].is_return


def make_doc(native_name: str, pars: str) -> str:
    doc = f"Wrapper around the OpenCV function {native_name}()."
    if pars:
        doc += f"\n\nSignature: ({pars})"
    return doc


class BindingRegistry:
    """Registered bindings in registration order, keyed by short name"""

    def __init__(self) -> None:
        self._bindings: Dict[str, FunctionBinding] = {}

    def register(self, binding: FunctionBinding) -> bool:
        existing = self._bindings.get(binding.name)
        if existing is not None:
            logger.warning(
                f"Duplicate binding {binding.name} from {binding.source}:{binding.line}; "
                f"keeping the one from {existing.source}:{existing.line}"
            )
            return False
        self._bindings[binding.name] = binding
        return True

    def get(self, name: str) -> Optional[FunctionBinding]:
        return self._bindings.get(name)

    def names(self) -> List[str]:
        return list(self._bindings)

    def __iter__(self) -> Iterator[FunctionBinding]:
        return iter(self._bindings.values())

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, name: object) -> bool:
        return name in self._bindings


@dataclass
class GenerationStats:
    headers: int = 0
    declarations: int = 0
    registered: int = 0
    skipped: int = 0
    duplicates: int = 0
    constants: int = 0
    collisions: int = 0


@dataclass
class GenerationContext:
    """Mutable state of one generation run"""
    constants: ConstantTable = field(default_factory=ConstantTable)
    registry: BindingRegistry = field(default_factory=BindingRegistry)
    stats: GenerationStats = field(default_factory=GenerationStats)


@dataclass(frozen=True)
class ExportedTable:
    """Constant table exposed to the host language under one name"""
    name: str
    entries: Tuple[Tuple[str, ConstantValue], ...]


@dataclass
class GenerationResult:
    bindings: List[FunctionBinding]
    constants: Dict[str, ConstantValue]
    stats: GenerationStats
    exported_table: Optional[ExportedTable] = None


# ===============================================
# EMITTER
# ===============================================

class BindingEmitter:
    """Runs the whole pipeline over a list of headers"""

    def __init__(self,
                 config: Optional[GeneratorConfig] = None,
                 expander: Optional[MacroExpander] = None,
                 type_registry: Optional[TypeRuleRegistry] = None) -> None:
        self.config = config if config is not None else GeneratorConfig()
        self.config.validate()
        self.generic_types = self.config.generic_type_defs()

        if expander is None:
            expander = CPreprocessor(
                self.config.preprocessor,
                include_dirs=self.config.include_dirs,
                marker=self.config.constant_marker,
            )
        self.extractor = ConstantExtractor(expander)

        if type_registry is None:
            type_registry = load_profiles(self.config.types_profiles or [],
                                          matrix_types=self.config.matrix_types)
        self.type_registry = type_registry

    def run(self, headers: Iterable[Union[str, Path]]) -> GenerationResult:
        context = GenerationContext()
        for header in headers:
            self.process_header(header, context)

        stats = context.stats
        stats.constants = len(context.constants)
        stats.collisions = len(context.constants.collisions)
        logger.info(
            f"Generated {stats.registered} bindings from {stats.headers} headers "
            f"({stats.skipped} skipped, {stats.duplicates} duplicates), "
            f"{stats.constants} constants ({stats.collisions} collisions)"
        )

        exported = None
        if context.constants:
            exported = ExportedTable(self.config.constants_name, tuple(context.constants.items()))

        return GenerationResult(
            bindings=list(context.registry),
            constants=context.constants.as_dict(),
            stats=stats,
            exported_table=exported,
        )

    def process_header(self, header: Union[str, Path], context: GenerationContext) -> None:
        source = str(header)
        logger.info(f"Processing header: {source}")
        text = read_header(header)
        context.stats.headers += 1

        self.extract_constants(text, header, context)

        for decl in scan_declarations(text, self.config.export_macro, self.config.function_prefix):
            context.stats.declarations += 1
            try:
                binding = self.bind_declaration(decl, source)
            except ClassificationError as e:
                context.stats.skipped += 1
                logger.warning(f"Skipping {decl.name} ({source}:{decl.line}): {e}")
                continue

            if context.registry.register(binding):
                context.stats.registered += 1
                logger.debug(f"Registered {binding.name}: {binding.pars}")
            else:
                context.stats.duplicates += 1

    def extract_constants(self, text: str, header: Union[str, Path], context: GenerationContext) -> None:
        try:
            values = self.extractor.extract(text, header)
        except PreprocessorError as e:
            if self.config.strict_constants:
                raise
            logger.error(f"Skipping constants of {header}: {e}")
            if e.stderr:
                logger.debug(e.stderr)
            return
        context.constants.merge(values, str(header))

    def bind_declaration(self, decl: RawDeclaration, source: str = "") -> FunctionBinding:
        """Classify and assemble one declaration; raises ClassificationError on rejection"""
        name = short_name(decl.name, self.config.function_prefix)
        if name is None:
            raise ClassificationError(f"name does not start with '{self.config.function_prefix}'", decl.name)

        descriptors = classify_arguments(
            decl.return_type,
            decl.arguments,
            registry=self.type_registry,
            return_name=self.config.return_name,
        )
        signature = assemble_signature(descriptors, decl.name, self.generic_types)

        return FunctionBinding(
            name=ShortName(name),
            native_name=FunctionName(decl.name),
            arguments=tuple(descriptors),
            pars=signature.pars,
            generic_types=tuple(g.letter for g in self.generic_types),
            code=signature.code,
            doc=make_doc(decl.name, signature.pars),
            plan=signature.plan,
            source=source,
            line=decl.line,
        )


def generate_bindings(headers: Sequence[Union[str, Path]],
                      config: Optional[GeneratorConfig] = None,
                      expander: Optional[MacroExpander] = None) -> GenerationResult:
    """Main API: run the emitter once over the given headers"""
    return BindingEmitter(config=config, expander=expander).run(headers)


__all__ = [
    "FunctionBinding",
    "make_doc",
    "BindingRegistry",
    "GenerationStats",
    "GenerationContext",
    "ExportedTable",
    "GenerationResult",
    "BindingEmitter",
    "generate_bindings",
]
