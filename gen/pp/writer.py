from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Union
import logging

from binding_types import ConstantValue
from core.emitter import ExportedTable, FunctionBinding, GenerationResult

logger = logging.getLogger(__name__)


def _braces_balanced(text: str) -> bool:
    depth = 0
    for ch in text:
        if ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def perl_q(text: str) -> str:
    """Quote text as a Perl q{} literal"""
    if '\\' not in text and _braces_balanced(text):
        return f"q{{{text}}}"
    escaped = text.replace('\\', '\\\\').replace('{', '\\{').replace('}', '\\}')
    return f"q{{{escaped}}}"


def perl_number(value: ConstantValue) -> str:
    if isinstance(value, int):
        return str(value)
    return repr(value)


def format_pp_def(binding: FunctionBinding) -> str:
    code = "\n" + binding.code + "\n"
    lines = [
        f"pp_def('{binding.name}',",
        f"    Pars => {perl_q(binding.pars)},",
        f"    GenericTypes => [qw({' '.join(binding.generic_types)})],",
        f"    Code => {perl_q(code)},",
        f"    Doc => {perl_q(binding.doc)},",
        ");",
    ]
    return "\n".join(lines)


def format_constants(table: ExportedTable) -> str:
    lines = ["pp_addpm(<<'EOPM');", f"our %{table.name} = ("]
    for name, value in table.entries:
        lines.append(f"    {name} => {perl_number(value)},")
    lines.append(");")
    lines.append("EOPM")
    lines.append(f"pp_add_exported('', '%{table.name}');")
    return "\n".join(lines)


def format_header_includes(headers: Sequence[Union[str, Path]]) -> str:
    includes = "\n" + "".join(f'#include "{Path(h).name}"\n' for h in headers)
    return f"pp_addhdr({perl_q(includes)});"


class PpModuleWriter:
    """Writes a PDL::PP .pd module for a generation result"""

    def __init__(self, result: GenerationResult, headers: Sequence[Union[str, Path]],
                 module_name: str = "PDL::OpenCV") -> None:
        self.result = result
        self.headers = list(headers)
        self.module_name = module_name

    def render(self) -> str:
        sections: List[str] = [
            f"# {self.module_name} bindings generated by cvbindgen. Do not edit.\n"
            f"# Sources: {', '.join(Path(h).name for h in self.headers)}",
        ]
        if self.headers:
            sections.append(format_header_includes(self.headers))
        if self.result.exported_table is not None:
            sections.append(format_constants(self.result.exported_table))
        for binding in self.result.bindings:
            sections.append(format_pp_def(binding))
        sections.append("pp_done();")
        return "\n\n".join(sections) + "\n"

    def write(self, out_path: Union[str, Path]) -> None:
        out_path = Path(out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(self.render(), encoding="utf-8")
        logger.info(f"Wrote {len(self.result.bindings)} bindings to {out_path}")


def write_pp_module(result: GenerationResult, out_path: Union[str, Path],
                    headers: Sequence[Union[str, Path]],
                    module_name: Optional[str] = None) -> None:
    writer = PpModuleWriter(result, headers, module_name or "PDL::OpenCV")
    writer.write(out_path)


__all__ = [
    "perl_q",
    "perl_number",
    "format_pp_def",
    "format_constants",
    "format_header_includes",
    "PpModuleWriter",
    "write_pp_module",
]
