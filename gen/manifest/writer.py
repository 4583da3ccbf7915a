from typing import List, Union
from pathlib import Path
import logging
from lxml import etree

from binding_types import ElementAttributes
from core.arguments import ArgumentDescriptor
from core.emitter import ExportedTable, FunctionBinding, GenerationResult
from utils.xml import xml_text

logger = logging.getLogger(__name__)

MANIFEST_VERSION = "1.0"


class ManifestWriter:
    """Streams an XML description of the generated bindings"""

    def __init__(self, xf: etree.xmlfile) -> None:
        self.xf: etree.xmlfile = xf
        self._ctx_stack: List[object] = []

    def start_doc(self, module_name: str) -> None:
        self.xf.write_declaration()
        ctx = self.xf.element("bindings", module=xml_text(module_name), version=MANIFEST_VERSION)
        ctx.__enter__()
        self._ctx_stack.append(ctx)

    def end_doc(self) -> None:
        while self._ctx_stack:
            ctx = self._ctx_stack.pop()
            ctx.__exit__(None, None, None)

    def write_argument(self, arg: ArgumentDescriptor) -> None:
        attrs: ElementAttributes = {
            "name": xml_text(arg.name),
            "type": xml_text(arg.type),
            "role": arg.role.value,
            "element": arg.element_type.value,
            "dims": ",".join(str(d) for d in arg.dims),
            "kind": arg.kind.value,
        }
        if arg.is_const:
            attrs["const"] = xml_text(arg.is_const)
        if arg.is_return:
            attrs["return"] = xml_text(arg.is_return)
        self.xf.write(etree.Element("argument", attrib=attrs))

    def write_binding(self, binding: FunctionBinding) -> None:
        attrs: ElementAttributes = {
            "name": xml_text(binding.name),
            "native": xml_text(binding.native_name),
            "source": xml_text(binding.source),
            "line": str(binding.line),
        }
        with self.xf.element("binding", attrib=attrs):
            pars = etree.Element("pars")
            pars.text = xml_text(binding.pars)
            self.xf.write(pars)

            generic = etree.Element("generic-types")
            generic.text = " ".join(binding.generic_types)
            self.xf.write(generic)

            for arg in binding.arguments:
                self.write_argument(arg)

            code = etree.Element("code")
            code.text = etree.CDATA(xml_text(binding.code))
            self.xf.write(code)

            doc = etree.Element("doc")
            doc.text = xml_text(binding.doc)
            self.xf.write(doc)

    def write_constants(self, table: ExportedTable) -> None:
        with self.xf.element("constants", table=xml_text(table.name)):
            for name, value in table.entries:
                el = etree.Element("constant", name=name, value=xml_text(value))
                el.set("type", "int" if isinstance(value, int) else "float")
                self.xf.write(el)


def write_manifest(result: GenerationResult, out_path: Union[str, Path],
                   module_name: str = "PDL::OpenCV", pretty: bool = True) -> None:
    out_path = str(out_path)
    with etree.xmlfile(out_path, encoding="utf-8") as xf:
        writer = ManifestWriter(xf)
        writer.start_doc(module_name)
        for binding in result.bindings:
            writer.write_binding(binding)
        if result.exported_table is not None:
            writer.write_constants(result.exported_table)
        writer.end_doc()
    if pretty:
        parser = etree.XMLParser(remove_blank_text=True, strip_cdata=False)
        tree = etree.parse(out_path, parser)
        tree.write(out_path, encoding="utf-8", xml_declaration=True, pretty_print=True)
    logger.info(f"Wrote binding manifest to {out_path}")


__all__ = ["ManifestWriter", "write_manifest"]
