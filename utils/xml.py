from __future__ import annotations

import re

from binding_types import XmlValue

# Characters lxml refuses in text and attribute values (form feeds do occur in old headers)
_ILLEGAL_XML_CHARS = re.compile('[\x00-\x08\x0b\x0c\x0e-\x1f]')


def xml_text(v: XmlValue) -> str:
    if v is None:
        return ""
    if isinstance(v, bool):
        return "true" if v else "false"
    return _ILLEGAL_XML_CHARS.sub('', str(v))


__all__ = ["xml_text"]
