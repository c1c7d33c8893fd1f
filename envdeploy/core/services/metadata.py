"""
Metadata documents — in-place editing of MSBuild XML files.

Wraps an ElementTree with find-or-create helpers that report whether
they changed anything.  Changes accumulate into ``dirty``; ``save()``
writes only a dirty document, so a document that already has the
desired values is left byte-identical on disk.

Whatever precedes the root element (XML declaration, comments) is kept
byte-for-byte when a changed document is written back.

Parsing is all-or-nothing: a document that is not well-formed raises
CorruptMetadataError before any edit is attempted.

Both project flavours are handled:
    - legacy projects, root ``{http://schemas.microsoft.com/developer/msbuild/2003}Project``
    - SDK-style projects, root ``Project`` without a namespace
"""

from __future__ import annotations

import codecs
import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path

from envdeploy.core.errors import CorruptMetadataError
from envdeploy.core.persistence.files import atomic_write_bytes

logger = logging.getLogger(__name__)

MSBUILD_NS = "http://schemas.microsoft.com/developer/msbuild/2003"

DEFAULT_DECLARATION = b'<?xml version="1.0" encoding="utf-8"?>\n'

# Declaration, comments, PIs and doctype ahead of the root element
_PROLOG_ITEM_RE = re.compile(rb"\s*(?:<\?.*?\?>|<!--.*?-->|<!DOCTYPE[^>]*>)", re.DOTALL)
_WHITESPACE_RE = re.compile(rb"\s*")

ET.register_namespace("", MSBUILD_NS)


def _namespace_of(tag: str) -> str:
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return ""


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _prolog_of(data: bytes) -> bytes:
    """Bytes ahead of the root element (BOM excluded), kept verbatim on save."""
    if data.startswith(codecs.BOM_UTF8):
        data = data[len(codecs.BOM_UTF8):]
    pos = 0
    while True:
        match = _PROLOG_ITEM_RE.match(data, pos)
        if match is None:
            break
        pos = match.end()
    if pos == 0:
        return b""
    return data[:_WHITESPACE_RE.match(data, pos).end()]


class MetadataDocument:
    """An editable MSBuild document bound to a path."""

    def __init__(
        self,
        path: Path,
        root: ET.Element,
        *,
        exists: bool = True,
        has_bom: bool = False,
        prolog: bytes | None = None,
    ):
        self.path = path
        self.root = root
        self.exists = exists
        self.has_bom = has_bom
        self.prolog = prolog
        self.namespace = _namespace_of(root.tag)
        self.dirty = not exists

    # ── Loading ─────────────────────────────────────────────────

    @classmethod
    def load(cls, path: Path) -> MetadataDocument:
        """Parse an existing document.

        Raises:
            CorruptMetadataError: Unreadable or not well-formed XML.
        """
        try:
            data = path.read_bytes()
        except OSError as e:
            raise CorruptMetadataError(path, f"unreadable: {e}") from e
        return cls(
            path,
            cls._parse(path, data),
            has_bom=data.startswith(codecs.BOM_UTF8),
            prolog=_prolog_of(data),
        )

    @classmethod
    def load_or_create(cls, path: Path, root_tag: str = "Project", **attrib: str) -> MetadataDocument:
        """Parse ``path`` if it exists, otherwise start an empty MSBuild document."""
        if path.is_file():
            return cls.load(path)
        logger.debug("%s does not exist — starting a new document", path)
        root = ET.Element(f"{{{MSBUILD_NS}}}{root_tag}", attrib)
        return cls(path, root, exists=False)

    @staticmethod
    def _parse(path: Path, data: bytes) -> ET.Element:
        parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True, insert_pis=True))
        try:
            parser.feed(data)
            return parser.close()
        except ET.ParseError as e:
            raise CorruptMetadataError(path, str(e)) from e

    # ── Querying ────────────────────────────────────────────────

    def q(self, tag: str) -> str:
        """Qualify a local tag name with the document's namespace."""
        return f"{{{self.namespace}}}{tag}" if self.namespace else tag

    def local(self, element: ET.Element) -> str:
        return _local_name(element.tag) if isinstance(element.tag, str) else ""

    def find_child(self, parent: ET.Element, tag: str) -> ET.Element | None:
        return parent.find(self.q(tag))

    def iter_elements(self, tag: str | None = None):
        if tag is None:
            return (e for e in self.root.iter() if isinstance(e.tag, str))
        return self.root.iter(self.q(tag))

    # ── Mutating ────────────────────────────────────────────────

    def find_or_create_child(
        self,
        parent: ET.Element,
        tag: str,
        attrib: dict[str, str] | None = None,
    ) -> tuple[ET.Element, bool]:
        """Return ``(child, created)``."""
        existing = self.find_child(parent, tag)
        if existing is not None:
            return existing, False
        child = ET.SubElement(parent, self.q(tag), attrib or {})
        self.dirty = True
        return child, True

    def append(self, parent: ET.Element, tag: str, attrib: dict[str, str] | None = None) -> ET.Element:
        child = ET.SubElement(parent, self.q(tag), attrib or {})
        self.dirty = True
        return child

    def set_text(self, element: ET.Element, value: str) -> bool:
        """Set element text; True if it changed."""
        current = (element.text or "").strip()
        if current == value:
            return False
        element.text = value
        self.dirty = True
        return True

    def set_attribute(self, element: ET.Element, name: str, value: str) -> bool:
        if element.get(name) == value:
            return False
        element.set(name, value)
        self.dirty = True
        return True

    # ── Saving ──────────────────────────────────────────────────

    def to_bytes(self) -> bytes:
        ET.indent(self.root, space="  ")
        body = ET.tostring(self.root, encoding="utf-8", xml_declaration=False)
        if not body.endswith(b"\n"):
            body += b"\n"
        body = (DEFAULT_DECLARATION if self.prolog is None else self.prolog) + body
        return codecs.BOM_UTF8 + body if self.has_bom else body

    def save(self) -> bool:
        """Write the document if it changed.

        Returns:
            True if the file was written.

        Raises:
            WriteFailureError: If the file cannot be written.
        """
        if not self.dirty:
            logger.debug("%s unchanged — not writing", self.path.name)
            return False

        atomic_write_bytes(self.path, self.to_bytes())
        logger.info("Updated %s", self.path)
        self.dirty = False
        self.exists = True
        return True
