"""types.xml parser and writer.

Uses lxml for XML handling.  Parsing walks ``iterparse`` start/end events
and flattens every direct child of a ``<type>`` into fields; deeper
elements are not part of the schema and are skipped.  Writing regroups the
flat field list by ``(element, index)`` in first-seen order, so element
order, repeated elements and attribute order survive a round trip.
Byte-exact output is not a goal: indentation is normalised.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import TYPE_CHECKING

from lxml import etree

from typeseditor.errors import InvalidDataError
from typeseditor.models import AttributeKey, ElementKey, Field, TypeEntry, TypesDocument

if TYPE_CHECKING:
    from typeseditor.sources import FileSource

logger = logging.getLogger(__name__)

TYPE_TAG = "type"
ROOT_TAG = "types"

# ── Parsing ─────────────────────────────────────────────────────


def _localname(tag: str) -> str:
    """Strip a ``{namespace}`` prefix from a tag or attribute name."""
    return etree.QName(tag).localname if "}" in tag else tag


def parse_types(data: bytes | str) -> TypesDocument:
    """Parse a types.xml payload into a TypesDocument.

    Raises:
        InvalidDataError: On malformed XML or undecodable bytes.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")

    types: list[TypeEntry] = []
    current: TypeEntry | None = None
    # Per-element occurrence counter, reset at every <type> boundary
    element_indices: dict[str, int] = {}
    current_element: tuple[str, int] | None = None
    depth = 0
    type_depth = 0

    try:
        events = etree.iterparse(
            io.BytesIO(data),
            events=("start", "end"),
            remove_comments=True,
            remove_pis=True,
            resolve_entities=False,
        )
        for event, elem in events:
            tag = _localname(elem.tag)
            if event == "start":
                depth += 1
                if current is None:
                    if tag == TYPE_TAG:
                        current = TypeEntry(name=elem.get("name", ""))
                        element_indices.clear()
                        current_element = None
                        type_depth = depth
                elif depth == type_depth + 1:
                    idx = element_indices.get(tag, 0)
                    element_indices[tag] = idx + 1
                    for attr_name, value in elem.attrib.items():
                        current.fields.append(
                            Field(AttributeKey(tag, idx, _localname(attr_name)), value)
                        )
                    current_element = (tag, idx)
                continue

            # "end" event: text of a direct child is complete here
            if current is not None:
                if depth == type_depth + 1 and current_element is not None:
                    text = (elem.text or "").strip()
                    if text:
                        name, idx = current_element
                        current.fields.append(Field(ElementKey(name, idx), text))
                    current_element = None
                elif depth == type_depth:
                    types.append(current)
                    current = None
                    element_indices.clear()
            depth -= 1
    except (etree.XMLSyntaxError, UnicodeDecodeError) as err:
        raise InvalidDataError(f"XML parse error: {err}") from err

    return TypesDocument(types=types)


# ── Writing ─────────────────────────────────────────────────────


@dataclass
class ElementData:
    """Attributes and text collected for one ``(element, index)`` group."""

    attrs: list[tuple[str, str]] = field(default_factory=list)
    text: str | None = None


def group_fields(entry: TypeEntry) -> dict[tuple[str, int], ElementData]:
    """Group a type's fields by group key, keeping first-seen order."""
    groups: dict[tuple[str, int], ElementData] = {}
    for f in entry.fields:
        data = groups.setdefault(f.key.group_key, ElementData())
        if isinstance(f.key, ElementKey):
            data.text = f.value
        else:
            data.attrs.append((f.key.attr, f.value))
    return groups


def _plain_name(name: str) -> str:
    """Reject ``{uri}local`` names, which lxml would turn into a namespace."""
    if "{" in name or "}" in name:
        raise ValueError(f"Invalid name: {name!r}")
    return name


def build_tree(doc: TypesDocument) -> etree._Element:
    """Build the ``<types>`` element tree for *doc*."""
    root = etree.Element(ROOT_TAG)
    for entry in doc.types:
        type_elem = etree.SubElement(root, TYPE_TAG)
        type_elem.set("name", entry.name)
        for (element, _index), data in group_fields(entry).items():
            child = etree.SubElement(type_elem, _plain_name(element))
            for attr, value in data.attrs:
                child.set(_plain_name(attr), value)
            if data.text is not None:
                child.text = data.text
    return root


def serialize_types(doc: TypesDocument) -> bytes:
    """Serialize *doc* as indented UTF-8 XML.

    Raises:
        InvalidDataError: If a type, element or attribute name is not a
            valid XML name, or a value contains characters XML forbids.
    """
    try:
        root = build_tree(doc)
    except ValueError as err:
        raise InvalidDataError(f"Cannot serialize document: {err}") from err
    return etree.tostring(
        root,
        xml_declaration=True,
        encoding="UTF-8",
        pretty_print=True,
    )


# ── Source helpers ──────────────────────────────────────────────


def read_types(source: FileSource, path: str | PurePath) -> TypesDocument:
    """Read and parse *path* from *source*."""
    doc = parse_types(source.read(path))
    logger.info("Parsed %d types from %s", len(doc.types), path)
    return doc


def write_types(
    doc: TypesDocument,
    source: FileSource,
    path: str | PurePath,
    *,
    backup: bool = True,
) -> None:
    """Serialize *doc* and write it to *path* on *source*.

    The document is serialized before anything touches the target, so a
    serialization error leaves the file (and its backup) untouched.  With
    *backup*, the previous content is copied to ``<path>.bak`` first.
    """
    from typeseditor.sources import save_with_backup

    payload = serialize_types(doc)
    if backup:
        save_with_backup(source, path, payload)
    else:
        source.write(path, payload)
    logger.info("Wrote %d types to %s", len(doc.types), path)
