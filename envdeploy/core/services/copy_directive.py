"""
Copy directive — make the build copy the target config every time.

Looks for the project item that references the target config, e.g.

    <None Include="Environment.config">
      <CopyToOutputDirectory>Always</CopyToOutputDirectory>
    </None>

or, in SDK-style projects,

    <None Update="Environment.config" CopyToOutputDirectory="PreserveNewest" />

A project without such an item is reported, not treated as an error:
the copy may be handled by a wildcard or a build target elsewhere.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

from envdeploy.core.models.artifacts import CopyDirectiveOutcome
from envdeploy.core.services.metadata import MetadataDocument

logger = logging.getLogger(__name__)

COPY_FIELD = "CopyToOutputDirectory"
COPY_ALWAYS = "Always"

_REFERENCE_ATTRS = ("Include", "Update")


def _basename(reference: str) -> str:
    return reference.replace("\\", "/").rsplit("/", 1)[-1]


def find_config_item(doc: MetadataDocument, target_name: str) -> ET.Element | None:
    """The first item element referencing ``target_name`` by file name."""
    wanted = target_name.casefold()
    for element in doc.iter_elements():
        for attr in _REFERENCE_ATTRS:
            reference = element.get(attr)
            if reference and _basename(reference).casefold() == wanted:
                return element
    return None


def ensure_copy_always(doc: MetadataDocument, target_name: str) -> CopyDirectiveOutcome:
    """Set the target config's copy behaviour to ``Always`` (in memory)."""
    item = find_config_item(doc, target_name)
    if item is None:
        logger.warning(
            "No item for %s in %s — copy-to-output not managed here", target_name, doc.path.name
        )
        return CopyDirectiveOutcome(found=False)

    item_type = doc.local(item)

    # Attribute form wins when present
    if COPY_FIELD in item.attrib:
        previous = item.get(COPY_FIELD)
        if (previous or "").casefold() == COPY_ALWAYS.casefold():
            return CopyDirectiveOutcome(found=True, previous=previous, item_type=item_type)
        doc.set_attribute(item, COPY_FIELD, COPY_ALWAYS)
        logger.info("%s: %s copy %s → %s", doc.path.name, target_name, previous, COPY_ALWAYS)
        return CopyDirectiveOutcome(found=True, changed=True, previous=previous, item_type=item_type)

    field = doc.find_child(item, COPY_FIELD)
    previous = (field.text or "").strip() if field is not None else None
    if previous is not None and previous.casefold() == COPY_ALWAYS.casefold():
        return CopyDirectiveOutcome(found=True, previous=previous, item_type=item_type)

    field, _created = doc.find_or_create_child(item, COPY_FIELD)
    doc.set_text(field, COPY_ALWAYS)
    logger.info("%s: %s copy %s → %s", doc.path.name, target_name, previous or "(unset)", COPY_ALWAYS)
    return CopyDirectiveOutcome(found=True, changed=True, previous=previous, item_type=item_type)
