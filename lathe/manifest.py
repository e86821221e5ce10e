"""
Lathe Manifest - Maven pom.xml field updates

PomManifest is a typed view over the project's single build manifest.
Every setter serializes straight back into the owning File, so later
operations see the change immediately. Only the top-level coordinates of
<project> are touched; <parent> and <dependency> blocks are left alone.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET

from lathe.errors import ManifestNotFound, NotFound
from lathe.logging_config import logger
from lathe.tree import File, ProjectTree


DEFAULT_MANIFEST_PATH = "pom.xml"
POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"

# Canonical Maven order, used when an element has to be created.
FIELD_ORDER = ["modelVersion", "parent", "groupId", "artifactId", "version", "packaging", "name", "description"]

_XML_DECLARATION = re.compile(r"^\s*(<\?xml[^>]*\?>)")

# Whitespace, comments, processing instructions and a doctype ahead of <project>
_PROLOG = re.compile(r"(?:\s|<!--[\s\S]*?-->|<\?[\s\S]*?\?>|<!DOCTYPE[^>\[]*(?:\[[\s\S]*?\])?\s*>)*")
_ROOT_END = re.compile(r"</(?:[\w.-]+:)?project\s*>")


class PomManifest:
    """Structured view of a pom.xml File."""

    def __init__(self, file: File):
        self.file = file
        try:
            parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
            self._root = ET.fromstring(file.content, parser=parser)
        except ET.ParseError as e:
            raise ManifestNotFound(file.path, f"not well-formed XML ({e})") from e

        match = re.match(r"\{([^}]*)\}project$", self._root.tag)
        if match:
            self._ns = match.group(1)
        elif self._root.tag == "project":
            self._ns = ""
        else:
            raise ManifestNotFound(file.path, f"root element is <{self._root.tag}>, expected <project>")

        # ElementTree keeps only the root, so text around it is carried verbatim
        content = file.content
        declaration = _XML_DECLARATION.match(content)
        start = declaration.end() if declaration else 0
        self._declaration = declaration.group(1) if declaration else None
        self._prolog = content[start:_PROLOG.match(content, start).end()]
        ends = list(_ROOT_END.finditer(content))
        self._epilog = content[ends[-1].end():] if ends else ""

    # ─── Field access ────────────────────────────────────────────────────

    def _tag(self, name: str) -> str:
        return f"{{{self._ns}}}{name}" if self._ns else name

    def get(self, name: str) -> str | None:
        element = self._root.find(self._tag(name))
        if element is None:
            return None
        return (element.text or "").strip()

    def set(self, name: str, value: str) -> None:
        """Set a top-level <project> child, creating it if needed, then serialize."""
        element = self._root.find(self._tag(name))
        if element is None:
            element = self._create(name)
        element.text = value
        self._serialize()

    def _create(self, name: str) -> ET.Element:
        children = list(self._root)
        rank = FIELD_ORDER.index(name) if name in FIELD_ORDER else len(FIELD_ORDER)
        position = 0
        for i, child in enumerate(children):
            if not isinstance(child.tag, str):
                continue
            local = child.tag.rsplit("}", 1)[-1]
            if local in FIELD_ORDER and FIELD_ORDER.index(local) < rank:
                position = i + 1

        element = ET.Element(self._tag(name))
        indent = self._root.text or "\n"
        if not children:
            element.tail = indent
        elif position:
            # The new element takes over whatever followed its predecessor
            anchor = children[position - 1]
            element.tail = anchor.tail
            anchor.tail = indent
        else:
            element.tail = indent
        self._root.insert(position, element)
        return element

    def _serialize(self) -> None:
        if self._ns:
            ET.register_namespace("", self._ns)
        ET.register_namespace("xsi", XSI_NAMESPACE)
        body = ET.tostring(self._root, encoding="unicode")
        prolog = self._prolog
        if self._declaration:
            prolog = self._declaration + (prolog or "\n")
        epilog = self._epilog if self._epilog.strip() else "\n"
        self.file.content = prolog + body + epilog

    # ─── Typed properties ────────────────────────────────────────────────

    @property
    def artifact_id(self) -> str | None:
        return self.get("artifactId")

    @artifact_id.setter
    def artifact_id(self, value: str) -> None:
        self.set("artifactId", value)

    @property
    def group_id(self) -> str | None:
        return self.get("groupId")

    @group_id.setter
    def group_id(self, value: str) -> None:
        self.set("groupId", value)

    @property
    def project_name(self) -> str | None:
        return self.get("name")

    @project_name.setter
    def project_name(self, value: str) -> None:
        self.set("name", value)

    @property
    def version(self) -> str | None:
        return self.get("version")

    @version.setter
    def version(self, value: str) -> None:
        self.set("version", value)

    @property
    def description(self) -> str | None:
        return self.get("description")

    @description.setter
    def description(self, value: str) -> None:
        self.set("description", value)


# ═══════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ═══════════════════════════════════════════════════════════════════════════


def find_manifest(tree: ProjectTree, path: str = DEFAULT_MANIFEST_PATH) -> PomManifest:
    """
    Resolve the project's manifest.

    Raises:
        ManifestNotFound: if the file is absent or cannot be parsed
    """
    try:
        file = tree.find_file(path)
    except NotFound as e:
        raise ManifestNotFound(e.path, "file is missing") from None
    return PomManifest(file)


def update_manifest(
    tree: ProjectTree,
    artifact_id: str,
    group_id: str,
    project_name: str,
    version: str,
    description: str,
    path: str = DEFAULT_MANIFEST_PATH,
) -> PomManifest:
    """
    Set all five manifest fields, whatever their previous values.

    There is no partial mode: every call supplies every field.
    """
    pom = find_manifest(tree, path)
    pom.artifact_id = artifact_id
    pom.group_id = group_id
    pom.project_name = project_name
    pom.version = version
    pom.description = description
    logger.debug(f"Updated {pom.file.path}: {group_id}:{artifact_id}:{version}")
    return pom
