# SPDX-License-Identifier: Apache-2.0
"""Resource binding for a single page.

New resources and content streams are staged first and written to the page
in one :meth:`ResourceBinder.commit`. A failure during the commit undoes
every change already made, so the page is either fully updated or left as
it was.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Mapping, Optional

import pikepdf  # type: ignore[import-untyped]
from pikepdf import Name

logger = logging.getLogger(__name__)

FONT = "/Font"
XOBJECT = "/XObject"

# Categories copied from a scratch rendering into the page
MERGE_CATEGORIES: tuple[str, ...] = (
    "/Font",
    "/XObject",
    "/ExtGState",
    "/ColorSpace",
    "/Pattern",
    "/Shading",
    "/Properties",
)

# Content operators referring to a named resource, with the operand index
# holding the name
RESOURCE_OPERATORS: dict[str, tuple[str, int]] = {
    "Tf": ("/Font", 0),
    "Do": ("/XObject", -1),
    "gs": ("/ExtGState", -1),
    "cs": ("/ColorSpace", -1),
    "CS": ("/ColorSpace", -1),
    "scn": ("/Pattern", -1),
    "SCN": ("/Pattern", -1),
    "sh": ("/Shading", -1),
    "BDC": ("/Properties", -1),
    "DP": ("/Properties", -1),
}

_NAME_PREFIX = re.compile(r"^/?([A-Za-z]*)")


def _find_inherited(page_obj: pikepdf.Dictionary, key: str) -> Optional[pikepdf.Object]:
    node: Optional[pikepdf.Object] = page_obj
    seen = 0
    while node is not None and seen < 64:
        value = node.get(key)
        if value is not None:
            return value
        node = node.get("/Parent")
        seen += 1
    return None


def _copy_dict(value: pikepdf.Dictionary) -> pikepdf.Dictionary:
    return pikepdf.Dictionary({str(k): v for k, v in value.items()})


def is_balanced(instructions: list) -> bool:
    """Check that ``q``/``Q`` operators nest properly."""
    depth = 0
    for cmd in instructions:
        if isinstance(cmd, pikepdf.ContentStreamInlineImage):
            continue
        op_str = str(cmd.operator)
        if op_str == "q":
            depth += 1
        elif op_str == "Q":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


class ResourceBinder:
    """Stage and commit resources and content streams for one page.

    Resource names are derived from the object number of the newly created
    resource, which grows with every object added to the document, so names
    handed out on a page strictly increase across calls.

    Example:
        >>> binder = ResourceBinder(pdf, pdf.pages[0])
        >>> name = binder.register("/Font", "F", font_dict)
        >>> binder.add_contents(b"q BT /F5 11 Tf (Hi) Tj ET Q\\n")
        >>> binder.commit()
    """

    def __init__(
        self,
        pdf: pikepdf.Pdf,
        page: pikepdf.Page,
        isolate_existing: bool = True,
    ) -> None:
        self._pdf = pdf
        self._page = page
        self._isolate_existing = isolate_existing
        self._pending: dict[str, dict[str, pikepdf.Object]] = {}
        self._streams: list[tuple[bytes, bool]] = []

    @property
    def pending(self) -> dict[str, dict[str, pikepdf.Object]]:
        return self._pending

    def _existing(self, category: str) -> Optional[pikepdf.Dictionary]:
        resources = _find_inherited(self._page.obj, "/Resources")
        if resources is None:
            return None
        return resources.get(category)

    def is_taken(self, category: str, name: str) -> bool:
        existing = self._existing(category)
        if existing is not None and name in existing:
            return True
        return name in self._pending.get(category, {})

    def allocate_name(self, category: str, prefix: str, seed: int) -> str:
        number = seed
        while self.is_taken(category, f"/{prefix}{number}"):
            number += 1
        return f"/{prefix}{number}"

    def register(self, category: str, prefix: str, obj: pikepdf.Object) -> str:
        """Add ``obj`` as a new indirect resource under a fresh name.

        Returns:
            The allocated resource name, including the leading slash
        """
        ref = obj if obj.is_indirect else self._pdf.make_indirect(obj)
        name = self.allocate_name(category, prefix, ref.objgen[0])
        self._pending.setdefault(category, {})[name] = ref
        logger.debug("Allocated %s %s", category, name)
        return name

    def import_object(self, source: pikepdf.Pdf, obj: pikepdf.Object) -> pikepdf.Object:
        """Copy an object (and everything it references) from ``source``."""
        if not obj.is_indirect:
            obj = source.make_indirect(obj)
        return self._pdf.copy_foreign(obj)

    def merge(
        self,
        source: pikepdf.Pdf,
        resources: pikepdf.Dictionary,
        namespace: bool = True,
    ) -> dict[str, dict[str, str]]:
        """Stage every entry of a foreign resource dictionary.

        With ``namespace`` set every entry is registered under a fresh name
        allocated like :meth:`register`, so a scratch rendering that reuses
        names such as ``/F0`` never repoints resources drawn earlier. Without
        it entries keep their names and overwrite existing ones.

        Returns:
            Renames per category, old name -> new name
        """
        renames: dict[str, dict[str, str]] = {}
        for category in MERGE_CATEGORIES:
            entries = resources.get(category)
            if entries is None:
                continue
            for key, value in entries.items():
                imported = self.import_object(source, value)
                name = str(key)
                if namespace:
                    match = _NAME_PREFIX.match(name)
                    prefix = match.group(1) if match and match.group(1) else "R"
                    new_name = self.allocate_name(category, prefix, imported.objgen[0])
                    if new_name != name:
                        renames.setdefault(category, {})[name] = new_name
                    name = new_name
                elif self.is_taken(category, name):
                    logger.warning(
                        "Resource %s %s already exists on page; overwriting",
                        category,
                        name,
                    )
                self._pending.setdefault(category, {})[name] = imported
        return renames

    def add_contents(self, data: bytes, overlay: bool = True) -> None:
        """Stage a content stream; ``overlay=False`` draws it first."""
        self._streams.append((data, overlay))

    def _needs_isolation(self) -> bool:
        if not self._isolate_existing or self._page.obj.get("/Contents") is None:
            return False
        if not any(overlay for _, overlay in self._streams):
            return False
        try:
            instructions = list(pikepdf.parse_content_stream(self._page))
        except pikepdf.PdfError:
            logger.debug("Existing contents could not be parsed; isolating them")
            return True
        return not is_balanced(instructions)

    def commit(self) -> None:
        """Write staged entries to the page, undoing everything on failure."""
        undo: list[Callable[[], None]] = []
        try:
            self._apply(undo)
        except Exception:
            for action in reversed(undo):
                action()
            raise
        finally:
            self._pending = {}
            self._streams = []

    def _resources_for_write(self, undo: list[Callable[[], None]]) -> pikepdf.Dictionary:
        page_obj = self._page.obj
        resources = page_obj.get("/Resources")
        if resources is not None and not resources.is_indirect:
            return resources
        if resources is None:
            resources = _find_inherited(page_obj, "/Resources")
            undo.append(lambda: page_obj.__delitem__("/Resources"))
        else:
            shared = resources
            undo.append(lambda: page_obj.__setitem__("/Resources", shared))
        # Copied one level deep; new entries must not reach sibling pages
        page_obj.Resources = pikepdf.Dictionary(
            {
                str(k): _copy_dict(v) if isinstance(v, pikepdf.Dictionary) else v
                for k, v in (resources.items() if resources is not None else [])
            }
        )
        return page_obj.Resources

    def _apply(self, undo: list[Callable[[], None]]) -> None:
        isolate = self._needs_isolation()
        if self._pending:
            resources = self._resources_for_write(undo)
            for category, entries in self._pending.items():
                self._put_entries(resources, category, entries, undo)

        if self._streams:
            contents = self._contents_array(undo)
            if isolate:
                self._insert(contents, 0, self._pdf.make_stream(b"q\n"), undo)
                self._insert(contents, len(contents), self._pdf.make_stream(b"Q\n"), undo)
            for data, overlay in self._streams:
                stream = self._pdf.make_stream(data)
                self._insert(contents, len(contents) if overlay else 0, stream, undo)

    def _put_entries(
        self,
        resources: pikepdf.Dictionary,
        category: str,
        entries: Mapping[str, pikepdf.Object],
        undo: list[Callable[[], None]],
    ) -> None:
        target = resources.get(category)
        if target is None:
            resources[category] = pikepdf.Dictionary()
            target = resources[category]
            undo.append(lambda: resources.__delitem__(category))
        elif target.is_indirect:
            shared = target
            resources[category] = _copy_dict(shared)
            target = resources[category]
            undo.append(lambda: resources.__setitem__(category, shared))
        for name, obj in entries.items():
            previous = target.get(name)
            target[name] = obj
            if previous is None:
                undo.append(lambda n=name: target.__delitem__(n))
            else:
                undo.append(lambda n=name, p=previous: target.__setitem__(n, p))

    def _contents_array(self, undo: list[Callable[[], None]]) -> pikepdf.Array:
        page_obj = self._page.obj
        existing = page_obj.get("/Contents")
        if isinstance(existing, pikepdf.Array):
            return existing
        items = [existing] if existing is not None else []
        page_obj.Contents = pikepdf.Array(items)
        if existing is None:
            undo.append(lambda: page_obj.__delitem__("/Contents"))
        else:
            undo.append(lambda: page_obj.__setitem__("/Contents", existing))
        return page_obj.Contents

    @staticmethod
    def _insert(
        contents: pikepdf.Array,
        index: int,
        stream: pikepdf.Stream,
        undo: list[Callable[[], None]],
    ) -> None:
        contents.insert(index, stream)
        undo.append(lambda: contents.__delitem__(index))


def rewrite_names(
    source: pikepdf.Pdf,
    content: bytes,
    renames: Mapping[str, Mapping[str, str]],
) -> bytes:
    """Rename resource operands in a content stream.

    Only operands of operators that reference the renamed category are
    touched, so a marked-content tag that happens to equal a resource name
    stays as it is.
    """
    if not renames:
        return content
    stream = source.make_stream(content)
    new_cs = []
    for cmd in pikepdf.parse_content_stream(stream):
        if isinstance(cmd, pikepdf.ContentStreamInlineImage):
            new_cs.append(cmd)
            continue
        operands, operator = cmd
        op_str = str(operator)
        target = RESOURCE_OPERATORS.get(op_str)
        if target is not None and operands:
            category, index = target
            mapping = renames.get(category, {})
            operand = operands[index]
            if isinstance(operand, Name) and str(operand) in mapping:
                operands = list(operands)
                operands[index] = Name(mapping[str(operand)])
                cmd = pikepdf.ContentStreamInstruction(operands, operator)
        new_cs.append(cmd)
    return pikepdf.unparse_content_stream(new_cs)
