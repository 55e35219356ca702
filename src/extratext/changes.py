"""Change records describing out-of-band edits to the live tree.

A change batch is an ordered list of ``ChangeRecord`` objects. Hosts collect
them from whatever watches their live tree and hand them to
``Scroll.update``. ``ChangeRecorder`` is such a watcher for ``LiveDocument``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict

from extratext.live import LiveDocument, LiveNode


class ChangeKind(StrEnum):
    """What changed on the record's target."""

    CHILD_LIST = "childList"
    ATTRIBUTES = "attributes"
    CHARACTER_DATA = "characterData"


class ChangeRecord(BaseModel):
    """One live tree change.

    Attributes:
        kind: childList, attributes or characterData.
        target: The live node whose children, attributes or payload changed.
        added_nodes: Live nodes inserted under ``target`` (childList only).
        removed_nodes: Live nodes removed from ``target`` (childList only).
        previous_sibling: Sibling before the added/removed nodes.
        next_sibling: Sibling after the added/removed nodes.
        attribute_name: Name of the changed attribute (attributes only).
        old_value: Value before the change (attributes and characterData).
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    kind: ChangeKind
    target: LiveNode
    added_nodes: tuple[LiveNode, ...] = ()
    removed_nodes: tuple[LiveNode, ...] = ()
    previous_sibling: LiveNode | None = None
    next_sibling: LiveNode | None = None
    attribute_name: str | None = None
    old_value: str | None = None


class ChangeFeed(Protocol):
    """Source of pending change records."""

    def take_records(self) -> list[ChangeRecord]: ...


class ChangeRecorder:
    """Collects ``ChangeRecord``s from a ``LiveDocument``.

    Records accumulate until ``take_records`` drains them, mirroring how a
    mutation observer coalesces a window of changes into one batch.
    """

    def __init__(self, document: LiveDocument | None = None) -> None:
        self._records: list[ChangeRecord] = []
        self._document: LiveDocument | None = None
        if document is not None:
            self.observe(document)

    def observe(self, document: LiveDocument) -> None:
        if self._document is not None:
            self.disconnect()
        self._document = document
        document.observe(self._record)

    def disconnect(self) -> None:
        if self._document is not None:
            self._document.disconnect(self._record)
            self._document = None

    def take_records(self) -> list[ChangeRecord]:
        records, self._records = self._records, []
        return records

    def __len__(self) -> int:
        return len(self._records)

    def _record(self, kind: str, target: LiveNode, **details: Any) -> None:
        self._records.append(ChangeRecord(kind=ChangeKind(kind), target=target, **details))
