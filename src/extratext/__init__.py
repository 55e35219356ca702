"""extratext - A rich text node tree mirrored onto a live element tree.

The node tree gives a document a typed, length-indexed structure (blocks,
inline formats, text and embeds) on top of a live tree such as a DOM. Edits
go through the node tree, which keeps the live tree in sync; edits made to
the live tree directly are folded back in by the reconciler.
"""

__version__ = "0.1.0"

from loguru import logger

from extratext.attributors import Attributor, ClassAttributor, StyleAttributor
from extratext.changes import ChangeFeed, ChangeKind, ChangeRecord, ChangeRecorder
from extratext.config import Settings, get_settings
from extratext.exceptions import (
    DefinitionError,
    ExtraTextError,
    InvalidChildError,
    OptimizeError,
    UnregisteredVariantError,
)
from extratext.live import LiveDocument, LiveElement, LiveFactory, LiveNode, LiveText
from extratext.logging import setup_logging
from extratext.nodes import (
    Container,
    Embed,
    Format,
    Leaf,
    Node,
    Scroll,
    Text,
    create_scroll,
)
from extratext.registry import NodeDefinition, Registry, VariantTable
from extratext.scope import Scope
from extratext.sibling_list import SiblingList
from extratext.store import AttributorStore
from extratext.variants import DEFAULT_DEFINITIONS

# Silent until the host opts in via setup_logging()
logger.disable("extratext")

__all__ = [
    "DEFAULT_DEFINITIONS",
    "Attributor",
    "AttributorStore",
    "ChangeFeed",
    "ChangeKind",
    "ChangeRecord",
    "ChangeRecorder",
    "ClassAttributor",
    "Container",
    "DefinitionError",
    "Embed",
    "ExtraTextError",
    "Format",
    "InvalidChildError",
    "Leaf",
    "LiveDocument",
    "LiveElement",
    "LiveFactory",
    "LiveNode",
    "LiveText",
    "Node",
    "NodeDefinition",
    "OptimizeError",
    "Registry",
    "Scope",
    "Scroll",
    "Settings",
    "SiblingList",
    "StyleAttributor",
    "Text",
    "UnregisteredVariantError",
    "VariantTable",
    "create_scroll",
    "get_settings",
    "setup_logging",
]
