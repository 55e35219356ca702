"""Model node classes.

Variants are not subclasses: each ``NodeDefinition`` names one of these
classes and configures it through hooks.
"""

from extratext.nodes.base import Node, matches
from extratext.nodes.container import Container, make_node
from extratext.nodes.embed import Embed
from extratext.nodes.format import Format
from extratext.nodes.leaf import Leaf
from extratext.nodes.scroll import Scroll, create_scroll
from extratext.nodes.text import Text

__all__ = [
    "Container",
    "Embed",
    "Format",
    "Leaf",
    "Node",
    "Scroll",
    "Text",
    "create_scroll",
    "make_node",
    "matches",
]
