"""
SubtreeExtractor - split part of a model into its own model file.

The extracted node is replaced by a LinkNode. The LinkNode (not the node)
is registered as a generated dependency: its key is only provisional until
the writer rehomes it, and the writer needs the LinkNode to swap the
in-memory child for the final key once the child is saved.
"""

import logging

from formats.scene import SCENE_EXTENSION
from ..errors import InvalidArgumentError
from ..graph import ModelInfo
from ..keys import ModelKey
from ..scene import LinkNode, Spatial, Transform

logger = logging.getLogger(__name__)


class SubtreeExtractor:

    def __init__(self, info: ModelInfo):
        self.info = info

    def extract(self, node: Spatial, output_name: str) -> LinkNode:
        logger.debug("extract(%r, %s)", node, output_name)
        if not output_name.lower().endswith("." + SCENE_EXTENSION):
            output_name = f"{output_name}.{SCENE_EXTENSION}"

        parent = node.parent
        if parent is None:
            raise InvalidArgumentError(f"Submodel has no parent, only children can be extracted: {node!r}")

        key = ModelKey.parse(output_name)
        link = LinkNode(key.render())

        # The link takes over the placement; the submodel becomes origin-relative
        link.local_transform = node.local_transform
        node.local_transform = Transform()

        index = parent.detach_child(node)
        link.attach_linked_child(node, key)
        parent.attach_child_at(link, index)

        self.info.dependencies.add(link, generated=True)
        return link
