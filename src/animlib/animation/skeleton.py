"""
Skeleton

Represents a model's node hierarchy, with bones flagged inside it.
"""

from typing import Dict, Iterator, List, Optional
from pyrr import Vector3
import numpy as np

from ..core.rotation_utils import quaternion_to_euler_xyz


def _vec3(value, default=None) -> Vector3:
    return Vector3(np.array(value if value is not None else default, dtype=np.float64))


class Bone:
    """
    Represents a single node in a skeleton hierarchy.

    Each node has:
    - Local position, rotation (XYZ Euler radians) and scale
    - Parent-child relationships
    - An is_bone flag; group and mesh nodes share the tree with is_bone=False
    """

    def __init__(
        self,
        name: str,
        index: int = -1,
        is_bone: bool = True,
        position=None,
        rotation=None,
        scale=None,
    ):
        """
        Initialize a node.

        Args:
            name: Node name (lookup key for animation tracks)
            index: Source node index in the model file (-1 when synthetic)
            is_bone: Whether the node is a skinning bone
            position: Local translation (x, y, z)
            rotation: Local rotation as XYZ Euler angles in radians
            scale: Local scale (x, y, z)
        """
        self.name = name
        self.index = index
        self.is_bone = is_bone
        self.parent: Optional['Bone'] = None
        self.children: List['Bone'] = []

        self.position = _vec3(position, (0.0, 0.0, 0.0))
        self.rotation = _vec3(rotation, (0.0, 0.0, 0.0))
        self.scale = _vec3(scale, (1.0, 1.0, 1.0))

        # Bind pose, restored by Skeleton.reset_pose()
        self.base_position = _vec3(self.position)
        self.base_rotation = _vec3(self.rotation)
        self.base_scale = _vec3(self.scale)

    def add_child(self, child: 'Bone'):
        """Add a child node to this node's hierarchy."""
        self.children.append(child)
        child.parent = self

    def set_rotation_from_quaternion(self, quat):
        """Set the Euler rotation from a quaternion given as (x, y, z, w)."""
        self.rotation = Vector3(quaternion_to_euler_xyz(quat))

    def reset(self):
        """Restore the bind pose."""
        self.position = _vec3(self.base_position)
        self.rotation = _vec3(self.base_rotation)
        self.scale = _vec3(self.base_scale)

    def __repr__(self):
        kind = "Bone" if self.is_bone else "Node"
        return f"{kind}(name='{self.name}', index={self.index}, children={len(self.children)})"


class Skeleton:
    """
    Hierarchical skeleton structure.

    The skeleton owns a synthetic root node; every node is reachable only
    through it. Provides utilities for:
    - Depth-first traversal in source order
    - Finding bones by name
    - Resetting the pose
    """

    def __init__(self, name: str = "Skeleton"):
        """
        Initialize skeleton.

        Args:
            name: Skeleton name for debugging
        """
        self.name = name
        self.root = Bone(name, is_bone=False)

    def add_node(self, node: Bone, parent: Optional[Bone] = None) -> Bone:
        """
        Attach a node to the hierarchy.

        Args:
            node: Node to add
            parent: Parent node (None attaches under the root)

        Returns:
            The added node
        """
        (parent if parent is not None else self.root).add_child(node)
        return node

    def traverse(self) -> Iterator[Bone]:
        """
        Walk all nodes depth-first, parents before children.

        The root itself is included first. Children are visited in the
        order they were added.
        """
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def bones(self) -> List[Bone]:
        """All nodes flagged as bones, in traversal order."""
        return [node for node in self.traverse() if node.is_bone]

    def get_bone(self, name: str) -> Optional[Bone]:
        """
        Find a bone by name.

        Names are not enforced unique; the first match in traversal
        order wins.

        Args:
            name: Bone name

        Returns:
            Bone if found, None otherwise
        """
        for node in self.traverse():
            if node.is_bone and node.name == name:
                return node
        return None

    def find_node(self, name: str) -> Optional[Bone]:
        """Find any node (bone or not) by name, first match wins."""
        for node in self.traverse():
            if node.name == name and node is not self.root:
                return node
        return None

    def bone_map(self) -> Dict[str, Bone]:
        """Map of bone name to bone, first occurrence wins."""
        result: Dict[str, Bone] = {}
        for bone in self.bones():
            result.setdefault(bone.name, bone)
        return result

    def reset_pose(self):
        """Reset all nodes to bind pose."""
        for node in self.traverse():
            node.reset()

    @property
    def bone_count(self) -> int:
        return len(self.bones())

    def __repr__(self):
        return f"Skeleton(name='{self.name}', bones={self.bone_count})"
