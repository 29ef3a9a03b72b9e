"""In-memory hierarchical file system with a current working directory."""

from __future__ import annotations

import random
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

MAX_NAME_LEN = 64
MAX_CHILDREN = 64


class FileSystemError(Exception):
    """Raised when a file system command cannot be carried out."""


class NodeType(Enum):
    FILE = "File"
    DIR = "Directory"

    @property
    def tag(self) -> str:
        return "[DIR]" if self is NodeType.DIR else "[FILE]"


def _clip(name: str) -> str:
    return name[: MAX_NAME_LEN - 1]


@dataclass(eq=False)
class FSNode:
    """A file or directory in the tree."""

    name: str
    type: NodeType
    data: Optional[str] = None
    size: int = 0
    parent: Optional[FSNode] = field(default=None, repr=False)
    children: list[FSNode] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        self.name = _clip(self.name)

    @property
    def is_dir(self) -> bool:
        return self.type is NodeType.DIR

    def find_child(self, name: str) -> Optional[FSNode]:
        return next((child for child in self.children if child.name == name), None)

    def add_child(self, child: FSNode) -> None:
        if len(self.children) >= MAX_CHILDREN:
            raise FileSystemError(f"Too many children in directory: {self.name}")
        self.children.append(child)
        child.parent = self

    def remove_child(self, child: FSNode) -> None:
        for index, existing in enumerate(self.children):
            if existing is child:
                del self.children[index]
                return
        raise FileSystemError(f"'{child.name}' is not in directory '{self.name}'")

    def copy(self) -> FSNode:
        """Return a deep copy of this node and everything beneath it."""
        clone = FSNode(self.name, self.type, self.data, self.size)
        for child in self.children:
            clone.add_child(child.copy())
        return clone

    def walk(self) -> Iterator[FSNode]:
        """Yield this node and its descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()


class FileSystem:
    """A tree of nodes rooted at '/', navigated through a current directory."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.root = FSNode("/", NodeType.DIR)
        self.root.parent = self.root
        self.cwd = self.root

    def _random_data(self, size: int) -> Optional[str]:
        if size <= 0:
            return None
        return "".join(self.rng.choice(string.ascii_uppercase) for _ in range(size))

    def _lookup(self, name: Optional[str]) -> Optional[FSNode]:
        return self.cwd.find_child(name) if name is not None else None

    def mkdir(self, name: Optional[str]) -> Optional[str]:
        if not name:
            return None
        if self.cwd.find_child(name):
            raise FileSystemError("Directory already exists.")
        self.cwd.add_child(FSNode(name, NodeType.DIR))
        return f"Directory '{name}' created."

    def rmdir(self, name: Optional[str], force: bool = False) -> str:
        node = self._lookup(name)
        if node is None or not node.is_dir:
            raise FileSystemError("Directory not found.")
        if node.children and not force:
            raise FileSystemError("Directory not empty. Use -f to force delete.")
        self.cwd.remove_child(node)
        return f"Directory '{name}' deleted."

    def create_file(self, name: str, size: int) -> str:
        if self.cwd.find_child(name):
            raise FileSystemError("File already exists.")
        self.cwd.add_child(FSNode(name, NodeType.FILE, self._random_data(size), size))
        return f"File '{name}' created with {size} bytes."

    def delete_file(self, name: str) -> str:
        node = self._lookup(name)
        if node is None or node.is_dir:
            raise FileSystemError("File not found.")
        self.cwd.remove_child(node)
        return f"File '{name}' deleted."

    def ls(self) -> list[str]:
        return [f"{child.type.tag}\t{child.name}" for child in self.cwd.children]

    def tree(self) -> list[str]:
        def lines(node: FSNode, depth: int) -> Iterator[str]:
            yield f"{'  ' * depth}{node.type.tag} {node.name}"
            for child in node.children:
                yield from lines(child, depth + 1)

        return list(lines(self.cwd, 0))

    def info(self, name: Optional[str], detailed: bool = False) -> list[str]:
        node = self._lookup(name)
        if node is None:
            raise FileSystemError("Node not found.")
        lines = [f"Name: {node.name}", f"Type: {node.type.value}"]
        if not node.is_dir:
            lines.append(f"Size: {node.size}")
            if detailed and node.data:
                lines.append(f"Data: {node.data[:32]}...")
        elif detailed:
            lines.append(f"Children: {len(node.children)}")
        return lines

    def cd(self, name: str) -> None:
        if name == "..":
            self.cwd = self.cwd.parent if self.cwd.parent is not None else self.root
            return
        node = self.cwd.find_child(name)
        if node is None or not node.is_dir:
            raise FileSystemError("Directory not found.")
        self.cwd = node

    def pwd(self) -> str:
        parts: list[str] = []
        node = self.cwd
        while node is not self.root:
            parts.append(node.name)
            node = node.parent
        return "/" + "/".join(reversed(parts))

    def move(self, src: str, dest: str) -> str:
        node = self.cwd.find_child(src)
        if node is None:
            raise FileSystemError("Source not found.")
        target = self.cwd.find_child(dest)
        if target is None or not target.is_dir or target is node:
            raise FileSystemError("Destination directory not found.")
        target.add_child(node)
        self.cwd.remove_child(node)
        return f"Moved '{src}' to '{dest}'."

    def copy(self, src: str, dest: str) -> str:
        node = self.cwd.find_child(src)
        if node is None:
            raise FileSystemError("Source not found.")
        clone = node.copy()
        clone.name = _clip(dest)
        self.cwd.add_child(clone)
        return f"Copied '{src}' to '{dest}'."

    def copy_dir(self, src: str, dest: str) -> str:
        node = self.cwd.find_child(src)
        if node is None or not node.is_dir:
            raise FileSystemError("Source directory not found.")
        clone = node.copy()
        clone.name = _clip(dest)
        self.cwd.add_child(clone)
        return f"Directory '{src}' duplicated as '{dest}'."

    def search(self, name: str) -> Optional[FSNode]:
        """Find the first node with this name anywhere below the root."""
        return next((node for node in self.root.walk() if node.name == name), None)

    def rename(self, old_name: str, new_name: str) -> str:
        node = self.cwd.find_child(old_name)
        if node is None:
            raise FileSystemError("Node not found.")
        node.name = _clip(new_name)
        return f"Renamed '{old_name}' to '{new_name}'"

    def edit_file(self, name: str, content: str) -> str:
        node = self.cwd.find_child(name)
        if node is None or node.is_dir:
            raise FileSystemError("File not found.")
        node.data = content
        node.size = len(content)
        return f"File '{name}' edited."