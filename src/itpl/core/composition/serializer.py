"""Serializer: print parse trees back to template source."""
from __future__ import annotations

from typing import Mapping

from itpl.core.template import Tree
from itpl.core.utils.text import go_quote


def serialize_tree(tree: Tree) -> str:
    return "".join(str(node) for node in tree.root.nodes)


def serialize(trees: Mapping[str, Tree], *, root_name: str = "") -> str:
    """Print the top-level body followed by every named template.

    Named templates are wrapped as ``{{define "name"}}...{{end}}`` and
    appended in mapping order.
    """
    parts = []
    root = trees.get(root_name)
    if root is not None:
        parts.append(serialize_tree(root))
    for name, tree in trees.items():
        if name == root_name:
            continue
        parts.append("{{define " + go_quote(name) + "}}" + serialize_tree(tree) + "{{end}}")
    return "".join(parts)


__all__ = ["serialize", "serialize_tree"]
