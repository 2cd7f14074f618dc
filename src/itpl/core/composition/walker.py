"""Tree walker: find include directives and splice in resolved text.

An include directive is an action holding exactly one command with exactly
two arguments, the identifier ``include`` and a string literal:

    {{include "header.tpl"}}

Anything else (pipes, declarations, extra arguments, a non-literal path) is
left untouched.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from itpl.core.template import (
    ActionNode,
    BranchNode,
    IdentifierNode,
    INCLUDE_FUNCTION,
    ListNode,
    Node,
    StringNode,
)

# (including file, include target) -> resolved text
ResolveFn = Callable[[str, str], str]


@dataclass(eq=False)
class RawNode(Node):
    """Resolved include content; printed verbatim."""

    text: str
    pos: int = 0

    def __str__(self) -> str:
        return self.text


def include_target(node: Node) -> Optional[str]:
    """Return the path of an include directive, or None if ``node`` is not one."""
    if not isinstance(node, ActionNode):
        return None
    pipe = node.pipe
    if pipe.decl or len(pipe.cmds) != 1:
        return None
    args = pipe.cmds[0].args
    if len(args) != 2:
        return None
    ident, target = args
    if not isinstance(ident, IdentifierNode) or ident.ident != INCLUDE_FUNCTION:
        return None
    if not isinstance(target, StringNode):
        return None
    return target.text


def walk(path: str, nodes: Optional[ListNode], resolve: ResolveFn) -> None:
    """Replace every include directive under ``nodes`` in place.

    Args:
        path: Canonical path of the file the nodes came from.
        nodes: Statement list to process; ``None`` (an absent else branch) is skipped.
        resolve: Callback returning the fully resolved text of an include.
    """
    if nodes is None:
        return
    for idx, node in enumerate(nodes.nodes):
        target = include_target(node)
        if target is not None:
            nodes.nodes[idx] = RawNode(resolve(path, target), pos=node.pos)
        elif isinstance(node, BranchNode):
            walk(path, node.list, resolve)
            walk(path, node.else_list, resolve)


__all__ = ["RawNode", "ResolveFn", "include_target", "walk"]
