"""Parse tree nodes for Go template syntax.

Every node prints itself back as template source through ``str()``, using
the same canonical form as Go's ``text/template/parse`` package: trim markers
are gone (the lexer already applied them), pipelines are joined with
``" | "`` and sub-pipelines are parenthesized.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from itpl.core.utils.text import go_quote


class Node:
    """Base class for all parse tree nodes."""

    pos: int = 0

    def __str__(self) -> str:  # pragma: no cover - overridden everywhere
        raise NotImplementedError


@dataclass(eq=False)
class ListNode(Node):
    """A sequence of nodes."""

    nodes: List[Node] = field(default_factory=list)
    pos: int = 0

    def append(self, node: Node) -> None:
        self.nodes.append(node)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes)

    def __str__(self) -> str:
        return "".join(str(n) for n in self.nodes)


@dataclass(eq=False)
class TextNode(Node):
    """Plain text outside of actions."""

    text: str
    pos: int = 0

    def __str__(self) -> str:
        return self.text


@dataclass(eq=False)
class CommentNode(Node):
    """A ``{{/* ... */}}`` comment (only kept when parsing with ``keep_comments``)."""

    text: str
    pos: int = 0

    def __str__(self) -> str:
        return "{{" + self.text + "}}"


@dataclass(eq=False)
class IdentifierNode(Node):
    """A function name."""

    ident: str
    pos: int = 0

    def __str__(self) -> str:
        return self.ident


@dataclass(eq=False)
class VariableNode(Node):
    """A ``$``-variable, possibly followed by field accesses (``$x.A.B``)."""

    ident: List[str]
    pos: int = 0

    @classmethod
    def from_text(cls, text: str, pos: int = 0) -> "VariableNode":
        return cls(ident=text.split("."), pos=pos)

    def __str__(self) -> str:
        return ".".join(self.ident)


@dataclass(eq=False)
class DotNode(Node):
    pos: int = 0

    def __str__(self) -> str:
        return "."


@dataclass(eq=False)
class NilNode(Node):
    pos: int = 0

    def __str__(self) -> str:
        return "nil"


@dataclass(eq=False)
class FieldNode(Node):
    """A field chain rooted at dot: ``.A.B``."""

    ident: List[str]
    pos: int = 0

    @classmethod
    def from_text(cls, text: str, pos: int = 0) -> "FieldNode":
        return cls(ident=text[1:].split("."), pos=pos)

    def __str__(self) -> str:
        return "".join("." + ident for ident in self.ident)


@dataclass(eq=False)
class ChainNode(Node):
    """Field accesses applied to a non-field term, e.g. ``(pipeline).A``."""

    node: Node
    fields: List[str] = field(default_factory=list)
    pos: int = 0

    def add(self, text: str) -> None:
        if not text or text[0] != ".":
            raise ValueError("no dot in field")
        text = text[1:]
        if not text:
            raise ValueError("empty field")
        self.fields.append(text)

    def __str__(self) -> str:
        head = str(self.node)
        if isinstance(self.node, PipeNode):
            head = f"({head})"
        return head + "".join("." + f for f in self.fields)


@dataclass(eq=False)
class BoolNode(Node):
    value: bool
    pos: int = 0

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(eq=False)
class NumberNode(Node):
    """A numeric or character constant; only the original spelling is kept."""

    text: str
    pos: int = 0

    def __str__(self) -> str:
        return self.text


@dataclass(eq=False)
class StringNode(Node):
    """A quoted or raw string literal."""

    quoted: str
    text: str
    pos: int = 0

    def __str__(self) -> str:
        return self.quoted


@dataclass(eq=False)
class CommandNode(Node):
    """One stage of a pipeline: an operand followed by arguments."""

    args: List[Node] = field(default_factory=list)
    pos: int = 0

    def append(self, arg: Node) -> None:
        self.args.append(arg)

    def __str__(self) -> str:
        parts = []
        for arg in self.args:
            if isinstance(arg, PipeNode):
                parts.append(f"({arg})")
            else:
                parts.append(str(arg))
        return " ".join(parts)


@dataclass(eq=False)
class PipeNode(Node):
    """A pipeline with optional variable declarations or assignment."""

    decl: List[VariableNode] = field(default_factory=list)
    cmds: List[CommandNode] = field(default_factory=list)
    is_assign: bool = False
    pos: int = 0

    def append(self, command: CommandNode) -> None:
        self.cmds.append(command)

    def __str__(self) -> str:
        out = ""
        if self.decl:
            out = ", ".join(str(v) for v in self.decl)
            out += " = " if self.is_assign else " := "
        return out + " | ".join(str(c) for c in self.cmds)


@dataclass(eq=False)
class ActionNode(Node):
    """A non-control action such as ``{{.Field}}`` or ``{{include "x"}}``."""

    pipe: PipeNode
    pos: int = 0

    def __str__(self) -> str:
        return "{{" + str(self.pipe) + "}}"


@dataclass(eq=False)
class BranchNode(Node):
    """Common shape of ``if``, ``range`` and ``with``."""

    pipe: PipeNode
    list: ListNode
    else_list: Optional[ListNode] = None
    pos: int = 0

    keyword = ""

    def __str__(self) -> str:
        out = "{{" + self.keyword + " " + str(self.pipe) + "}}" + str(self.list)
        if self.else_list is not None:
            out += "{{else}}" + str(self.else_list)
        return out + "{{end}}"


class IfNode(BranchNode):
    keyword = "if"


class RangeNode(BranchNode):
    keyword = "range"


class WithNode(BranchNode):
    keyword = "with"


@dataclass(eq=False)
class TemplateNode(Node):
    """A ``{{template "name" pipeline}}`` invocation."""

    name: str
    pipe: Optional[PipeNode] = None
    pos: int = 0

    def __str__(self) -> str:
        if self.pipe is None:
            return "{{template " + go_quote(self.name) + "}}"
        return "{{template " + go_quote(self.name) + " " + str(self.pipe) + "}}"


@dataclass(eq=False)
class BreakNode(Node):
    pos: int = 0

    def __str__(self) -> str:
        return "{{break}}"


@dataclass(eq=False)
class ContinueNode(Node):
    pos: int = 0

    def __str__(self) -> str:
        return "{{continue}}"


# Parser-internal markers; they never end up in a tree.
@dataclass(eq=False)
class EndNode(Node):
    pos: int = 0

    def __str__(self) -> str:
        return "{{end}}"


@dataclass(eq=False)
class ElseNode(Node):
    pos: int = 0

    def __str__(self) -> str:
        return "{{else}}"


@dataclass(eq=False)
class Tree:
    """One named template: the file body (name ``""``) or a ``define``/``block``."""

    name: str
    root: ListNode = field(default_factory=ListNode)

    def __str__(self) -> str:
        return str(self.root)


def is_empty_tree(node: Optional[Node]) -> bool:
    """Report whether ``node`` holds nothing but whitespace and comments."""
    if node is None or isinstance(node, CommentNode):
        return True
    if isinstance(node, ListNode):
        return all(is_empty_tree(n) for n in node.nodes)
    if isinstance(node, TextNode):
        return not node.text.strip()
    return False


__all__ = [
    "Node",
    "ListNode",
    "TextNode",
    "CommentNode",
    "IdentifierNode",
    "VariableNode",
    "DotNode",
    "NilNode",
    "FieldNode",
    "ChainNode",
    "BoolNode",
    "NumberNode",
    "StringNode",
    "CommandNode",
    "PipeNode",
    "ActionNode",
    "BranchNode",
    "IfNode",
    "RangeNode",
    "WithNode",
    "TemplateNode",
    "BreakNode",
    "ContinueNode",
    "EndNode",
    "ElseNode",
    "Tree",
    "is_empty_tree",
]
