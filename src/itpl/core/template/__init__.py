"""Go template syntax: lexer, parser and parse tree nodes.

This package only parses and prints templates; it has no evaluator.
"""

from .functions import BUILTIN_FUNCTIONS, INCLUDE_FUNCTION, FunctionRegistry
from .lexer import Item, ItemType, lex
from .nodes import (
    ActionNode,
    BoolNode,
    BranchNode,
    BreakNode,
    ChainNode,
    CommandNode,
    CommentNode,
    ContinueNode,
    DotNode,
    FieldNode,
    IdentifierNode,
    IfNode,
    ListNode,
    NilNode,
    Node,
    NumberNode,
    PipeNode,
    RangeNode,
    StringNode,
    TemplateNode,
    TextNode,
    Tree,
    VariableNode,
    WithNode,
    is_empty_tree,
)
from .parser import Parser, parse

__all__ = [
    "BUILTIN_FUNCTIONS",
    "INCLUDE_FUNCTION",
    "FunctionRegistry",
    "Item",
    "ItemType",
    "lex",
    "Parser",
    "parse",
    "ActionNode",
    "BoolNode",
    "BranchNode",
    "BreakNode",
    "ChainNode",
    "CommandNode",
    "CommentNode",
    "ContinueNode",
    "DotNode",
    "FieldNode",
    "IdentifierNode",
    "IfNode",
    "ListNode",
    "NilNode",
    "Node",
    "NumberNode",
    "PipeNode",
    "RangeNode",
    "StringNode",
    "TemplateNode",
    "TextNode",
    "Tree",
    "VariableNode",
    "WithNode",
    "is_empty_tree",
]
