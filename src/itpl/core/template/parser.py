"""Parser for Go template syntax.

Builds a map of named :class:`~itpl.core.template.nodes.Tree` objects from
template text. The top-level body is stored under the empty name; every
``{{define}}`` and ``{{block}}`` adds a named tree.

Functions are only *names* here. The parser checks that every identifier in
a command is a known function name and raises
:class:`~itpl.core.exceptions.UndefinedFunctionError` otherwise; it never
looks at, let alone calls, a function value.
"""
from __future__ import annotations

import re
from typing import Container, Dict, List, NoReturn, Optional, Tuple

from itpl.core.exceptions import TemplateSyntaxError, UndefinedFunctionError
from itpl.core.utils.text import go_quote, go_unquote

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
    ElseNode,
    EndNode,
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

# Tokens that may start a command inside a pipeline.
_OPERAND_START = frozenset(
    {
        ItemType.BOOL,
        ItemType.CHAR_CONSTANT,
        ItemType.COMPLEX,
        ItemType.DOT,
        ItemType.FIELD,
        ItemType.IDENTIFIER,
        ItemType.NUMBER,
        ItemType.NIL,
        ItemType.RAW_STRING,
        ItemType.STRING,
        ItemType.VARIABLE,
        ItemType.LEFT_PAREN,
    }
)

_OCTAL_RE = re.compile(r"^[+-]?0[0-7_]*$")


class _TreeState:
    """Per-tree parse state: variables in scope and ``range`` nesting depth."""

    def __init__(self, name: str) -> None:
        self.tree = Tree(name=name)
        self.vars: List[str] = ["$"]
        self.range_depth = 0


class Parser:
    """Recursive-descent parser over the lexer's item list.

    One parser handles a whole file; ``define`` and ``block`` bodies are
    parsed into fresh trees that share the same item stream.
    """

    def __init__(
        self,
        text: str,
        *,
        name: str = "",
        parse_name: Optional[str] = None,
        functions: Container[str] = frozenset(),
        keep_comments: bool = False,
    ) -> None:
        self.name = name
        self.parse_name = name if parse_name is None else parse_name
        self.functions = functions
        self.items = lex(
            text,
            emit_comments=keep_comments,
            break_ok="break" not in functions,
            continue_ok="continue" not in functions,
        )
        self.index = 0
        self.last: Optional[Item] = None
        self.action_line = 0
        self.tree_set: Dict[str, Tree] = {}
        self.state = _TreeState(name)

    # -- token stream --------------------------------------------------------

    def _at(self, index: int) -> Item:
        # The stream always ends with EOF or ERROR; reading past it repeats that item.
        return self.items[min(index, len(self.items) - 1)]

    def next(self) -> Item:
        item = self._at(self.index)
        self.index += 1
        self.last = item
        return item

    def backup(self) -> None:
        self.index -= 1

    def peek(self) -> Item:
        return self._at(self.index)

    def next_non_space(self) -> Item:
        while True:
            item = self.next()
            if item.typ is not ItemType.SPACE:
                return item

    def peek_non_space(self) -> Item:
        while self._at(self.index).typ is ItemType.SPACE:
            self.index += 1
        return self._at(self.index)

    # -- errors --------------------------------------------------------------

    def errorf(self, detail: str) -> NoReturn:
        line = self.last.line if self.last is not None else 1
        raise TemplateSyntaxError(detail, name=self.parse_name, line=line)

    def expect(self, expected: ItemType, context: str) -> Item:
        item = self.next_non_space()
        if item.typ is not expected:
            self.unexpected(item, context)
        return item

    def expect_one_of(self, first: ItemType, second: ItemType, context: str) -> Item:
        item = self.next_non_space()
        if item.typ is not first and item.typ is not second:
            self.unexpected(item, context)
        return item

    def unexpected(self, item: Item, context: str) -> NoReturn:
        if item.typ is ItemType.ERROR:
            extra = ""
            if self.action_line and self.action_line != item.line:
                extra = f" in action started at {self.parse_name}:{self.action_line}"
                if item.val.endswith(" action"):
                    extra = extra[len(" in action") :]
            self.errorf(f"{item}{extra}")
        self.errorf(f"unexpected {item} in {context}")

    # -- tree bookkeeping ----------------------------------------------------

    def add(self, tree: Tree) -> None:
        """Register ``tree``; an empty redefinition never replaces a real body."""
        existing = self.tree_set.get(tree.name)
        if existing is None or is_empty_tree(existing.root):
            self.tree_set[tree.name] = tree
            return
        if not is_empty_tree(tree.root):
            self.errorf(f"template: multiple definition of template {go_quote(tree.name)}")

    def use_var(self, item: Item) -> VariableNode:
        node = VariableNode.from_text(item.val, pos=item.pos)
        if node.ident[0] not in self.state.vars:
            self.errorf(f"undefined variable {go_quote(node.ident[0])}")
        return node

    def pop_vars(self, count: int) -> None:
        del self.state.vars[count:]

    # -- grammar -------------------------------------------------------------

    def parse(self) -> Dict[str, Tree]:
        """Parse the whole input, returning trees keyed by template name."""
        root = self.state.tree
        while self.peek().typ is not ItemType.EOF:
            if self.peek().typ is ItemType.LEFT_DELIM:
                delim_index = self.index
                self.next()
                if self.next_non_space().typ is ItemType.DEFINE:
                    self.parse_definition()
                    continue
                self.index = delim_index
            node = self.text_or_action()
            if isinstance(node, (EndNode, ElseNode)):
                self.errorf(f"unexpected {node}")
            root.root.append(node)
        self.add(root)
        # Top-level body first, then named templates in definition order.
        ordered: Dict[str, Tree] = {}
        if root.name in self.tree_set:
            ordered[root.name] = self.tree_set[root.name]
        for name, tree in self.tree_set.items():
            ordered.setdefault(name, tree)
        return ordered

    def parse_definition(self) -> None:
        context = "define clause"
        token = self.expect_one_of(ItemType.STRING, ItemType.RAW_STRING, context)
        name = self._unquote(token.val)
        self.expect(ItemType.RIGHT_DELIM, context)
        outer = self.state
        self.state = _TreeState(name)
        try:
            root, end = self.item_list()
            if not isinstance(end, EndNode):
                self.errorf(f"unexpected {end} in {context}")
            self.state.tree.root = root
            self.add(self.state.tree)
        finally:
            self.state = outer

    def item_list(self) -> Tuple[ListNode, Node]:
        """Parse nodes until ``{{end}}`` or ``{{else}}``; return the list and the terminator."""
        nodes = ListNode(pos=self.peek_non_space().pos)
        while self.peek_non_space().typ is not ItemType.EOF:
            node = self.text_or_action()
            if isinstance(node, (EndNode, ElseNode)):
                return nodes, node
            nodes.append(node)
        self.errorf("unexpected EOF")

    def text_or_action(self) -> Node:
        token = self.next_non_space()
        if token.typ is ItemType.TEXT:
            return TextNode(token.val, pos=token.pos)
        if token.typ is ItemType.LEFT_DELIM:
            self.action_line = token.line
            try:
                return self.action()
            finally:
                self.action_line = 0
        if token.typ is ItemType.COMMENT:
            return CommentNode(token.val, pos=token.pos)
        self.unexpected(token, "input")

    def action(self) -> Node:
        token = self.next_non_space()
        typ = token.typ
        if typ is ItemType.BLOCK:
            return self.block_control()
        if typ is ItemType.BREAK:
            return self.break_control(token)
        if typ is ItemType.CONTINUE:
            return self.continue_control(token)
        if typ is ItemType.ELSE:
            return self.else_control()
        if typ is ItemType.END:
            return self.end_control()
        if typ is ItemType.IF:
            return self.if_control()
        if typ is ItemType.RANGE:
            return self.range_control()
        if typ is ItemType.TEMPLATE:
            return self.template_control()
        if typ is ItemType.WITH:
            return self.with_control()
        self.backup()
        token = self.peek()
        # Variables declared here stay in scope until the enclosing {{end}}.
        return ActionNode(self.pipeline("command", ItemType.RIGHT_DELIM), pos=token.pos)

    def break_control(self, token: Item) -> Node:
        item = self.next_non_space()
        if item.typ is not ItemType.RIGHT_DELIM:
            self.unexpected(item, "{{break}}")
        if self.state.range_depth == 0:
            self.errorf("{{break}} outside {{range}}")
        return BreakNode(pos=token.pos)

    def continue_control(self, token: Item) -> Node:
        item = self.next_non_space()
        if item.typ is not ItemType.RIGHT_DELIM:
            self.unexpected(item, "{{continue}}")
        if self.state.range_depth == 0:
            self.errorf("{{continue}} outside {{range}}")
        return ContinueNode(pos=token.pos)

    def pipeline(self, context: str, end: ItemType) -> PipeNode:
        pipe = PipeNode(pos=self.peek_non_space().pos)
        self._declarations(pipe, context)
        while True:
            token = self.next_non_space()
            if token.typ is end:
                self.check_pipeline(pipe, context)
                return pipe
            if token.typ in _OPERAND_START:
                self.backup()
                pipe.append(self.command())
            else:
                self.unexpected(token, context)

    def _declarations(self, pipe: PipeNode, context: str) -> None:
        # Three-token look-ahead: in "$x foo" the token after "$x" decides
        # whether "$x" is declared or merely used as an argument.
        while True:
            variable = self.peek_non_space()
            if variable.typ is not ItemType.VARIABLE:
                return
            var_index = self.index
            self.next()
            following = self.peek_non_space()
            if following.typ in (ItemType.ASSIGN, ItemType.DECLARE):
                pipe.is_assign = following.typ is ItemType.ASSIGN
                self.next_non_space()
                pipe.decl.append(VariableNode.from_text(variable.val, pos=variable.pos))
                self.state.vars.append(variable.val)
                return
            if following.typ is ItemType.CHAR and following.val == ",":
                self.next_non_space()
                pipe.decl.append(VariableNode.from_text(variable.val, pos=variable.pos))
                self.state.vars.append(variable.val)
                if context == "range" and len(pipe.decl) < 2:
                    if self.peek_non_space().typ in (
                        ItemType.VARIABLE,
                        ItemType.RIGHT_DELIM,
                        ItemType.RIGHT_PAREN,
                    ):
                        # Second variable of "range $i, $v := ...".
                        continue
                    self.errorf("range can only initialize variables")
                self.errorf(f"too many declarations in {context}")
            self.index = var_index
            return

    def check_pipeline(self, pipe: PipeNode, context: str) -> None:
        if not pipe.cmds:
            self.errorf(f"missing value for {context}")
        # Only the first command of a pipeline may be a constant.
        for i, cmd in enumerate(pipe.cmds[1:]):
            if isinstance(cmd.args[0], (BoolNode, DotNode, NilNode, NumberNode, StringNode)):
                self.errorf(f"non executable command in pipeline stage {i + 2}")

    def parse_control(self, context: str) -> Tuple[int, PipeNode, ListNode, Optional[ListNode]]:
        var_count = len(self.state.vars)
        try:
            pipe = self.pipeline(context, ItemType.RIGHT_DELIM)
            if context == "range":
                self.state.range_depth += 1
            body, terminator = self.item_list()
            if context == "range":
                self.state.range_depth -= 1
            else_list: Optional[ListNode] = None
            if isinstance(terminator, ElseNode):
                # "{{else if x}}" and "{{else with x}}" leave the keyword pending:
                # parse it as a nested control that shares our {{end}}.
                if context == "if" and self.peek().typ is ItemType.IF:
                    self.next()
                    else_list = ListNode(pos=terminator.pos)
                    else_list.append(self.if_control())
                elif context == "with" and self.peek().typ is ItemType.WITH:
                    self.next()
                    else_list = ListNode(pos=terminator.pos)
                    else_list.append(self.with_control())
                else:
                    else_list, terminator = self.item_list()
                    if not isinstance(terminator, EndNode):
                        self.errorf(f"expected end; found {terminator}")
            return pipe.pos, pipe, body, else_list
        finally:
            self.pop_vars(var_count)

    def _branch(self, cls: type, context: str) -> BranchNode:
        pos, pipe, body, else_list = self.parse_control(context)
        return cls(pipe=pipe, list=body, else_list=else_list, pos=pos)

    def if_control(self) -> Node:
        return self._branch(IfNode, "if")

    def range_control(self) -> Node:
        return self._branch(RangeNode, "range")

    def with_control(self) -> Node:
        return self._branch(WithNode, "with")

    def end_control(self) -> Node:
        return EndNode(pos=self.expect(ItemType.RIGHT_DELIM, "end").pos)

    def else_control(self) -> Node:
        peek = self.peek_non_space()
        if peek.typ in (ItemType.IF, ItemType.WITH):
            return ElseNode(pos=peek.pos)
        token = self.expect(ItemType.RIGHT_DELIM, "else")
        return ElseNode(pos=token.pos)

    def block_control(self) -> Node:
        """Parse ``{{block "name" pipeline}}body{{end}}``.

        The body becomes the named tree ``name`` and the action itself turns
        into ``{{template "name" pipeline}}``.
        """
        context = "block clause"
        token = self.next_non_space()
        name = self.parse_template_name(token, context)
        pipe = self.pipeline(context, ItemType.RIGHT_DELIM)

        outer = self.state
        self.state = _TreeState(name)
        try:
            root, end = self.item_list()
            if not isinstance(end, EndNode):
                self.errorf(f"unexpected {end} in {context}")
            self.state.tree.root = root
            self.add(self.state.tree)
        finally:
            self.state = outer
        return TemplateNode(name=name, pipe=pipe, pos=token.pos)

    def template_control(self) -> Node:
        context = "template clause"
        token = self.next_non_space()
        name = self.parse_template_name(token, context)
        pipe = None
        if self.next_non_space().typ is not ItemType.RIGHT_DELIM:
            self.backup()
            pipe = self.pipeline(context, ItemType.RIGHT_DELIM)
        return TemplateNode(name=name, pipe=pipe, pos=token.pos)

    def parse_template_name(self, token: Item, context: str) -> str:
        if token.typ in (ItemType.STRING, ItemType.RAW_STRING):
            return self._unquote(token.val)
        self.unexpected(token, context)

    def command(self) -> CommandNode:
        cmd = CommandNode(pos=self.peek_non_space().pos)
        while True:
            self.peek_non_space()
            operand = self.operand()
            if operand is not None:
                cmd.append(operand)
            token = self.next()
            if token.typ is ItemType.SPACE:
                continue
            if token.typ in (ItemType.RIGHT_DELIM, ItemType.RIGHT_PAREN):
                self.backup()
            elif token.typ is not ItemType.PIPE:
                self.unexpected(token, "operand")
            break
        if not cmd.args:
            self.errorf("empty command")
        return cmd

    def operand(self) -> Optional[Node]:
        node = self.term()
        if node is None:
            return None
        if self.peek().typ is ItemType.FIELD:
            chain = ChainNode(node=node, pos=self.peek().pos)
            while self.peek().typ is ItemType.FIELD:
                chain.add(self.next().val)
            # Fold "$x.A" and ".A.B" back into plain variables and fields.
            if isinstance(node, FieldNode):
                return FieldNode.from_text(str(chain), pos=chain.pos)
            if isinstance(node, VariableNode):
                return VariableNode.from_text(str(chain), pos=chain.pos)
            if isinstance(node, (BoolNode, StringNode, NumberNode, NilNode, DotNode)):
                self.errorf(f"unexpected . after term {go_quote(str(node))}")
            return chain
        return node

    def term(self) -> Optional[Node]:
        token = self.next_non_space()
        typ = token.typ
        if typ is ItemType.IDENTIFIER:
            if token.val not in self.functions:
                raise UndefinedFunctionError(token.val, name=self.parse_name, line=token.line)
            return IdentifierNode(token.val, pos=token.pos)
        if typ is ItemType.DOT:
            return DotNode(pos=token.pos)
        if typ is ItemType.NIL:
            return NilNode(pos=token.pos)
        if typ is ItemType.VARIABLE:
            return self.use_var(token)
        if typ is ItemType.FIELD:
            return FieldNode.from_text(token.val, pos=token.pos)
        if typ is ItemType.BOOL:
            return BoolNode(token.val == "true", pos=token.pos)
        if typ in (ItemType.CHAR_CONSTANT, ItemType.COMPLEX, ItemType.NUMBER):
            self._check_number(token)
            return NumberNode(token.val, pos=token.pos)
        if typ is ItemType.LEFT_PAREN:
            return self.pipeline("parenthesized pipeline", ItemType.RIGHT_PAREN)
        if typ in (ItemType.STRING, ItemType.RAW_STRING):
            return StringNode(quoted=token.val, text=self._unquote(token.val), pos=token.pos)
        self.backup()
        return None

    # -- literals ------------------------------------------------------------

    def _unquote(self, literal: str) -> str:
        try:
            return go_unquote(literal)
        except ValueError as exc:
            self.errorf(f"{exc}: {literal}")

    def _check_number(self, token: Item) -> None:
        text = token.val
        if token.typ is ItemType.CHAR_CONSTANT:
            try:
                go_unquote(text)
            except ValueError:
                self.errorf(f"malformed character constant: {text}")
            return
        if not _is_number(text):
            self.errorf(f"illegal number syntax: {go_quote(text)}")


def _is_number(text: str) -> bool:
    if text.endswith("i"):
        body = text[:-1]
        if not body:
            return False
        try:
            complex(body.replace("_", "") + "j")
            return True
        except ValueError:
            return False
    if _OCTAL_RE.match(text):
        return True
    try:
        int(text, 0)
        return True
    except ValueError:
        pass
    try:
        float(text)
        return True
    except ValueError:
        pass
    try:
        float.fromhex(text.replace("_", ""))
        return "p" in text.lower()
    except ValueError:
        return False


def parse(
    text: str,
    *,
    name: str = "",
    parse_name: Optional[str] = None,
    functions: Container[str] = frozenset(),
    keep_comments: bool = False,
) -> Dict[str, Tree]:
    """Parse template ``text`` into trees keyed by template name.

    Args:
        text: Template source.
        name: Name of the top-level template, used as its key.
        parse_name: Name shown in error messages (defaults to ``name``), e.g. the file path.
        functions: Names the parser accepts as function calls.
        keep_comments: Keep ``{{/* */}}`` comments as :class:`CommentNode`.

    Returns:
        Ordered mapping, top-level body first, then named templates in
        definition order.

    Raises:
        UndefinedFunctionError: An action calls a name outside ``functions``.
        TemplateSyntaxError: Any other malformed input.
    """
    return Parser(
        text,
        name=name,
        parse_name=parse_name,
        functions=functions,
        keep_comments=keep_comments,
    ).parse()


__all__ = ["Parser", "parse"]
