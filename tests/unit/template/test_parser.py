"""Tests for the Go template parser and node printing."""
from __future__ import annotations

import pytest

from itpl.core.exceptions import TemplateSyntaxError, UndefinedFunctionError
from itpl.core.template import (
    ActionNode,
    FieldNode,
    IfNode,
    RangeNode,
    StringNode,
    TemplateNode,
    TextNode,
    VariableNode,
    WithNode,
    parse,
)

FUNCS = frozenset({"xxx", "yyy", "zzz", "len", "printf", "index"})


def reprint(text: str, **kwargs) -> str:
    kwargs.setdefault("functions", FUNCS)
    return str(parse(text, **kwargs)[""])


class TestReprint:
    """Parsed templates print back in canonical form."""

    @pytest.mark.parametrize(
        "source, expected",
        [
            ("ABC", "ABC"),
            ("{{xxx}}ABC", "{{xxx}}ABC"),
            ("{{- xxx -}} ABC", "{{xxx}}ABC"),
            ('{{ xxx "yyy"}} ABC', '{{xxx "yyy"}} ABC'),
            ("{{xxx|len}}ABC{{yyy|zzz}}", "{{xxx | len}}ABC{{yyy | zzz}}"),
            ("{{.A.B}}", "{{.A.B}}"),
            ("{{.}}", "{{.}}"),
            ("{{$.A}}", "{{$.A}}"),
            ("{{$x := .A}}{{$x}}", "{{$x := .A}}{{$x}}"),
            ("{{$x := 1}}{{$x = 2}}", "{{$x := 1}}{{$x = 2}}"),
            ("{{range $i, $v := .L}}{{$i}}{{$v}}{{end}}", "{{range $i, $v := .L}}{{$i}}{{$v}}{{end}}"),
            ("{{range .L}}{{break}}{{continue}}{{end}}", "{{range .L}}{{break}}{{continue}}{{end}}"),
            ("{{range .L}}a{{else}}b{{end}}", "{{range .L}}a{{else}}b{{end}}"),
            ("{{with .A}}{{.B}}{{end}}", "{{with .A}}{{.B}}{{end}}"),
            ('{{printf "%d" (len .A)}}', '{{printf "%d" (len .A)}}'),
            ("{{(len .A).B}}", "{{(len .A).B}}"),
            ("{{printf `a\"b`}}", "{{printf `a\"b`}}"),
            ("{{0x1F}} {{1e3}} {{'a'}} {{-2}} {{1+2i}}", "{{0x1F}} {{1e3}} {{'a'}} {{-2}} {{1+2i}}"),
            ("{{true}}{{false}}{{nil}}", "{{true}}{{false}}{{nil}}"),
            ('{{template "x"}}{{template "y" .}}', '{{template "x"}}{{template "y" .}}'),
            ("{{index .M \"k\" | printf \"%s\"}}", '{{index .M "k" | printf "%s"}}'),
        ],
    )
    def test_reprint(self, source: str, expected: str) -> None:
        assert reprint(source) == expected

    def test_else_if_becomes_nested_if(self) -> None:
        out = reprint("{{if .A}}a{{else if .B}}b{{else}}c{{end}}")
        assert out == "{{if .A}}a{{else}}{{if .B}}b{{else}}c{{end}}{{end}}"

    def test_else_with_becomes_nested_with(self) -> None:
        out = reprint("{{with .A}}x{{else with .B}}y{{end}}")
        assert out == "{{with .A}}x{{else}}{{with .B}}y{{end}}{{end}}"

    def test_comments_dropped_by_default(self) -> None:
        assert reprint("a{{/* note */}}b") == "ab"

    def test_comments_kept_on_request(self) -> None:
        assert reprint("a{{/* note */}}b", keep_comments=True) == "a{{/* note */}}b"


class TestStructure:
    def test_action_arguments(self) -> None:
        root = parse('{{xxx "a/b"}}', functions=FUNCS)[""].root
        action = root.nodes[0]
        assert isinstance(action, ActionNode)
        args = action.pipe.cmds[0].args
        assert isinstance(args[1], StringNode)
        assert args[1].text == "a/b"
        assert args[1].quoted == '"a/b"'

    def test_raw_string_unquoted(self) -> None:
        root = parse("{{xxx `a\\b`}}", functions=FUNCS)[""].root
        assert root.nodes[0].pipe.cmds[0].args[1].text == "a\\b"

    def test_field_chain_folds_into_field(self) -> None:
        node = parse("{{.A.B}}")[""].root.nodes[0].pipe.cmds[0].args[0]
        assert isinstance(node, FieldNode)
        assert node.ident == ["A", "B"]

    def test_variable_chain_folds_into_variable(self) -> None:
        node = parse("{{$.A}}")[""].root.nodes[0].pipe.cmds[0].args[0]
        assert isinstance(node, VariableNode)
        assert node.ident == ["$", "A"]

    def test_if_else_lists(self) -> None:
        node = parse("{{if .A}}x{{else}}y{{end}}")[""].root.nodes[0]
        assert isinstance(node, IfNode)
        assert [str(n) for n in node.list] == ["x"]
        assert [str(n) for n in node.else_list] == ["y"]

    def test_else_if_nests_in_else_list(self) -> None:
        node = parse("{{if .A}}x{{else if .B}}y{{end}}")[""].root.nodes[0]
        assert len(node.else_list) == 1
        assert isinstance(node.else_list.nodes[0], IfNode)

    def test_branch_types(self) -> None:
        nodes = parse("{{range .L}}{{end}}{{with .W}}{{end}}")[""].root.nodes
        assert isinstance(nodes[0], RangeNode)
        assert isinstance(nodes[1], WithNode)
        assert nodes[0].else_list is None


class TestNamedTemplates:
    def test_define_adds_named_tree(self) -> None:
        trees = parse('{{define "T"}}body{{end}}rest')
        assert list(trees) == ["", "T"]
        assert str(trees[""]) == "rest"
        assert str(trees["T"]) == "body"

    def test_block_becomes_template_and_tree(self) -> None:
        trees = parse('{{block "A" .}}ABC{{end}}')
        assert list(trees) == ["", "A"]
        assert isinstance(trees[""].root.nodes[0], TemplateNode)
        assert str(trees[""]) == '{{template "A" .}}'
        assert str(trees["A"]) == "ABC"

    def test_definition_order_kept(self) -> None:
        trees = parse('{{define "b"}}B{{end}}{{define "a"}}A{{end}}x')
        assert list(trees) == ["", "b", "a"]

    def test_empty_redefinition_keeps_body(self) -> None:
        trees = parse('{{define "a"}}x{{end}}{{define "a"}} {{end}}')
        assert str(trees["a"]) == "x"

    def test_multiple_definition_rejected(self) -> None:
        with pytest.raises(TemplateSyntaxError, match='multiple definition of template "a"'):
            parse('{{define "a"}}x{{end}}{{define "a"}}y{{end}}')

    def test_define_only_at_top_level(self) -> None:
        with pytest.raises(TemplateSyntaxError):
            parse('{{if .A}}{{define "a"}}x{{end}}{{end}}')

    def test_block_requires_pipeline(self) -> None:
        with pytest.raises(TemplateSyntaxError, match="missing value for block clause"):
            parse('{{block "A"}}x{{end}}')


class TestSyntaxErrors:
    @pytest.mark.parametrize(
        "source, detail",
        [
            ("{{1 | 2}}", "non executable command in pipeline stage 2"),
            ("{{$y}}", 'undefined variable "$y"'),
            ("{{if true}}{{$x := 1}}{{end}}{{$x}}", 'undefined variable "$x"'),
            ("{{break}}", "{{break}} outside {{range}}"),
            ("{{continue}}", "{{continue}} outside {{range}}"),
            ("{{range .L}}{{else}}{{break}}{{end}}", "{{break}} outside {{range}}"),
            ("{{end}}", "unexpected {{end}}"),
            ("{{else}}", "unexpected {{else}}"),
            ("{{if .A}}", "unexpected EOF"),
            ("{{if}}{{end}}", "missing value for if"),
            ("{{.X", "unclosed action"),
            ("{{3k}}", 'bad number syntax: "3k"'),
            ("{{true.A}}", 'unexpected . after term "true"'),
            ('{{"\\q"}}', 'invalid syntax: "\\q"'),
        ],
    )
    def test_error_detail(self, source: str, detail: str) -> None:
        with pytest.raises(TemplateSyntaxError) as excinfo:
            parse(source, functions=FUNCS)
        assert excinfo.value.detail == detail

    def test_message_carries_name_and_line(self) -> None:
        with pytest.raises(TemplateSyntaxError) as excinfo:
            parse("a\n\n{{$y}}", parse_name="page.tpl")
        err = excinfo.value
        assert err.line == 3
        assert str(err) == 'template: page.tpl:3: undefined variable "$y"'

    def test_unknown_function(self) -> None:
        with pytest.raises(UndefinedFunctionError) as excinfo:
            parse("x\n{{upper .A}}", parse_name="f", functions=FUNCS)
        err = excinfo.value
        assert err.function == "upper"
        assert str(err) == 'template: f:2: function "upper" not defined'
        assert isinstance(err, TemplateSyntaxError)

    def test_text_only_needs_no_functions(self) -> None:
        trees = parse("plain")
        assert isinstance(trees[""].root.nodes[0], TextNode)
