"""Tests for printing trees back to template text."""
from __future__ import annotations

from itpl.core.composition import serialize, serialize_tree
from itpl.core.template import ListNode, TextNode, Tree, parse


class TestSerialize:
    def test_top_level_only(self) -> None:
        assert serialize(parse("A{{.B}}C")) == "A{{.B}}C"

    def test_named_templates_follow_body(self) -> None:
        trees = parse('x{{define "T"}}t{{end}}{{block "B" .}}b{{end}}')
        assert serialize(trees) == 'x{{template "B" .}}{{define "T"}}t{{end}}{{define "B"}}b{{end}}'

    def test_block_example(self) -> None:
        assert serialize(parse('{{block "A" .}}ABC{{end}}')) == '{{template "A" .}}{{define "A"}}ABC{{end}}'

    def test_name_quoted_go_style(self) -> None:
        trees = {"": Tree(""), "a\"b\n": Tree("a\"b\n", ListNode([TextNode("x")]))}
        assert serialize(trees) == '{{define "a\\"b\\n"}}x{{end}}'

    def test_missing_root(self) -> None:
        trees = {"only": Tree("only", ListNode([TextNode("x")]))}
        assert serialize(trees) == '{{define "only"}}x{{end}}'

    def test_serialize_tree(self) -> None:
        assert serialize_tree(Tree("t", ListNode([TextNode("a"), TextNode("b")]))) == "ab"

    def test_output_reparses(self) -> None:
        source = '{{if .A}}{{range $i, $v := .L}}{{$i}}{{end}}{{else}}-{{end}}{{define "x"}}{{.}}{{end}}'
        once = serialize(parse(source))
        assert serialize(parse(once)) == once
