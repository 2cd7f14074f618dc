"""End-to-end tests for Loader: parse, resolve includes, serialize.

NO MOCKS - in-memory stores and real files under tmp_path.
"""
from __future__ import annotations

from pathlib import Path

import pytest

from itpl import Loader, LoadResult, load
from itpl.core.config import LoaderConfig
from itpl.core.exceptions import (
    CircularImportError,
    TemplateNotFoundError,
    TemplateSyntaxError,
    UndefinedFunctionError,
    UnresolvableFunctionError,
)
from itpl.core.store import MemoryFileStore, OsFileStore


class TestLoadTable:
    """Behaviour on small in-memory template sets."""

    @pytest.mark.parametrize(
        "files, expected",
        [
            ({"/entry": "ABC"}, "ABC"),
            ({"/entry": "{{xxx}}ABC"}, "{{xxx}}ABC"),
            ({"/entry": "{{- xxx -}} ABC"}, "{{xxx}}ABC"),
            ({"/entry": '{{ xxx "yyy"}} ABC'}, '{{xxx "yyy"}} ABC'),
            ({"/entry": 'ABC {{include "index2"}}', "/index2": "DEF"}, "ABC DEF"),
            ({"/entry": 'ABC {{include "a/index2"}}', "/a/index2": "DEF"}, "ABC DEF"),
            ({"/entry": 'ABC {{- include "a/index2"}}', "/a/index2": "DEF"}, "ABCDEF"),
            (
                {
                    "/entry": 'ABC{{include "index3"}} {{include "index2"}}',
                    "/index2": 'DEF{{include "index3"}}',
                    "/index3": "!",
                },
                "ABC! DEF!",
            ),
            ({"/entry": '{{block "A" .}}ABC{{end}}'}, '{{template "A" .}}{{define "A"}}ABC{{end}}'),
            ({"/entry": "{{xxx|len}}ABC{{yyy|zzz}}"}, "{{xxx | len}}ABC{{yyy | zzz}}"),
            ({"/entry": '{{if .x}}{{include "./inc"}}{{end}}', "/inc": "Hi!"}, "{{if .x}}Hi!{{end}}"),
        ],
    )
    def test_table(self, files, expected: str, memory_store) -> None:
        assert Loader(memory_store(files)).load("/entry") == expected

    def test_includes_in_else_branches(self, memory_store) -> None:
        store = memory_store(
            {
                "/entry": '{{if .A}}x{{else}}{{include "e1"}}{{end}}'
                '{{range .L}}.{{else}}{{include "e2"}}{{end}}'
                '{{with .W}}.{{else with .V}}{{include "e3"}}{{end}}',
                "/e1": "1",
                "/e2": "2",
                "/e3": "3",
            }
        )
        assert Loader(store).load("/entry") == (
            "{{if .A}}x{{else}}1{{end}}"
            "{{range .L}}.{{else}}2{{end}}"
            "{{with .W}}.{{else}}{{with .V}}3{{end}}{{end}}"
        )

    def test_include_inside_named_template(self, memory_store) -> None:
        store = memory_store({"/entry": '{{define "T"}}<{{include "part"}}>{{end}}body', "/part": "P"})
        assert Loader(store).load("/entry") == 'body{{define "T"}}<P>{{end}}'

    def test_defines_from_included_file_kept(self, memory_store) -> None:
        store = memory_store({"/entry": 'A{{include "lib"}}B', "/lib": '{{define "x"}}X{{end}}L'})
        assert Loader(store).load("/entry") == 'AL{{define "x"}}X{{end}}B'

    def test_relative_to_including_file_not_entry(self, memory_store) -> None:
        store = memory_store(
            {
                "/site/entry": '{{include "parts/a"}}',
                "/site/parts/a": 'a{{include "b"}}{{include "../c"}}',
                "/site/parts/b": "b",
                "/site/c": "c",
            }
        )
        assert Loader(store).load("/site/entry") == "abc"

    def test_absolute_include(self, memory_store) -> None:
        store = memory_store({"/deep/dir/entry": '{{include "/shared/x"}}', "/shared/x": "X"})
        assert Loader(store).load("/deep/dir/entry") == "X"

    def test_load_function(self, memory_store) -> None:
        assert load("/entry", store=memory_store({"/entry": 'a{{include "b"}}', "/b": "B"})) == "aB"

    def test_with_store_is_fluent(self, memory_store) -> None:
        loader = Loader().with_store(memory_store({"/entry": "x"}))
        assert isinstance(loader, Loader)
        assert loader.load("/entry") == "x"

    def test_no_include_reprint_is_stable(self, memory_store) -> None:
        source = '{{- if .A -}}\n  {{ printf "%d" (len .B) }}\n{{- end }}{{/* gone */}}'
        out = Loader(memory_store({"/entry": source})).load("/entry")
        assert out == '{{if .A}}{{printf "%d" (len .B)}}{{end}}'


class TestLoadResult:
    def test_dependencies_and_counts(self, memory_store) -> None:
        store = memory_store(
            {
                "/entry": 'ABC{{include "x"}} {{include "y"}}',
                "/x": "!",
                "/y": 'DEF{{include "x"}}{{upper .}}',
            }
        )
        result = Loader(store).load_result("/entry")
        assert isinstance(result, LoadResult)
        assert result.content == "ABC! DEF!{{upper .}}"
        assert result.dependencies == ("/entry", "/x", "/y")
        assert result.includes_resolved == 3
        assert result.functions == ("upper",)

    def test_entry_path_is_cleaned(self, memory_store) -> None:
        result = Loader(memory_store({"/a/entry": "x"})).load_result("/a/./b/../entry")
        assert result.dependencies == ("/a/entry",)

    def test_independent_calls(self, memory_store) -> None:
        loader = Loader(memory_store({"/entry": 'a{{include "x"}}', "/x": "X"}))
        assert loader.load("/entry") == loader.load("/entry") == "aX"


class TestLoadErrors:
    def test_missing_entry(self, memory_store) -> None:
        with pytest.raises(TemplateNotFoundError) as excinfo:
            Loader(memory_store({})).load("/entry")
        assert excinfo.value.path == "/entry"

    def test_missing_include(self, memory_store) -> None:
        with pytest.raises(TemplateNotFoundError) as excinfo:
            Loader(memory_store({"/entry": 'a{{include "gone"}}'})).load("/entry")
        assert excinfo.value.context["path"] == "/gone"
        assert isinstance(excinfo.value, FileNotFoundError)

    def test_self_include_is_cycle(self, memory_store) -> None:
        with pytest.raises(CircularImportError) as excinfo:
            Loader(memory_store({"/entry": '{{include "entry"}}'})).load("/entry")
        assert excinfo.value.path == "/entry"

    def test_direct_cycle(self, memory_store) -> None:
        store = memory_store({"/entry": '{{include "a"}}', "/a": '{{include "b"}}', "/b": '{{include "a"}}'})
        with pytest.raises(CircularImportError) as excinfo:
            Loader(store).load("/entry")
        assert excinfo.value.path == "/a"
        assert excinfo.value.context["chain"] == ["/entry", "/a", "/b", "/a"]

    def test_long_transitive_cycle(self, memory_store) -> None:
        files = {f"/f{i}": f'{{{{include "f{i + 1}"}}}}' for i in range(10)}
        files["/f10"] = '{{if .X}}{{include "f3"}}{{end}}'
        with pytest.raises(CircularImportError, match='"/f3" is already processed'):
            Loader(memory_store(files)).load("/f0")

    def test_cycle_through_relative_spelling(self, memory_store) -> None:
        store = memory_store({"/d/a": '{{include "../d/./b"}}', "/d/b": '{{include "a"}}'})
        with pytest.raises(CircularImportError):
            Loader(store).load("/d/a")

    def test_syntax_error_in_included_file_names_it(self, memory_store) -> None:
        store = memory_store({"/entry": '{{include "bad"}}', "/bad": "ok\n{{if .A}}"})
        with pytest.raises(TemplateSyntaxError) as excinfo:
            Loader(store).load("/entry")
        assert excinfo.value.name == "/bad"
        assert str(excinfo.value) == "template: /bad:2: unexpected EOF"

    def test_explicit_functions_disable_discovery(self, memory_store) -> None:
        store = memory_store({"/entry": '{{upper .A}}{{include "x"}}', "/x": "{{lower .B}}"})
        assert Loader(store, functions=["upper", "lower"]).load("/entry") == "{{upper .A}}{{lower .B}}"
        with pytest.raises(UndefinedFunctionError) as excinfo:
            Loader(store, functions=["upper"]).load("/entry")
        assert excinfo.value.name == "/x"

    def test_discovery_ceiling(self, memory_store) -> None:
        store = memory_store({"/entry": "{{a}}{{b}}{{c}}"})
        with pytest.raises(UnresolvableFunctionError):
            Loader(store, max_function_retries=2).load("/entry")

    def test_undecodable_file(self) -> None:
        store = MemoryFileStore({"/entry": b"\xff\xfe"})
        with pytest.raises(TemplateSyntaxError, match="invalid utf-8 text"):
            Loader(store).load("/entry")

    def test_other_encoding(self) -> None:
        store = MemoryFileStore({"/entry": "café".encode("latin-1")})
        assert Loader(store, encoding="latin-1").load("/entry") == "café"


class TestLoadFromDisk:
    def test_root_relative_paths(self, template_dir) -> None:
        root = template_dir({"page.tpl": 'A{{include "parts/h.tpl"}}', "parts/h.tpl": 'H{{include "../f.tpl"}}', "f.tpl": "F"})
        result = Loader(OsFileStore(root)).load_result("page.tpl")
        assert result.content == "AHF"
        assert result.dependencies == ("page.tpl", "parts/h.tpl", "f.tpl")

    def test_absolute_entry(self, template_dir) -> None:
        root = template_dir({"page.tpl": 'A{{include "h.tpl"}}', "h.tpl": "H"})
        assert Loader().load(str(root / "page.tpl")) == "AH"

    def test_missing_file_on_disk(self, tmp_path: Path) -> None:
        with pytest.raises(TemplateNotFoundError):
            Loader(OsFileStore(tmp_path)).load("nope.tpl")

    def test_from_config(self, template_dir) -> None:
        root = template_dir({"page.tpl": "{{shout .}}"})
        loader = Loader.from_config(LoaderConfig(functions=("shout",), root=root))
        assert loader.load("page.tpl") == "{{shout .}}"
        assert loader.syntax.explicit
