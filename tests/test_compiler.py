"""Tests for the full named-parameter rewrite."""

import pytest

from named_params import (
    Compiler, NamedParamsError, NamedParamsSyntaxError, compile_source,
    normalize_directives,
)

PLAIN = '''package main

import "fmt"

func add(a, b int) int {
    return (a + b) * (1)
}

func main() {
    m := map[string]int{"x": 1}
    fmt.Println(add(1, 2), m["x"], s[1:2])
}
'''


class TestDefinitions:
    def test_named(self):
        assert (compile_source("func named(a: int, b: int) int { return a + b }")
                == "func named_a_b(a int, b int) int { return a + b }")

    def test_grouped(self):
        assert (compile_source("func named15(a, b: int, c: string) int {")
                == "func named15_a_b_c(a int, b int, c string) int {")

    def test_single(self):
        assert compile_source("func named11(name: string) {") == "func named11_name(name string) {"

    def test_multiword_type(self):
        assert compile_source("func named13(c: chan int) {") == "func named13_c(c chan int) {"

    def test_func_typed_parameter(self):
        assert (compile_source("func apply(f: func(int) int, x: int) int {")
                == "func apply_f_x(f func(int) int, x int) int {")

    def test_method(self):
        assert (compile_source("func (s *Store) Set(key: string, value: int) {")
                == "func (s *Store) Set_key_value(key string, value int) {")

    def test_positional_untouched(self):
        for src in ("func anon10() {", "func anon12(a int, b int) {",
                    "func anon15(a, b int, c string) int {",
                    "func (s *Store) Get(key string) int {"):
            assert compile_source(src) == src

    def test_multiline(self):
        src = "func describe(name: string,\n    verbose: bool) string {\n"
        assert (compile_source(src)
                == "func describe_name_verbose(name string,\nverbose bool) string {\n")

    def test_type_on_next_line(self):
        assert compile_source("func f(a:\n    int) {}\n") == "func f_a(\na int) {}\n"


class TestInvocations:
    def test_simple(self):
        assert compile_source("named(a: 3, b: 2)") == "named_a_b(3, 2)"

    def test_nested(self):
        assert (compile_source("result = named(a: named(a: 7, b: 4), b: 2)")
                == "result = named_a_b(named_a_b(7, 4), 2)")

    def test_positional_inside_named(self):
        assert (compile_source("named14(a: anon14(7, 4), b: 2)")
                == "named14_a_b(anon14(7, 4), 2)")

    def test_named_inside_positional(self):
        assert (compile_source("anon14(named14(a: 7, b: 4), 2)")
                == "anon14(named14_a_b(7, 4), 2)")

    def test_grouping_argument(self):
        assert compile_source("named12(a: 3, b: (2 + 3))") == "named12_a_b(3, (2 + 3))"

    def test_two_calls_one_line(self):
        assert compile_source("x := f(a: 1) + g(b: 2)") == "x := f_a(1) + g_b(2)"

    def test_selector(self):
        assert (compile_source('store.Set(key: "k", value: 1)')
                == 'store.Set_key_value("k", 1)')

    def test_string_values(self):
        assert compile_source('f(a: ")", b: "c: d")') == 'f_a_b(")", "c: d")'

    def test_composite_literal_value(self):
        assert (compile_source("draw(p: Point{x: 1, y: 2}, c: red)")
                == "draw_p_c(Point{x: 1, y: 2}, red)")

    def test_func_literal_untouched(self):
        src = "f := func(a: int) {}"
        assert compile_source(src) == src

    def test_multiline_call(self):
        src = "x := f(\n    a: 1, // one\n    b: 2,\n)\n"
        assert compile_source(src) == "x := f_a_b(\n1, // one\n2,\n)\n"

    def test_value_on_next_line(self):
        src = "x := f(\n    a:\n        1,\n    b: 2,\n)\n"
        out = compile_source(src)
        assert out == "x := f_a_b(\n\n1,\n2,\n)\n"
        assert out.count("\n") == src.count("\n")

    def test_crlf_multiline_call(self):
        src = "x := f(\r\n    a: 1,\r\n    b: 2,\r\n)\r\n"
        assert compile_source(src) == "x := f_a_b(\r\n1,\r\n2,\r\n)\r\n"

    def test_type_arguments_untouched(self):
        src = "ys := Map[int](xs: ys, f: g)"
        assert compile_source(src) == src

    def test_unnamed_callee_untouched(self):
        for src in ("fs[0](a: 1)", "f(x)(a: 1)", "f()(a: 1)"):
            assert compile_source(src) == src

    def test_definition_and_call_agree(self):
        out = compile_source("func f(a: int, b: int) {}\nf(a: x, b: y)\nf(a: 1.5, b: \"s\")")
        lines = out.split("\n")
        assert lines[0].startswith("func f_a_b(")
        assert lines[1].startswith("f_a_b(")
        assert lines[2].startswith("f_a_b(")


class TestGrouping:
    def test_simple(self):
        assert compile_source("result = (5 * 2)") == "result = (5 * 2)"

    def test_deep(self):
        assert compile_source("result = ((((1 + 3))))") == "result = ((((1 + 3))))"


class TestLiteralOpacity:
    def test_string(self):
        src = 'fmt.Println("f(a: 1)")'
        assert compile_source(src) == src

    def test_line_comment(self):
        src = "x := 1 // f(a: 1)\n"
        assert compile_source(src) == src

    def test_block_comment(self):
        src = "/* func g(x: int) {\n  g(x: 2) */\n"
        assert compile_source(src) == src

    def test_raw_string(self):
        src = "s := `h(a: 1)\n)`\n"
        assert compile_source(src) == src

    def test_paren_in_string_argument(self):
        assert compile_source('log(msg: "(", n: 1)') == 'log_msg_n("(", 1)'


class TestProperties:
    def test_identity_on_plain_code(self):
        assert compile_source(PLAIN) == PLAIN

    def test_line_count(self):
        src = ("func f(a: int, b: int) int {\n    return a\n}\n"
               "func main() {\n    f(a: f(a: 1, b: 2), b: (3))\n}\n")
        assert compile_source(src).count("\n") == src.count("\n")

    def test_idempotent(self):
        src = ("func f(a: int, b: int) int {\n    return a\n}\n"
               "x := f(a: f(a: 1, b: 2),\n    b: 3,\n)\n")
        once = compile_source(src)
        assert compile_source(once) == once

    def test_compiler_instances_agree(self):
        src = "f(a: 1)"
        assert Compiler().compile(src) == compile_source(src)


class TestDirectives:
    def test_generate(self):
        assert compile_source("//go:generate foo") == "//"

    def test_both_prefixes(self):
        src = "//go:generate python compile.py $GOFILE\n// +build ignore\n\npackage main\n"
        assert compile_source(src) == "//\n//\n\npackage main\n"

    def test_other_comments_kept(self):
        src = "// go:generate is not a directive here\npackage main"
        assert normalize_directives(src) == src

    def test_crlf(self):
        assert normalize_directives("//go:generate x\r\npackage main\r\n") == "//\r\npackage main\r\n"

    def test_custom_prefixes(self):
        c = Compiler(directive_prefixes=["//go:build"])
        assert c.compile("//go:build ignore\n//go:generate x") == "//\n//go:generate x"

    def test_no_prefixes(self):
        src = "//go:generate x"
        assert Compiler(directive_prefixes=()).compile(src) == src


class TestErrors:
    def test_unclosed_call(self):
        with pytest.raises(NamedParamsSyntaxError, match="never closed") as info:
            compile_source("package main\n\nf(a: 1\n")
        assert info.value.line == 3
        assert info.value.column == 2

    def test_message_includes_location(self):
        with pytest.raises(NamedParamsSyntaxError, match=r"line 1, column 6"):
            compile_source('x := "abc')

    def test_is_named_params_error(self):
        with pytest.raises(NamedParamsError):
            compile_source("f())")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Compiler().compile_file(tmp_path / "missing.ngo")

    def test_not_utf8(self, tmp_path):
        src = tmp_path / "latin1.ngo"
        src.write_bytes(b"f(a: 1)\n// caf\xe9\n")
        with pytest.raises(NamedParamsError, match="not valid UTF-8: byte 0xe9"):
            Compiler().compile_file(src)


class TestFiles:
    def test_output_path(self):
        assert Compiler().output_path("pkg/main.ngo") == "pkg/main.ngo.go"

    def test_convert(self, tmp_path):
        src = tmp_path / "main.ngo"
        src.write_text("//go:generate x\nf(a: 1)\n")
        written = Compiler().convert(src)
        assert written == str(src) + ".go"
        assert (tmp_path / "main.ngo.go").read_text() == "//\nf_a(1)\n"

    def test_convert_failure_writes_nothing(self, tmp_path):
        src = tmp_path / "bad.ngo"
        src.write_text("f(a: 1\n")
        with pytest.raises(NamedParamsSyntaxError):
            Compiler().convert(src)
        assert not (tmp_path / "bad.ngo.go").exists()

    def test_convert_to_explicit_output(self, tmp_path):
        src = tmp_path / "main.ngo"
        src.write_text("g(x: 2)")
        out = tmp_path / "out.go"
        assert Compiler().convert(src, out) == str(out)
        assert out.read_text() == "g_x(2)"

    def test_crlf_file(self, tmp_path):
        src = tmp_path / "win.ngo"
        src.write_bytes(b"x := f(\r\n    a: 1,\r\n    b: 2,\r\n)\r\n")
        Compiler().convert(src)
        assert (tmp_path / "win.ngo.go").read_bytes() == b"x := f_a_b(\r\n1,\r\n2,\r\n)\r\n"
