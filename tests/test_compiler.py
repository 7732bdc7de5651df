"""Tests for the pipeline compiler."""

from types import SimpleNamespace

import pytest

from edbml.compiler import (
    Degraded,
    FunctionCompiler,
    Import,
    Success,
    compile_template,
    validate,
)
from edbml.config import CompilerConfig
from edbml.errors import NestedTemplateError, StructuralError
from edbml.runtime import Runtime


def test_param_instruction_becomes_argument():
    result = compile_template('<?param name="user"?>return user.name;')
    assert isinstance(result, Success)
    assert result.params == ["user"]
    assert result(SimpleNamespace(name="Ada")) == "Ada"


def test_params_follow_source_order():
    source = (
        "<?param name='b'?>\n"
        '<?param type="str" name="a"?>\n'
        '<?param name="c" type="int"?>\n'
        "return b + a + c\n"
    )
    result = compile_template(source)
    assert result.params == ["b", "a", "c"]
    assert result("1", "2", "3") == "123"


def test_repeated_param_is_declared_once():
    result = compile_template('<?param name="x"?><?param name="x"?>return x')
    assert result.params == ["x"]


def test_unknown_instruction_is_ignored():
    result = compile_template('<?import src="lib.edbml"?>return 1')
    assert result.params == []
    assert result() == 1


def test_indented_template_body():
    source = """
        <?param name="x"?>
        if x > 1:
            return x * 2
        return x
    """
    result = compile_template(source)
    assert result.ok
    assert result(3) == 6
    assert result(1) == 1


class TestValidate:
    def test_nested_template_raises(self):
        source = '<?param name="a"?>\n<script type="text/edbml">\nreturn 1\n</script>'
        with pytest.raises(NestedTemplateError):
            compile_template(source)

    def test_nested_template_is_structural_error(self):
        with pytest.raises(StructuralError):
            FunctionCompiler().assemble("<script type='text/edbml'>x</script>")

    def test_validate_is_pure(self):
        assert validate("a = 1", "<%") == "a = 1"
        with pytest.raises(NestedTemplateError) as info:
            validate("a = '<%'", "<%")
        assert info.value.marker == "<%"

    def test_configured_pattern(self):
        compiler = FunctionCompiler(CompilerConfig(nested_pattern=r"\{%"))
        with pytest.raises(NestedTemplateError):
            compiler.compile("x = '{%'")
        assert compiler.compile("return '<script type=\"text/edbml\">x'").ok


class TestDefine:
    def test_default_accumulators(self):
        assembly = FunctionCompiler().assemble("return 1")
        assert assembly.body == "out = __edb__.Out()\natt = __edb__.Att()\nreturn 1"

    def test_declared_out_and_att_are_not_replaced(self):
        source = '<?param name="out"?><?param name="att"?>return out, att'
        assembly = FunctionCompiler().assemble(source)
        assert "__edb__.Out()" not in assembly.body
        assert "__edb__.Att()" not in assembly.body
        assert compile_template(source)("o", "a") == ("o", "a")

    def test_out_accumulator(self):
        runtime = Runtime()
        source = (
            '<?param name="name"?>\n'
            'out.write("<p>", name, "</p>")\n'
            "return str(out)"
        )
        result = compile_template(source, runtime=runtime)
        assert result("Ada") == "<p>Ada</p>"
        assert runtime.outputs[-1].html == "<p>Ada</p>"

    def test_att_accumulator(self):
        source = 'att["id"] = "main"\natt["hidden"] = True\nreturn f"<div{att}>"'
        assert compile_template(source)() == '<div id="main" hidden>'


class TestDeclare:
    deps = [Import(name="a", tempname="t1"), Import(name="b", tempname="t2")]

    def test_one_scope_block_for_all_dependencies(self):
        assembly = FunctionCompiler().assemble(
            "return a() + b()", dependencies=self.deps
        )
        assert set(assembly.head.declarations) == {"a", "b"}
        assert assembly.head.functiondefs == [
            "def __functions__(get):\n"
            "    nonlocal a, b\n"
            "    a = get('t1')\n"
            "    b = get('t2')\n"
            "__functions__(__edb__.resolve)\n"
        ]

    def test_declarations_precede_scope_block(self):
        assembly = FunctionCompiler().assemble("return a", dependencies=self.deps)
        lines = assembly.body.split("\n")
        assert lines.index("a = None") < lines.index("def __functions__(get):")
        assert lines.index("b = None") < lines.index("def __functions__(get):")

    def test_no_scope_block_without_dependencies(self):
        assembly = FunctionCompiler().assemble("return 1")
        assert assembly.head.functiondefs == []
        assert assembly.head.declarations == {}
        assert "__functions__" not in assembly.body

    def test_dependencies_resolve_at_call_time(self):
        runtime = Runtime()
        result = compile_template(
            "return a() + b()", dependencies=self.deps, runtime=runtime
        )
        assert result.ok
        runtime.registry.register("t1", lambda: "A")
        runtime.registry.register("t2", lambda: "B")
        assert result() == "AB"

    def test_unresolved_dependency_fails_only_when_called(self):
        result = compile_template("return a", dependencies=[Import("a", "missing")])
        assert result.ok
        with pytest.raises(KeyError):
            result()

    def test_registry_tempname(self):
        runtime = Runtime()
        key = runtime.registry.tempname(str.upper)
        result = compile_template(
            '<?param name="s"?>return upper(s)',
            dependencies=[Import("upper", key)],
            runtime=runtime,
        )
        assert result("ada") == "ADA"


class TestDegradedCompile:
    def test_invalid_template_degrades(self):
        delivered = []
        runtime = Runtime(loader=lambda source, context: delivered.append(source))
        result = compile_template('<?param name="x"?>return x +', runtime=runtime)
        assert isinstance(result, Degraded)
        assert result.params == []
        output = result("ignored")
        assert "edberror" in output
        assert result.errormessage in output
        assert delivered[0].startswith("def dysfunction(x):")
        assert "return x +" in delivered[0]


class DirectiveCompiler(FunctionCompiler):
    """Declares the param named by the "param" directive."""

    def _direct(self, script, head):
        name = self.directives.get("param")
        if name:
            return f'<?param name="{name}"?>' + script
        return script


def test_direct_runs_before_extract():
    compiler = DirectiveCompiler()
    result = compiler.compile("return value", {"param": "value"})
    assert result.params == ["value"]
    assert result(7) == 7


def test_compile_calls_are_independent():
    compiler = FunctionCompiler()
    first = compiler.compile(
        '<?param name="a"?>return a', dependencies=[Import("d", "k")]
    )
    second = compiler.compile("return 2")
    assert first.params == ["a"]
    assert second.params == []
    assert "__functions__" not in compiler.assemble("return 2").body


def test_sequence_order():
    assert FunctionCompiler.sequence == [
        "_validate",
        "_direct",
        "_extract",
        "_declare",
        "_define",
    ]


def test_multiline_string_at_column_zero_is_kept():
    source = 'text = """first\n    second"""\nreturn text'
    assert compile_template(source)() == "first\n    second"


def test_indented_body_is_dedented():
    assembly = FunctionCompiler().assemble("\n    x = 1\n    return x\n")
    assert assembly.body.endswith("\nx = 1\nreturn x\n")
