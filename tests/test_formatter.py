"""Tests for the fallback formatter."""

from edbml.compiler.formatter import emergency_format


def test_wraps_body_in_header_and_footer():
    text = emergency_format("x = 1", ["a", "b"])
    assert text.split("\n") == [
        "def dysfunction(a, b):",
        "    x = 1",
        "# end dysfunction",
    ]


def test_indents_by_brackets():
    body = "data = {\n'a': [\n1,\n],\n}\nreturn data"
    assert emergency_format(body, []).split("\n")[1:-1] == [
        "    data = {",
        "        'a': [",
        "            1,",
        "        ],",
        "    }",
        "    return data",
    ]


def test_opener_before_trailing_comment():
    body = "items = (  # values\n1\n)"
    assert emergency_format(body, []).split("\n")[1:-1] == [
        "    items = (  # values",
        "        1",
        "    )",
    ]


def test_depth_is_clamped_at_zero():
    body = "}\n]\n)\nx"
    assert emergency_format(body, []).split("\n")[1:-1] == ["}", "]", ")", "x"]


def test_strips_surrounding_whitespace():
    body = "      return 1 +   \n\t\tpass"
    assert emergency_format(body, [], indent="\t").split("\n")[1:-1] == [
        "\treturn 1 +",
        "\tpass",
    ]


def test_line_count_is_input_plus_two():
    for body in ["", "a", "a\nb\n", "{{{{\n", "\n\n\n", "]]]\x00[[["]:
        text = emergency_format(body, ["x"])
        assert len(text.split("\n")) == len(body.split("\n")) + 2


def test_custom_name():
    text = emergency_format("pass", [], name="broken")
    assert text.startswith("def broken():")
    assert text.endswith("# end broken")
