import time

import pytest

from autolearn.core import (
    ChunkType,
    StructuralParser,
    detect_language,
    extract_text_content,
    extract_theme_properties,
    language_for_file,
    parse_to_chunks,
    resolve_language,
)
from autolearn.core.parsing import (
    CURLY_BRACE,
    ECMASCRIPT,
    GENERIC,
    MARKUP,
    PYTHON,
    STRUCTURED_DATA,
    STYLESHEET,
    find_block_end,
)

TWO_CLASSES = """class User {
    val name: String = "Ann"
    var age = 3
}

class Theme {
    val primaryColor = "#FF0000"
}
"""

COUNTER = """class Counter {
    var count = 0

    fun increment() {
        if (count < 10) {
            count++
        }
    }
}
"""

PYTHON_CODE = """class Config:
    name = "app"
    debug = False

    def load(self):
        value = 1
        return value
"""

JS_CODE = """const theme = {
  primaryColor: "#336699",
  fontSize: "14px"
};
function greet(name) {
  return "Hello " + name;
}
"""


def by_type(chunks, chunk_type):
    return [c for c in chunks if c.type == chunk_type]


def test_two_classes_become_two_class_chunks():
    chunks = parse_to_chunks(TWO_CLASSES)
    classes = by_type(chunks, ChunkType.CLASS)
    assert [c.name for c in classes] == ["User", "Theme"]
    assert classes[0].properties == {"name": '"Ann"', "age": "3"}
    assert classes[1].properties == {"primaryColor": '"#FF0000"'}
    assert classes[0].content.startswith("class User {")
    assert classes[0].content.endswith("}")


def test_nested_body_is_matched_by_depth():
    chunks = parse_to_chunks(COUNTER)
    counter = by_type(chunks, ChunkType.CLASS)[0]
    assert counter.name == "Counter"
    assert counter.content.count("{") == counter.content.count("}") == 3
    assert counter.properties == {"count": "0"}

    functions = by_type(chunks, ChunkType.FUNCTION)
    assert [f.name for f in functions] == ["increment"]
    assert "count++" in functions[0].content


def test_class_properties_are_top_level_only():
    code = 'class Screen {\n    val title = "Home"\n    fun render() {\n        val local = 1\n    }\n}\n'
    screen = by_type(parse_to_chunks(code), ChunkType.CLASS)[0]
    assert screen.properties == {"title": '"Home"'}


def test_control_flow_is_not_a_function():
    code = "fun check(x: Int) {\n    while (x > 0) {\n        x--\n    }\n    if (x == 0) {\n        return\n    }\n}\n"
    names = [c.name for c in by_type(parse_to_chunks(code), ChunkType.FUNCTION)]
    assert names == ["check"]


def test_top_level_bindings_become_objects():
    code = 'val appName = "Demo"\nobject Config {\n    val debug = true\n}\n'
    chunks = parse_to_chunks(code, language_hint="kotlin")
    objects = by_type(chunks, ChunkType.OBJECT)
    assert [o.name for o in objects] == ["appName", "Config"]
    assert all(o.properties == {} for o in objects)
    config = by_type(chunks, ChunkType.CLASS)[0]
    assert config.name == "Config"
    assert config.properties == {"debug": "true"}


def test_unterminated_body_yields_no_chunk():
    assert parse_to_chunks("class Broken {\n    val x = 1\n", language_hint="kotlin") == []


def test_empty_input():
    assert parse_to_chunks("") == []
    assert StructuralParser().parse_to_chunks("   \n") == []


def test_python_blocks():
    chunks = parse_to_chunks(PYTHON_CODE)
    assert [(c.type, c.name) for c in chunks] == [(ChunkType.CLASS, "Config"), (ChunkType.FUNCTION, "load")]
    config, load = chunks
    assert config.properties == {"name": '"app"', "debug": "False"}
    assert load.properties == {"value": "1"}
    assert load.content.startswith("def load(self):")
    assert "return value" in load.content


def test_ecmascript_object_literal():
    chunks = parse_to_chunks(JS_CODE)
    objects = by_type(chunks, ChunkType.OBJECT)
    assert [o.name for o in objects] == ["theme"]
    assert objects[0].properties == {"primaryColor": "#336699", "fontSize": "14px"}
    assert "greet" in [f.name for f in by_type(chunks, ChunkType.FUNCTION)]


def test_ecmascript_class():
    code = 'class Button {\n  constructor() {\n    this.label = "OK";\n  }\n}\n'
    classes = by_type(parse_to_chunks(code, language_hint="js"), ChunkType.CLASS)
    assert [c.name for c in classes] == ["Button"]


def test_markup_leaf_elements():
    code = '<TextView android:text="Hello" android:textColor="#FFFFFF">Label</TextView>'
    chunks = parse_to_chunks(code)
    assert len(chunks) == 1
    assert chunks[0].type == ChunkType.OBJECT
    assert chunks[0].name == "TextView"
    assert chunks[0].properties == {"android:text": "Hello", "android:textColor": "#FFFFFF"}


def test_stylesheet_rules():
    chunks = parse_to_chunks(".button { color: red; background: #fff; }\nh1 { font-size: 2em; }")
    assert [c.name for c in chunks] == [".button", "h1"]
    assert chunks[0].properties == {"color": "red", "background": "#fff"}
    assert chunks[1].properties == {"font-size": "2em"}


def test_structured_data_single_object():
    chunks = parse_to_chunks('{"name": "demo", "color": "#123456", "count": 3}')
    assert len(chunks) == 1
    assert chunks[0].name == "json_object"
    assert chunks[0].properties == {"name": "demo", "color": "#123456"}


def test_generic_assignments():
    chunks = parse_to_chunks("title: Welcome\ncount = 3")
    assert len(chunks) == 1
    assert chunks[0].name == "generic_object"
    assert chunks[0].properties == {"title": "Welcome", "count": "3"}


@pytest.mark.parametrize(
    "code, family",
    [
        ("fun main() {}", CURLY_BRACE),
        ("class A : B {\n}", CURLY_BRACE),
        ("data class User(val name: String, val age: Int)", CURLY_BRACE),
        ("function f() {}", ECMASCRIPT),
        ("const x = 1", ECMASCRIPT),
        ("def f():\n    pass", PYTHON),
        ("import os\nprint(os.getcwd())", PYTHON),
        ('class Store:\n    data = {"a": 1}\n', PYTHON),
        ('<?xml version="1.0"?><a/>', MARKUP),
        (".btn { color: red; }", STYLESHEET),
        ('["a", "b"]', STRUCTURED_DATA),
        ("hello world", GENERIC),
    ],
)
def test_detect_language(code, family):
    assert detect_language(code) == family


def test_language_helpers():
    assert language_for_file("src/MainActivity.KT") == "kotlin"
    assert language_for_file("styles.scss") == "scss"
    assert language_for_file("README") is None
    assert resolve_language("kt") == CURLY_BRACE
    assert resolve_language("TS") == ECMASCRIPT
    assert resolve_language("htm") == MARKUP
    assert resolve_language("ecmascript") == ECMASCRIPT
    assert resolve_language("cobol") == GENERIC


def test_find_block_end_skips_braces_in_strings():
    code = 'fun f() { val s = "}"; }'
    open_index = code.index("{")
    assert find_block_end(code, open_index) == len(code)
    assert find_block_end("{ {", 0) == -1


def test_theme_properties():
    chunks = parse_to_chunks(JS_CODE)
    assert extract_theme_properties(chunks) == {"primaryColor": "#336699"}

    css = parse_to_chunks(".card { background: white; border: 1px solid rgb(0, 0, 0); margin: 0; }")
    assert extract_theme_properties(css) == {"background": "white"}


def test_theme_value_colors_without_theme_keys():
    chunks = parse_to_chunks('{"accent": "#abc", "shadow": "rgba(0,0,0,0.5)", "label": "Save"}')
    assert extract_theme_properties(chunks) == {"accent": "#abc", "shadow": "rgba(0,0,0,0.5)"}


def test_text_content():
    chunks = parse_to_chunks(JS_CODE)
    texts = extract_text_content(chunks)
    assert "Hello " in texts
    assert "14px" in texts
    assert all(len(t) > 3 for t in texts)


def test_brace_less_data_class_yields_curly_bindings():
    chunks = parse_to_chunks("data class User(val name: String, val age: Int)")
    assert chunks
    assert all(c.name != "generic_object" for c in chunks)
    assert by_type(chunks, ChunkType.OBJECT)[0].name == "name"


def test_find_block_end_skips_single_quoted_literals():
    js = "function close() {\n  const brace = '}';\n  return brace;\n}\n"
    assert find_block_end(js, js.index("{")) == len(js) - 1

    kotlin = "fun open(c: Char) {\n    if (c == '{') return\n}"
    assert find_block_end(kotlin, kotlin.index("{")) == len(kotlin)


def test_apostrophe_in_comment_only_hides_its_line():
    code = "fun greet() {\n    // don't shout\n    println(\"hi\")\n}"
    assert find_block_end(code, code.index("{")) == len(code)


def test_single_quoted_brace_keeps_ecmascript_function_whole():
    code = "function close() {\n  const brace = '}';\n  return brace;\n}\n"
    functions = by_type(parse_to_chunks(code, language_hint="js"), ChunkType.FUNCTION)
    assert functions[0].name == "close"
    assert functions[0].content.endswith("return brace;\n}")


def test_java_methods_with_modifiers_and_annotations():
    code = (
        "public class Greeter {\n"
        "    @Override\n"
        "    public String toString() {\n"
        "        return \"Greeter\";\n"
        "    }\n"
        "\n"
        "    public static void main(String[] args)\n"
        "    {\n"
        "        System.out.println(new Greeter());\n"
        "    }\n"
        "}\n"
    )
    names = [c.name for c in by_type(parse_to_chunks(code, language_hint="java"), ChunkType.FUNCTION)]
    assert names == ["toString", "main"]


def test_long_bodies_parse_in_linear_time():
    kotlin = "fun main() {\n" + "    println(x)\n" * 2000 + "}\n"
    js = "function main() {\n" + "  console.log(x)\n" * 2000 + "}\n"

    start = time.perf_counter()
    kotlin_chunks = parse_to_chunks(kotlin)
    js_chunks = parse_to_chunks(js, language_hint="js")
    elapsed = time.perf_counter() - start

    assert [c.name for c in by_type(kotlin_chunks, ChunkType.FUNCTION)] == ["main"]
    assert [c.name for c in by_type(js_chunks, ChunkType.FUNCTION)] == ["main"]
    assert elapsed < 2.0
