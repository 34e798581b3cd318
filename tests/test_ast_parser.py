"""
Unit tests for the tree-sitter declaration extraction module.

Tests gh_agent.utils.ast_parser language detection and entity extraction.
"""

import pytest

from gh_agent.utils.ast_parser import (
    extract_declarations,
    extract_entities,
    file_entity,
    get_language_for_file,
    get_parser,
    resolve_language,
)


SAMPLE = '''"""Module docstring."""
import os
from typing import Any

LIMIT = 10
a, b = 1, 2


@decorator
def handler(event: Any) -> None:
    return None


class Service:
    def run(self):
        pass


async def fetch():
    pass


if __name__ == "__main__":
    handler(None)
'''


class TestGetLanguageForFile:
    """Test language detection from file extensions."""

    @pytest.mark.parametrize("path,language", [
        ("src/app.py", "python"),
        ("types.pyi", "python"),
        ("web/index.js", "javascript"),
        ("web/index.ts", "typescript"),
        ("web/App.tsx", "tsx"),
        ("src/main.rs", "rust"),
        ("cmd/main.go", "go"),
        ("Upper.PY", "python"),
    ])
    def test_known_extensions(self, path, language):
        assert get_language_for_file(path) == language

    def test_unknown_extension(self):
        assert get_language_for_file("README.md") is None
        assert get_language_for_file("Makefile") is None


class TestResolveLanguage:
    def test_aliases(self):
        assert resolve_language("ts") == "typescript"
        assert resolve_language(" PY ") == "python"
        assert resolve_language("rs") == "rust"

    def test_unknown_name_passes_through(self):
        assert resolve_language("Elixir") == "elixir"


class TestExtractPythonDeclarations:
    """Test module-level declaration extraction."""

    def test_entity_order_and_types(self):
        entities = extract_declarations(SAMPLE, "python")
        assert [(e.entity_type, e.name) for e in entities] == [
            ("imports", "imports"),
            ("variable", "LIMIT"),
            ("variable", "a, b"),
            ("function", "handler"),
            ("class", "Service"),
            ("function", "fetch"),
        ]

    def test_imports_are_joined(self):
        imports = extract_declarations(SAMPLE, "python")[0]
        assert imports.content == "import os\nfrom typing import Any"
        assert (imports.start_line, imports.end_line) == (2, 3)

    def test_decorator_included(self):
        handler = next(e for e in extract_declarations(SAMPLE, "python") if e.name == "handler")
        assert handler.content.startswith("@decorator\ndef handler")
        assert handler.start_line == 9

    def test_methods_are_not_top_level(self):
        names = [e.name for e in extract_declarations(SAMPLE, "python")]
        assert "run" not in names

    def test_syntax_error_returns_none(self):
        assert extract_declarations("def broken(:\n", "python") is None

    def test_empty_source(self):
        assert extract_declarations("", "python") == []


TS_SAMPLE = '''import { a } from "./a";
import b from "b";

export const LIMIT = 5;
const handler = (x: number) => x + 1;
export function run(): void {}
export class Service {}
interface Options { debug: boolean }
type Id = string;
enum Color { Red }
export { handler };
console.log(LIMIT);
'''


class TestExtractEcmascriptDeclarations:
    """Test JS/TS top-level declaration extraction."""

    def test_typescript_entity_order_and_types(self):
        entities = extract_declarations(TS_SAMPLE, "typescript")
        assert [(e.entity_type, e.name) for e in entities] == [
            ("imports", "imports"),
            ("variable", "LIMIT"),
            ("function", "handler"),
            ("function", "run"),
            ("class", "Service"),
            ("interface", "Options"),
            ("type", "Id"),
            ("enum", "Color"),
            ("export", "exports"),
        ]

    def test_export_keyword_is_part_of_entity(self):
        run = next(e for e in extract_declarations(TS_SAMPLE, "typescript") if e.name == "run")
        assert run.content == "export function run(): void {}"
        assert (run.start_line, run.end_line) == (6, 6)

    def test_imports_are_joined(self):
        imports = extract_declarations(TS_SAMPLE, "typescript")[0]
        assert imports.content == 'import { a } from "./a";\nimport b from "b";'
        assert (imports.start_line, imports.end_line) == (1, 2)

    def test_javascript_destructuring_and_generators(self):
        source = "const { a, b: c } = load();\nfunction* ids() {}\nlet x = 1, y = 2;\n"
        entities = extract_declarations(source, "javascript")
        assert [(e.entity_type, e.name) for e in entities] == [
            ("variable", "a, c"),
            ("function", "ids"),
            ("variable", "x, y"),
        ]

    def test_nested_imports_are_not_top_level(self):
        source = "def load():\n    import json\n    return json\n"
        entities = extract_declarations(source, "python")
        assert [(e.entity_type, e.name) for e in entities] == [("function", "load")]

    def test_tsx_component(self):
        entities = extract_declarations("export const App = () => <div />;\n", "tsx")
        assert [(e.entity_type, e.name) for e in entities] == [("function", "App")]

    def test_syntax_error_returns_none(self):
        assert extract_declarations("function (\n", "javascript") is None


class TestGetParser:
    def test_unsupported_language(self):
        with pytest.raises(ValueError, match="Unsupported language"):
            get_parser("rust")

    def test_parses_python(self):
        tree = get_parser("python").parse(b"x = 1\n")
        assert tree.root_node.type == "module"


class TestExtractEntities:
    def test_python_file(self):
        entities = extract_entities("pkg/mod.py", "X = 1\n")
        assert [(e.entity_type, e.name) for e in entities] == [("variable", "X")]

    def test_typescript_file_is_split(self):
        entities = extract_entities("web/app.ts", "let a = 1;\nlet b = 2;\n")
        assert [(e.entity_type, e.name) for e in entities] == [("variable", "a"), ("variable", "b")]

    def test_other_language_is_single_file_entity(self):
        [entity] = extract_entities("src/main.rs", "fn a() {}\nfn b() {}\n")
        assert entity.entity_type == "file"
        assert entity.name == "main.rs"
        assert entity.end_line == 2

    def test_invalid_source_falls_back(self):
        [entity] = extract_entities("bad.py", "def (:\n")
        assert entity.entity_type == "file"

    def test_file_entity_of_empty_content(self):
        entity = file_entity("empty.txt", "")
        assert (entity.start_line, entity.end_line) == (1, 1)
