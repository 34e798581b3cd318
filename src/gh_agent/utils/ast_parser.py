"""Top-level declaration extraction with tree-sitter, used by the built-in semantic diff."""

from pathlib import Path

import tree_sitter_javascript as tsjs
import tree_sitter_python as tspython
import tree_sitter_typescript as tsts
from tree_sitter import Language, Node, Parser, Query, QueryCursor

from gh_agent.models.change_models import CodeEntity

# Initialize language objects
PY_LANGUAGE = Language(tspython.language())
JS_LANGUAGE = Language(tsjs.language())
TS_LANGUAGE = Language(tsts.language_typescript())
TSX_LANGUAGE = Language(tsts.language_tsx())

PARSED_LANGUAGES: dict[str, Language] = {
    "python": PY_LANGUAGE,
    "javascript": JS_LANGUAGE,
    "typescript": TS_LANGUAGE,
    "tsx": TSX_LANGUAGE,
}

EXTENSION_LANGUAGES: dict[str, str] = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".rs": "rust",
    ".go": "go",
    ".java": "java",
    ".kt": "kotlin",
    ".rb": "ruby",
    ".php": "php",
    ".cs": "csharp",
    ".c": "c",
    ".h": "c",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".swift": "swift",
    ".scala": "scala",
    ".lua": "lua",
    ".sh": "bash",
    ".css": "css",
    ".html": "html",
}

LANGUAGE_ALIASES: dict[str, str] = {
    "py": "python",
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "rs": "rust",
    "golang": "go",
    "rb": "ruby",
    "cs": "csharp",
    "c++": "cpp",
    "kt": "kotlin",
    "sh": "bash",
}

IMPORT_QUERIES: dict[str, str] = {
    "python": """
        [
            (import_statement)
            (import_from_statement)
            (future_import_statement)
        ] @import
    """,
    "ecmascript": """
        (import_statement) @import
    """,
}

_ROOT_TYPES = ("module", "program")

_FUNCTION_VALUES = ("arrow_function", "function_expression", "function", "generator_function")

# Assignment targets kept whole instead of split into identifiers
_OPAQUE_TARGETS = ("attribute", "subscript", "member_expression", "subscript_expression")

_JS_DECLARATION_TYPES: dict[str, str] = {
    "function_declaration": "function",
    "generator_function_declaration": "function",
    "class_declaration": "class",
    "abstract_class_declaration": "class",
    "interface_declaration": "interface",
    "type_alias_declaration": "type",
    "enum_declaration": "enum",
}


def get_language_for_file(file_path: str) -> str | None:
    """Map a file extension to a language name, or None if unknown."""
    return EXTENSION_LANGUAGES.get(Path(file_path).suffix.lower())


def resolve_language(name: str) -> str:
    """Normalize a user-supplied language name ("ts" -> "typescript")."""
    normalized = name.strip().lower()
    return LANGUAGE_ALIASES.get(normalized, normalized)


def get_parser(language: str) -> Parser:
    """Return a tree-sitter Parser for one of PARSED_LANGUAGES.

    Raises:
        ValueError: If no grammar is bundled for the language.
    """
    if language not in PARSED_LANGUAGES:
        raise ValueError(f"Unsupported language: {language}")
    parser = Parser()
    parser.language = PARSED_LANGUAGES[language]
    return parser


def _text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def _entity(entity_type: str, name: str, node: Node) -> CodeEntity:
    return CodeEntity(
        entity_type=entity_type,
        name=name,
        content=_text(node),
        start_line=node.start_point[0] + 1,
        end_line=node.end_point[0] + 1,
    )


def _top_level_imports(root: Node, language: str) -> list[Node]:
    query_key = "python" if language == "python" else "ecmascript"
    query = Query(PARSED_LANGUAGES[language], IMPORT_QUERIES[query_key])
    cursor = QueryCursor(query)

    nodes = []
    for match in cursor.matches(root):
        # match is a tuple: (pattern_index, captures_dict)
        _, captures = match
        for node in captures.get("import", []):
            if node.parent is not None and node.parent.type in _ROOT_TYPES:
                nodes.append(node)
    return sorted(nodes, key=lambda node: node.start_byte)


def _pattern_names(node: Node | None) -> list[str]:
    """Identifiers bound by an assignment target or destructuring pattern."""
    if node is None:
        return []
    if node.type in ("identifier", "shorthand_property_identifier_pattern", *_OPAQUE_TARGETS):
        return [_text(node)]
    names = []
    for child in node.named_children:
        if child.type == "pair_pattern":
            names.extend(_pattern_names(child.child_by_field_name("value")))
        else:
            names.extend(_pattern_names(child))
    return names


def _python_assignment_names(statement: Node) -> list[str]:
    names: list[str] = []
    for expression in statement.named_children:
        node: Node | None = expression
        # a = b = 1 nests the second assignment on the right-hand side
        while node is not None and node.type in ("assignment", "augmented_assignment"):
            names.extend(_pattern_names(node.child_by_field_name("left")))
            node = node.child_by_field_name("right")
    return names


def _python_declaration(node: Node) -> CodeEntity | None:
    target = node
    if node.type == "decorated_definition":
        # The entity spans the decorators; its kind comes from the definition
        target = node.child_by_field_name("definition") or node
    if target.type == "function_definition":
        return _entity("function", _text(target.child_by_field_name("name")), node)
    if target.type == "class_definition":
        return _entity("class", _text(target.child_by_field_name("name")), node)
    if node.type == "expression_statement":
        names = _python_assignment_names(node)
        if names:
            return _entity("variable", ", ".join(names), node)
    return None


def _ecmascript_declaration(node: Node, span: Node) -> CodeEntity | None:
    """Entity for a JS/TS declaration; `span` is the export statement when exported."""
    entity_type = _JS_DECLARATION_TYPES.get(node.type)
    if entity_type is not None:
        return _entity(entity_type, _text(node.child_by_field_name("name")), span)

    if node.type in ("lexical_declaration", "variable_declaration"):
        declarators = [c for c in node.named_children if c.type == "variable_declarator"]
        names = []
        for declarator in declarators:
            names.extend(_pattern_names(declarator.child_by_field_name("name")))
        if not names:
            return None
        value = declarators[0].child_by_field_name("value") if len(declarators) == 1 else None
        is_function = value is not None and value.type in _FUNCTION_VALUES
        return _entity("function" if is_function else "variable", ", ".join(names), span)

    if node.type == "export_statement":
        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            return _ecmascript_declaration(declaration, node)
        if node.child_by_field_name("value") is not None:
            return _entity("variable", "default", node)
        return _entity("export", "exports", node)

    return None


def extract_declarations(content: str, language: str) -> list[CodeEntity] | None:
    """Extract top-level imports, functions, classes and bindings.

    All top-level imports form one "imports" entity placed first, so the
    removal of an import groups across files. Decorators and `export` are
    part of the entity they annotate. Returns None when the source has
    syntax errors, so callers can fall back to a whole-file entity.
    """
    tree = get_parser(language).parse(content.encode("utf-8"))
    root = tree.root_node
    if root.has_error:
        return None

    entities: list[CodeEntity] = []
    imports = _top_level_imports(root, language)
    if imports:
        entities.append(CodeEntity(
            entity_type="imports",
            name="imports",
            content="\n".join(_text(node) for node in imports),
            start_line=imports[0].start_point[0] + 1,
            end_line=imports[-1].end_point[0] + 1,
        ))

    import_starts = {node.start_byte for node in imports}
    for node in root.named_children:
        if node.start_byte in import_starts:
            continue
        if language == "python":
            entity = _python_declaration(node)
        else:
            entity = _ecmascript_declaration(node, node)
        if entity is not None:
            entities.append(entity)

    return entities


def file_entity(file_path: str, content: str) -> CodeEntity:
    """Whole-file entity used when a file cannot be split into declarations."""
    return CodeEntity(
        entity_type="file",
        name=Path(file_path).name,
        content=content,
        start_line=1,
        end_line=max(1, len(content.splitlines())),
    )


def extract_entities(file_path: str, content: str) -> list[CodeEntity]:
    """Split a file into entities; never raises.

    Python, JavaScript and TypeScript sources are split into top-level
    declarations; every other file, and source that does not parse, is
    one "file" entity.
    """
    language = get_language_for_file(file_path)
    if language in PARSED_LANGUAGES:
        entities = extract_declarations(content, language)
        if entities is not None:
            return entities
    return [file_entity(file_path, content)]
