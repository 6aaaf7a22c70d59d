"""Structural decomposition of source text into named, typed chunks.

Extraction is pattern based, not a grammar-correct parse. Each language family
has its own set of extractors; their results may overlap (a class chunk and the
method chunks inside it are both emitted).
"""

from __future__ import annotations

import logging
import os
import re
from typing import Callable, Dict, List, Optional

from .models import ChunkType, CodeChunk

logger = logging.getLogger(__name__)

# Language families understood by the parser
CURLY_BRACE = "curly_brace"
ECMASCRIPT = "ecmascript"
PYTHON = "python"
MARKUP = "markup"
STYLESHEET = "stylesheet"
STRUCTURED_DATA = "structured_data"
GENERIC = "generic"

LANGUAGE_FAMILIES: Dict[str, str] = {
    "kotlin": CURLY_BRACE,
    "kt": CURLY_BRACE,
    "kts": CURLY_BRACE,
    "java": CURLY_BRACE,
    "scala": CURLY_BRACE,
    "swift": CURLY_BRACE,
    "dart": CURLY_BRACE,
    "c": CURLY_BRACE,
    "cpp": CURLY_BRACE,
    "c_sharp": CURLY_BRACE,
    "csharp": CURLY_BRACE,
    "javascript": ECMASCRIPT,
    "typescript": ECMASCRIPT,
    "js": ECMASCRIPT,
    "ts": ECMASCRIPT,
    "jsx": ECMASCRIPT,
    "tsx": ECMASCRIPT,
    "python": PYTHON,
    "py": PYTHON,
    "xml": MARKUP,
    "html": MARKUP,
    "htm": MARKUP,
    "css": STYLESHEET,
    "scss": STYLESHEET,
    "less": STYLESHEET,
    "json": STRUCTURED_DATA,
}

EXT_TO_LANG = {
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".java": "java",
    ".scala": "scala",
    ".swift": "swift",
    ".dart": "dart",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".hpp": "cpp",
    ".cs": "c_sharp",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    ".xml": "xml",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    ".scss": "scss",
    ".less": "less",
    ".json": "json",
}

_CONTROL_KEYWORDS = {
    "if", "for", "while", "switch", "when", "catch", "synchronized",
    "return", "else", "do", "try", "finally", "foreach", "using", "lock",
}

_NON_FUNCTION_PREFIXES = {"class", "interface", "enum", "object", "new", "return", "else", "throw"}

_KOTLIN_FUN = re.compile(r"\bfun\s+\w+")
_BRACED_CLASS = re.compile(r"\b(?:class|interface)\s+\w+[^\n]*\{")
_PY_BLOCK_HEADER = re.compile(r"^[ \t]*(?:class|def)[ \t]+\w+[^\n{]*:[ \t]*$", re.MULTILINE)

# Curly-brace family. Header tails span at most a few lines.
_CURLY_CLASS = re.compile(
    r"\b(?:enum\s+class|class|interface|enum|object)\s+(\w+)"
    r"(?:[^{};\n]*\n(?![ \t]*(?:fun|class|interface|val|var)\b|[ \t]*\n)){0,6}[^{};\n]*\{"
)
_CURLY_FUNCTION = re.compile(
    r"(?:^|(?<=[{;]))[ \t]*"
    r"(?:@\w+(?:\([^)\n]*\))?\s+)*"
    r"(?:(?:public|private|protected|internal|override|open|abstract|final|static|suspend|inline|async)\s+)*"
    r"(?:(?:fun|function)\s+(?:<[^<>\n]*>\s*)?)?"
    r"(?:(\w+(?:<[^<>\n]*>)?(?:\[\])?)\s+)?(\w+)\s*\([^)]*\)"
    r"[^{};=\n]*(?:\n[ \t]*)?\{",
    re.MULTILINE,
)
_CURLY_OBJECT = re.compile(r"\b(?:object|val|var)\s+(\w+)[ \t]*(?:[:=][^;\n]*)?")

# ECMAScript family
_JS_CLASS = re.compile(r"\bclass\s+(\w+)[^{};\n]*(?:\n[^{};\n]*){0,3}\{")
_JS_FUNCTION = re.compile(
    r"\b(?:function|const|let|var)\s+(\w+)\s*[=(]"
    r"(?:[^{};\n]*\n(?![ \t]*(?:const|let|var|function|class)\b)){0,6}[^{};\n]*\{"
)
_JS_OBJECT = re.compile(r"\b(?:const|let|var)\s+(\w+)\s*=\s*\{")

# Python family
_PY_BLOCK = re.compile(
    r"^([ \t]*)(?:async[ \t]+)?(class|def)[ \t]+(\w+)[ \t]*(?:\([^)]*\))?[^:\n]*:",
    re.MULTILINE,
)
_PY_ASSIGNMENT = re.compile(r"^(\w+)\s*(?::\s*[^=\n]+)?=(?!=)\s*(.+)$")

_XML_ELEMENT = re.compile(r"<(\w+)([^>]*)>([^<]*)</\1>", re.DOTALL)
_XML_ATTRIBUTE = re.compile(r"([\w:.-]+)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')")
_CSS_RULE = re.compile(r"([^{}]+)\{([^{}]*)\}")
_JSON_PAIR = re.compile(r"\"([\w.-]+)\"\s*:\s*\"([^\"]*)\"")
_GENERIC_ASSIGNMENT = re.compile(r"(\w+)\s*[:=]\s*([^;\n]+)")

_PROPERTY = re.compile(
    r"\b(?:val|var|let|const)\s+(\w+)\s*(?::\s*([^=;\n]+?)\s*)?(?:=\s*([^;\n]+))?(?=[;\n]|$)"
)
_OBJECT_PROPERTY = re.compile(r"(\w+)\s*[:=]\s*(\{[^{}]*\}|[^,}\n]+)")

_HEX_COLOR = re.compile(r"#[0-9A-Fa-f]{3,8}")
_RGB_COLOR = re.compile(r"rgba?\([^)]+\)")
_THEME_KEYS = ("color", "background", "theme", "style")
_STRING_LITERAL = re.compile(r"\"([^\"]+)\"|'([^']+)'")


def language_for_file(filename: str) -> Optional[str]:
    """Get language name from file extension."""
    _, ext = os.path.splitext(filename)
    return EXT_TO_LANG.get(ext.lower())


def resolve_language(hint: str) -> str:
    """Map a language name or alias to its parser family."""
    key = hint.strip().lower()
    if key in LANGUAGE_FAMILIES:
        return LANGUAGE_FAMILIES[key]
    if key in _EXTRACTORS:
        return key
    return GENERIC


def detect_language(code: str) -> str:
    """Guess the language family from keyword sniffing."""
    python_headers = _PY_BLOCK_HEADER.search(code) is not None
    if _KOTLIN_FUN.search(code) or (
        not python_headers
        and (("class " in code and ":" in code) or _BRACED_CLASS.search(code))
    ):
        return CURLY_BRACE
    if "function " in code or "const " in code or "let " in code:
        return ECMASCRIPT
    if "def " in code or ("import " in code and "package" not in code) or python_headers:
        return PYTHON
    if "<?xml" in code or "<html" in code or ("<" in code and ">" in code):
        return MARKUP
    if "{" in code and ":" in code and ";" in code and "function" not in code:
        return STYLESHEET
    stripped = code.strip()
    if stripped.startswith("{") or stripped.startswith("["):
        return STRUCTURED_DATA
    return GENERIC


# -----------------------------------------------------------------------------
# Block scanning
# -----------------------------------------------------------------------------

def find_block_end(code: str, open_index: int) -> int:
    """Return the index just past the brace closing the one at ``open_index``.

    Braces are counted by depth. Single-quoted, double-quoted and backtick
    literals are skipped; quoted ones end at a newline at the latest.
    Returns -1 when the block is never closed.
    """
    depth = 0
    quote = None
    i = open_index
    n = len(code)
    while i < n:
        ch = code[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote or (ch == "\n" and quote != "`"):
                quote = None
        elif ch in "\"'`":
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return -1


def mask_nested(text: str) -> str:
    """Blank out everything inside nested braces, keeping offsets and newlines."""
    out = []
    depth = 0
    for ch in text:
        if ch == "{":
            out.append(ch if depth == 0 else " ")
            depth += 1
        elif ch == "}":
            depth = max(depth - 1, 0)
            out.append(ch if depth == 0 else " ")
        elif depth > 0 and ch != "\n":
            out.append(" ")
        else:
            out.append(ch)
    return "".join(out)


def _extract_blocks(
    code: str,
    header: re.Pattern,
    chunk_type: ChunkType,
    name_group: int,
    property_extractor: Callable[[str], Dict[str, str]],
    skip: Optional[Callable[[re.Match], bool]] = None,
) -> List[CodeChunk]:
    """Emit one chunk per header match whose trailing ``{`` opens a closed block."""
    chunks = []
    for match in header.finditer(code):
        if skip is not None and skip(match):
            continue
        open_index = match.end() - 1
        end = find_block_end(code, open_index)
        if end < 0:
            continue
        body = code[open_index + 1:end - 1]
        chunks.append(CodeChunk(
            type=chunk_type,
            name=match.group(name_group),
            content=code[match.start():end].strip(),
            properties=property_extractor(mask_nested(body)),
        ))
    return chunks


# -----------------------------------------------------------------------------
# Property extraction
# -----------------------------------------------------------------------------

def extract_properties(body: str) -> Dict[str, str]:
    """Collect ``val|var|let|const name (:|=) value`` bindings."""
    properties = {}
    for match in _PROPERTY.finditer(body):
        value = match.group(3) if match.group(3) is not None else match.group(2)
        if value is None:
            continue
        properties[match.group(1)] = value.strip()
    return properties


def extract_object_properties(body: str) -> Dict[str, str]:
    """Collect flat ``key: value`` pairs of an object literal, unquoting values."""
    properties = {}
    for match in _OBJECT_PROPERTY.finditer(body):
        value = re.sub(r"\s+", " ", match.group(2)).strip()
        properties[match.group(1)] = value.strip("\"'")
    return properties


def extract_xml_attributes(attributes: str) -> Dict[str, str]:
    props = {}
    for match in _XML_ATTRIBUTE.finditer(attributes):
        value = match.group(2) if match.group(2) is not None else match.group(3)
        props[match.group(1)] = value
    return props


def extract_css_properties(css: str) -> Dict[str, str]:
    properties = {}
    for declaration in css.split(";"):
        prop, sep, value = declaration.partition(":")
        if not sep or not prop.strip() or not value.strip():
            continue
        properties[prop.strip()] = value.strip()
    return properties


def _python_body_properties(body_lines: List[str]) -> Dict[str, str]:
    """First-level assignments of an indented block."""
    indents = [len(line) - len(line.lstrip()) for line in body_lines if line.strip()]
    if not indents:
        return {}
    base = min(indents)
    properties = {}
    for line in body_lines:
        if not line.strip() or len(line) - len(line.lstrip()) != base:
            continue
        match = _PY_ASSIGNMENT.match(line.strip())
        if match:
            properties[match.group(1)] = match.group(2).strip()
    return properties


# -----------------------------------------------------------------------------
# Per-family extractors
# -----------------------------------------------------------------------------

def _skip_non_function(code: str) -> Callable[[re.Match], bool]:
    def skip(match: re.Match) -> bool:
        name = match.group(2)
        prefix = match.group(1)
        if name in _CONTROL_KEYWORDS or name in _NON_FUNCTION_PREFIXES:
            return True
        if prefix and prefix in _NON_FUNCTION_PREFIXES | _CONTROL_KEYWORDS:
            return True
        # receiver.call(...) { } is a call with a trailing lambda
        start = match.start(2)
        return start > 0 and code[start - 1] == "."
    return skip


def parse_curly_brace(code: str) -> List[CodeChunk]:
    chunks = _extract_blocks(code, _CURLY_CLASS, ChunkType.CLASS, 1, extract_properties)
    chunks += _extract_blocks(
        code, _CURLY_FUNCTION, ChunkType.FUNCTION, 2, extract_properties,
        skip=_skip_non_function(code),
    )

    top_level = mask_nested(code)
    for match in _CURLY_OBJECT.finditer(top_level):
        chunks.append(CodeChunk(
            type=ChunkType.OBJECT,
            name=match.group(1),
            content=code[match.start():match.end()].strip(),
            properties={},
        ))
    return chunks


def parse_ecmascript(code: str) -> List[CodeChunk]:
    chunks = _extract_blocks(code, _JS_CLASS, ChunkType.CLASS, 1, extract_properties)
    chunks += _extract_blocks(code, _JS_FUNCTION, ChunkType.FUNCTION, 1, extract_properties)
    chunks += _extract_blocks(code, _JS_OBJECT, ChunkType.OBJECT, 1, extract_object_properties)
    return chunks


def parse_python(code: str) -> List[CodeChunk]:
    chunks = []
    for match in _PY_BLOCK.finditer(code):
        header_indent = len(match.group(1).expandtabs(4))
        line_end = code.find("\n", match.end())
        if line_end < 0:
            line_end = len(code)
        end = line_end
        body_lines = []
        pos = line_end
        while pos < len(code):
            next_end = code.find("\n", pos + 1)
            if next_end < 0:
                next_end = len(code)
            line = code[pos + 1:next_end]
            if line.strip():
                indent = len(line.expandtabs(4)) - len(line.expandtabs(4).lstrip())
                if indent <= header_indent:
                    break
                end = next_end
            body_lines.append(line.expandtabs(4))
            pos = next_end
        kind = ChunkType.CLASS if match.group(2) == "class" else ChunkType.FUNCTION
        chunks.append(CodeChunk(
            type=kind,
            name=match.group(3),
            content=code[match.start() + len(match.group(1)):end],
            properties=_python_body_properties(body_lines),
        ))
    chunks.sort(key=lambda c: 0 if c.type == ChunkType.CLASS else 1)
    return chunks


def parse_markup(code: str) -> List[CodeChunk]:
    return [
        CodeChunk(
            type=ChunkType.OBJECT,
            name=match.group(1),
            content=match.group(0),
            properties=extract_xml_attributes(match.group(2)),
        )
        for match in _XML_ELEMENT.finditer(code)
    ]


def parse_stylesheet(code: str) -> List[CodeChunk]:
    chunks = []
    for match in _CSS_RULE.finditer(code):
        selector = match.group(1).strip()
        if not selector or not match.group(2).strip():
            continue
        chunks.append(CodeChunk(
            type=ChunkType.OBJECT,
            name=selector,
            content=match.group(0).strip(),
            properties=extract_css_properties(match.group(2)),
        ))
    return chunks


def parse_structured_data(code: str) -> List[CodeChunk]:
    properties = {m.group(1): m.group(2) for m in _JSON_PAIR.finditer(code)}
    if not properties:
        return []
    return [CodeChunk(type=ChunkType.OBJECT, name="json_object", content=code, properties=properties)]


def parse_generic(code: str) -> List[CodeChunk]:
    properties = {m.group(1): m.group(2).strip() for m in _GENERIC_ASSIGNMENT.finditer(code)}
    if not properties:
        return []
    return [CodeChunk(type=ChunkType.OBJECT, name="generic_object", content=code, properties=properties)]


_EXTRACTORS: Dict[str, Callable[[str], List[CodeChunk]]] = {
    CURLY_BRACE: parse_curly_brace,
    ECMASCRIPT: parse_ecmascript,
    PYTHON: parse_python,
    MARKUP: parse_markup,
    STYLESHEET: parse_stylesheet,
    STRUCTURED_DATA: parse_structured_data,
    GENERIC: parse_generic,
}


# -----------------------------------------------------------------------------
# Derived utilities
# -----------------------------------------------------------------------------

def _looks_like_color(value: str) -> bool:
    candidate = value.strip().strip("\"'")
    return bool(_HEX_COLOR.fullmatch(candidate) or _RGB_COLOR.fullmatch(candidate))


def extract_theme_properties(chunks: List[CodeChunk]) -> Dict[str, str]:
    """Collect color, background, theme and style properties across chunks."""
    theme_props = {}
    for chunk in chunks:
        for key, value in chunk.properties.items():
            lowered = key.lower()
            if any(word in lowered for word in _THEME_KEYS) or _looks_like_color(value):
                theme_props[key] = value
    return theme_props


def extract_text_content(chunks: List[CodeChunk]) -> List[str]:
    """Quoted string literals longer than three characters, in chunk order."""
    texts = []
    for chunk in chunks:
        for match in _STRING_LITERAL.finditer(chunk.content):
            text = match.group(1) if match.group(1) is not None else match.group(2)
            if text and len(text) > 3:
                texts.append(text)
    return texts


# -----------------------------------------------------------------------------
# Interfaces
# -----------------------------------------------------------------------------

class Parser:
    """Abstract base class for structural parsing."""

    def parse_to_chunks(self, text: str, language_hint: Optional[str] = None) -> List[CodeChunk]:
        """Split source text into chunks.

        Args:
            text: Source text
            language_hint: Language name or alias; sniffed from the text when omitted

        Returns:
            List of CodeChunk in extraction order
        """
        raise NotImplementedError


class StructuralParser(Parser):
    """Pattern-based parser covering several language families."""

    def parse_to_chunks(self, text: str, language_hint: Optional[str] = None) -> List[CodeChunk]:
        if not text or not text.strip():
            return []

        family = resolve_language(language_hint) if language_hint else detect_language(text)
        chunks = _EXTRACTORS[family](text)
        logger.debug(f"Parsed {len(chunks)} chunks as {family} (hint={language_hint!r})")
        return chunks


def parse_to_chunks(text: str, language_hint: Optional[str] = None) -> List[CodeChunk]:
    """Parse text into chunks (Functional Wrapper)."""
    return StructuralParser().parse_to_chunks(text, language_hint=language_hint)
