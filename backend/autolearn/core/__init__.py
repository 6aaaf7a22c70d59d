"""Core functionality for autolearn."""

from .models import (
    Category,
    ChangeType,
    ChunkType,
    ClassificationResult,
    CodeChunk,
    CodeDifference,
    RecordSource,
)
from .parsing import (
    Parser,
    StructuralParser,
    detect_language,
    extract_text_content,
    extract_theme_properties,
    language_for_file,
    parse_to_chunks,
    resolve_language,
)
from .classifier import (
    BackendClassifier,
    Classifier,
    TextClassifier,
    make_classifier,
)

__all__ = [
    "Category",
    "ChangeType",
    "ChunkType",
    "ClassificationResult",
    "CodeChunk",
    "CodeDifference",
    "RecordSource",
    "Parser",
    "StructuralParser",
    "detect_language",
    "extract_text_content",
    "extract_theme_properties",
    "language_for_file",
    "parse_to_chunks",
    "resolve_language",
    "BackendClassifier",
    "Classifier",
    "TextClassifier",
    "make_classifier",
]
