"""Rule-based text/code classification with confidence scoring."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple

from ..exceptions import BackendUnavailableError
from .models import Category, ClassificationResult

if TYPE_CHECKING:
    from ..registry import ClassificationModelDescriptor, ModelRegistry

logger = logging.getLogger(__name__)

BackendFn = Callable[[str, Optional[str]], Tuple[Any, float]]
ModelLoader = Callable[["ClassificationModelDescriptor", Dict[str, Any]], BackendFn]

# Keyword statements only count at the start of the text; declarations,
# brackets and tags count on any line.
_CODE_PATTERNS = [
    re.compile(r"^\s*(?:fun|function|def|class|interface|enum|struct|trait)\s+", re.I | re.M),
    re.compile(r"^\s*\{", re.M),
    re.compile(r"^\s*\[", re.M),
    re.compile(r"^\s*import\s+", re.I),
    re.compile(r"^\s*package\s+", re.I),
    re.compile(r"^\s*(?:const|let|var|val)\s+", re.I),
    re.compile(r"^\s*return\s+", re.I),
    re.compile(r"^\s*(?:if|for|while)(?:\s*\(|\s+)", re.I),
    re.compile(r"^\s*(?:switch|when)\s*\(", re.I),
    re.compile(r"```[\s\S]*?```"),
    re.compile(r"^\s*<[^>]+>", re.M),
]

_API_PATTERNS = [
    re.compile(r"\.[a-zA-Z_][a-zA-Z0-9_]*\s*\("),
    re.compile(r"\bapis?\b", re.I),
    re.compile(r"https?://", re.I),
    re.compile(r"\b(?:fetch|request|response|axios|http)", re.I),
    re.compile(r"\.[a-zA-Z_][a-zA-Z0-9_]*\s*=(?!=)"),
    re.compile(r"\bnew\s+[A-Z][a-zA-Z0-9_]*\s*\("),
    re.compile(r"@[A-Z][a-zA-Z0-9_]*"),
]

_DIFF_FORMAT = re.compile(r"^-\s+.*\n\+\s+.*", re.M)

_FIX_PATTERNS = [
    re.compile(r"fix|bug|error", re.I),
    re.compile(r"patch|correct", re.I),
    re.compile(r"resolve|solve", re.I),
    re.compile(r"issue|problem", re.I),
    _DIFF_FORMAT,
    re.compile(r"before:|after:|old:|new:", re.I),
    re.compile(r"changed|updated", re.I),
]

_FEATURE_FUNCTIONS = re.compile(r"\bfun\s+|\bfunction\s+|\bdef\s+", re.I)
_FEATURE_CLASSES = re.compile(r"\bclass\s+|\binterface\s+", re.I)
_FEATURE_IMPORTS = re.compile(r"^\s*import\s+", re.M)
_FEATURE_API_CALLS = re.compile(r"\.[a-zA-Z_][a-zA-Z0-9_]*\s*\(")
_FEATURE_COMMENTS = re.compile(r"//|#|/\*|<!--")

BASELINE_CONFIDENCE = 0.5


def is_code_snippet(text: str) -> bool:
    return any(p.search(text) for p in _CODE_PATTERNS)


def is_api_usage(text: str) -> bool:
    """API-shaped text that is not already a full code snippet."""
    return any(p.search(text) for p in _API_PATTERNS) and not is_code_snippet(text)


def is_fix_patch(text: str, context: Optional[str] = None) -> bool:
    if any(p.search(text) for p in _FIX_PATTERNS):
        return True
    return bool(context) and any(p.search(context) for p in _FIX_PATTERNS)


def extract_features(text: str) -> Dict[str, Any]:
    """Structural features used to derive confidence, never the category."""
    return {
        "has_functions": bool(_FEATURE_FUNCTIONS.search(text)),
        "has_classes": bool(_FEATURE_CLASSES.search(text)),
        "has_imports": bool(_FEATURE_IMPORTS.search(text)),
        "has_api_calls": bool(_FEATURE_API_CALLS.search(text)),
        "has_comments": bool(_FEATURE_COMMENTS.search(text)),
        "line_count": len(text.splitlines()),
        "has_diff_format": bool(_DIFF_FORMAT.search(text)),
    }


def confidence_for(category: Category, features: Dict[str, Any]) -> float:
    if category == Category.CODE_SNIPPET:
        if features["has_functions"] or features["has_classes"]:
            return 0.9
        if features["has_imports"]:
            return 0.7
        return BASELINE_CONFIDENCE
    if category == Category.API_USAGE:
        return 0.8 if features["has_api_calls"] else 0.6
    if category == Category.FIX_PATCH:
        return 0.9 if features["has_diff_format"] else 0.7
    return 0.6


# -----------------------------------------------------------------------------
# Interfaces
# -----------------------------------------------------------------------------

class Classifier:
    """Abstract base class for text classification."""

    def classify_with_confidence(self, text: str, context: Optional[str] = None) -> ClassificationResult:
        """Classify text, reporting how sure the classifier is."""
        raise NotImplementedError

    def classify(self, text: str, context: Optional[str] = None) -> Category:
        """Classify text into a single category."""
        return self.classify_with_confidence(text, context).category


class TextClassifier(Classifier):
    """Deterministic classifier: the first matching rule group decides the category.

    Order is code snippet, API usage, fix/patch, then the metadata default.
    """

    def classify(self, text: str, context: Optional[str] = None) -> Category:
        normalized = text.strip()
        if is_code_snippet(normalized):
            return Category.CODE_SNIPPET
        if is_api_usage(normalized):
            return Category.API_USAGE
        if is_fix_patch(normalized, context):
            return Category.FIX_PATCH
        return Category.METADATA_TRANSFORMATION

    def classify_with_confidence(self, text: str, context: Optional[str] = None) -> ClassificationResult:
        category = self.classify(text, context)
        return ClassificationResult(category, confidence_for(category, extract_features(text)))

    def extract_features(self, text: str) -> Dict[str, Any]:
        return extract_features(text)


class BackendClassifier(Classifier):
    """Classifier backed by an externally loaded model.

    Backend errors and unknown labels fall back to the rule-based result so the
    caller never fails because of the model.
    """

    def __init__(self, backend: BackendFn, model_id: str, fallback: Optional[Classifier] = None) -> None:
        self.backend = backend
        self.model_id = model_id
        self.fallback = fallback or TextClassifier()

    def classify_with_confidence(self, text: str, context: Optional[str] = None) -> ClassificationResult:
        try:
            label, confidence = self.backend(text, context)
            category = label if isinstance(label, Category) else Category(str(label).lower())
            return ClassificationResult(category, min(max(float(confidence), 0.0), 1.0))
        except Exception as e:
            logger.warning(f"Backend {self.model_id!r} failed, using rule-based result: {e}")
            return self.fallback.classify_with_confidence(text, context)


def _load_backend(registry: "ModelRegistry", loader: ModelLoader, fallback: Classifier) -> Classifier:
    selected = registry.get_selected()
    if selected is None:
        raise BackendUnavailableError("no classification model selected")

    paths = registry.resolve_backend_paths(selected.id)
    if paths is None:
        raise BackendUnavailableError(f"model files for {selected.id!r} are missing")

    try:
        backend = loader(selected, paths)
    except Exception as e:
        registry.mark_ready(selected.id, False)
        raise BackendUnavailableError(f"failed to initialize {selected.id!r}: {e}") from e

    registry.mark_ready(selected.id, True)
    logger.info(f"Loaded classification backend {selected.id!r} ({selected.backend_type.value})")
    return BackendClassifier(backend, selected.id, fallback=fallback)


def make_classifier(
    cfg: Dict,
    registry: Optional["ModelRegistry"] = None,
    loader: Optional[ModelLoader] = None,
) -> Classifier:
    """Create classifier from config.

    Args:
        cfg: Configuration dictionary
        registry: Model registry used when ``classifier.backend`` is "registry"
        loader: External callable turning a descriptor and its files into a backend

    Returns:
        Classifier instance; the rule-based one whenever the backend is unavailable

    Raises:
        ValueError: If the configured backend is unknown
    """
    backend = str(cfg.get("classifier", {}).get("backend", "rule_based")).strip().lower()
    rules = TextClassifier()
    if backend == "rule_based":
        return rules
    if backend != "registry":
        raise ValueError(f"classifier.backend is invalid: {backend!r}")

    if registry is None or loader is None:
        logger.info("No model registry or loader supplied, using rule-based classifier")
        return rules

    try:
        return _load_backend(registry, loader, rules)
    except BackendUnavailableError as e:
        logger.warning(f"Classification backend unavailable, using rule-based classifier: {e}")
        return rules
