import pytest

from autolearn.core import BackendClassifier, Category, TextClassifier, make_classifier
from autolearn.core.classifier import extract_features
from autolearn.registry import ClassificationModelDescriptor, BackendType


@pytest.fixture
def classifier():
    return TextClassifier()


@pytest.mark.parametrize(
    "text",
    [
        "fun main() {}",
        "    fun greet(name: String) = println(name)",
        "Here is the code:\nfun add(a: Int, b: Int) = a + b\nhope it helps",
    ],
)
def test_kotlin_function_is_code_snippet(classifier, text):
    result = classifier.classify_with_confidence(text)
    assert result.category == Category.CODE_SNIPPET
    assert result.confidence >= 0.7


def test_api_call_is_api_usage(classifier):
    result = classifier.classify_with_confidence('response.get("/api")')
    assert result.category == Category.API_USAGE
    assert result.confidence == 0.8


def test_fix_with_diff_is_fix_patch(classifier):
    result = classifier.classify_with_confidence("fix: corrected null check\n- if (x)\n+ if (x != null)")
    assert result.category == Category.FIX_PATCH
    assert result.confidence == 0.9


def test_fix_vocabulary_in_context_only(classifier):
    assert classifier.classify("null check on user", context="please fix this bug") == Category.FIX_PATCH


def test_plain_text_defaults_to_metadata_transformation(classifier):
    result = classifier.classify_with_confidence("The weather is nice today")
    assert result.category == Category.METADATA_TRANSFORMATION
    assert result.confidence == 0.6


def test_code_snippet_wins_over_api_usage(classifier):
    text = "import requests\nresponse = requests.get(url)"
    assert classifier.classify(text) == Category.CODE_SNIPPET


def test_api_usage_wins_over_fix_vocabulary(classifier):
    assert classifier.classify("client.fetchError()") == Category.API_USAGE


@pytest.mark.parametrize(
    "text, expected",
    [
        ("class Foo:\n    pass", 0.9),
        ("import os", 0.7),
        ("return value", 0.5),
        ("new Date()", 0.6),
        ("user.load()", 0.8),
        ("https://example.com/docs", 0.6),
        ("patch applied", 0.7),
    ],
)
def test_confidence_table(classifier, text, expected):
    assert classifier.classify_with_confidence(text).confidence == expected


@pytest.mark.parametrize(
    "text",
    ["", "   ", "x", "fun a() {}", "hello.world()", "bug", "<div>", "```\ncode\n```", "- a\n+ b"],
)
def test_confidence_bounds(classifier, text):
    assert 0.5 <= classifier.classify_with_confidence(text).confidence <= 0.9


def test_extract_features(classifier):
    features = classifier.extract_features("import os\n# comment\ndef run():\n    os.getcwd()\n")
    assert features["has_functions"] is True
    assert features["has_classes"] is False
    assert features["has_imports"] is True
    assert features["has_api_calls"] is True
    assert features["has_comments"] is True
    assert features["line_count"] == 4
    assert features["has_diff_format"] is False
    assert extract_features("- old\n+ new")["has_diff_format"] is True


def test_make_classifier_rule_based_by_default(cfg):
    assert isinstance(make_classifier(cfg), TextClassifier)


def test_make_classifier_rejects_unknown_backend(cfg):
    cfg["classifier"]["backend"] = "magic"
    with pytest.raises(ValueError):
        make_classifier(cfg)


def test_registry_backend_without_selection_falls_back(cfg, registry):
    cfg["classifier"]["backend"] = "registry"
    classifier = make_classifier(cfg, registry=registry, loader=lambda d, p: None)
    assert isinstance(classifier, TextClassifier)


def test_registry_backend_without_file_falls_back(cfg, registry):
    cfg["classifier"]["backend"] = "registry"
    registry.set_selected("mediapipe_bert_en")
    classifier = make_classifier(cfg, registry=registry, loader=lambda d, p: None)
    assert isinstance(classifier, TextClassifier)
    assert registry.is_ready() is False


def test_registry_backend_loads_and_marks_ready(cfg, registry, models_dir):
    cfg["classifier"]["backend"] = "registry"
    (models_dir / "mediapipe_bert_en.tflite").write_bytes(b"model")
    registry.set_selected("mediapipe_bert_en")
    seen = {}

    def loader(descriptor, paths):
        seen["id"] = descriptor.id
        seen["paths"] = paths
        return lambda text, context: ("api_usage", 0.95)

    classifier = make_classifier(cfg, registry=registry, loader=loader)
    assert isinstance(classifier, BackendClassifier)
    assert seen["id"] == "mediapipe_bert_en"
    assert seen["paths"]["model"] == models_dir / "mediapipe_bert_en.tflite"
    assert registry.is_ready() is True
    assert classifier.classify("anything") == Category.API_USAGE


def test_registry_backend_loader_failure_clears_ready(cfg, registry, models_dir):
    cfg["classifier"]["backend"] = "registry"
    (models_dir / "mediapipe_bert_en.tflite").write_bytes(b"model")
    registry.set_selected("mediapipe_bert_en")
    registry.mark_ready("mediapipe_bert_en")

    def loader(descriptor, paths):
        raise RuntimeError("corrupt model")

    classifier = make_classifier(cfg, registry=registry, loader=loader)
    assert isinstance(classifier, TextClassifier)
    assert registry.is_ready() is False


def test_backend_classifier_falls_back_on_error():
    def backend(text, context):
        raise RuntimeError("inference failed")

    classifier = BackendClassifier(backend, "broken")
    result = classifier.classify_with_confidence("fun main() {}")
    assert result.category == Category.CODE_SNIPPET
    assert result.confidence == 0.9


def test_backend_classifier_falls_back_on_unknown_label():
    classifier = BackendClassifier(lambda text, context: ("sentiment_positive", 0.7), "odd")
    assert classifier.classify("The weather is nice today") == Category.METADATA_TRANSFORMATION


def test_backend_classifier_clamps_confidence():
    classifier = BackendClassifier(lambda text, context: (Category.FIX_PATCH, 1.7), "eager")
    assert classifier.classify_with_confidence("x").confidence == 1.0


def test_descriptor_is_immutable():
    descriptor = ClassificationModelDescriptor(id="m", display_name="M", backend_type=BackendType.CUSTOM)
    with pytest.raises(Exception):
        descriptor.id = "other"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Fixed the crash on login.\nIf the user is null we now return early", Category.FIX_PATCH),
        ("Resolve the issue with the header.\nFor example the title overlaps the logo", Category.FIX_PATCH),
        ("Update the title text.\nReturn to the home screen", Category.METADATA_TRANSFORMATION),
        ("Make the list scroll.\nWhile loading show a spinner", Category.METADATA_TRANSFORMATION),
    ],
)
def test_prose_lines_starting_with_keywords_are_not_code(classifier, text, expected):
    assert classifier.classify(text) == expected


@pytest.mark.parametrize(
    "text",
    ["if (user == null) return", "return result", "import kotlin.math.max\nval x = max(1, 2)"],
)
def test_keyword_statement_at_start_is_code(classifier, text):
    assert classifier.classify(text) == Category.CODE_SNIPPET
