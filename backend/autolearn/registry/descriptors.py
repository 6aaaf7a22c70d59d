"""Classification model descriptors and the built-in catalog."""

from __future__ import annotations

import enum
from typing import List, Optional

from pydantic import BaseModel


class BackendType(str, enum.Enum):
    MEDIAPIPE_BERT = "mediapipe_bert"
    UNIVERSAL_SENTENCE_ENCODER = "universal_sentence_encoder"
    TENSORFLOW_HUB = "tensorflow_hub"
    CODEBERT_ONNX = "codebert_onnx"
    CUSTOM = "custom"


class ClassificationModelDescriptor(BaseModel):
    id: str
    display_name: str
    description: str = ""
    backend_type: BackendType = BackendType.CUSTOM
    local_file_path: Optional[str] = None
    download_url: Optional[str] = None
    downloaded: bool = False
    built_in: bool = False

    class Config:
        frozen = True


CODEBERT_VOCAB_ID = "codebert_tokenizer_vocab"
CODEBERT_MERGES_ID = "codebert_tokenizer_merges"

_MEDIAPIPE_BASE = "https://github.com/google/mediapipe/raw/master/mediapipe/tasks/metadata/text_classifier"
_CODEBERT_BASE = "https://huggingface.co/microsoft/codebert-base/resolve/main"

BUILT_IN_MODELS: List[ClassificationModelDescriptor] = [
    ClassificationModelDescriptor(
        id="mediapipe_bert_en",
        display_name="Mediapipe BERT English",
        description="BERT-based text classifier optimized by Mediapipe for English text classification",
        backend_type=BackendType.MEDIAPIPE_BERT,
        download_url=f"{_MEDIAPIPE_BASE}/bert_text_classifier.tflite",
        built_in=True,
    ),
    ClassificationModelDescriptor(
        id="mediapipe_bert_en_lite",
        display_name="Mediapipe BERT English Lite",
        description="Lightweight BERT text classifier for faster inference",
        backend_type=BackendType.MEDIAPIPE_BERT,
        download_url=f"{_MEDIAPIPE_BASE}/bert_text_classifier_lite.tflite",
        built_in=True,
    ),
    ClassificationModelDescriptor(
        id="mediapipe_average_word_embedding",
        display_name="Mediapipe Average Word Embedding",
        description="Lightweight text classifier using average word embeddings",
        backend_type=BackendType.MEDIAPIPE_BERT,
        download_url=f"{_MEDIAPIPE_BASE}/average_word_embedding.tflite",
        built_in=True,
    ),
    ClassificationModelDescriptor(
        id="codebert_onnx",
        display_name="CodeBERT (ONNX)",
        description=(
            "Code understanding model exported to ONNX. No direct download exists; "
            "provide your own export. Needs the CodeBERT vocabulary and merges files."
        ),
        backend_type=BackendType.CODEBERT_ONNX,
        built_in=True,
    ),
    ClassificationModelDescriptor(
        id=CODEBERT_VOCAB_ID,
        display_name="CodeBERT Vocabulary",
        description="Tokenizer vocabulary file (vocab.json) required by the CodeBERT ONNX model",
        backend_type=BackendType.CODEBERT_ONNX,
        download_url=f"{_CODEBERT_BASE}/vocab.json",
        built_in=True,
    ),
    ClassificationModelDescriptor(
        id=CODEBERT_MERGES_ID,
        display_name="CodeBERT BPE merges",
        description="Tokenizer BPE merges file (merges.txt) required by the CodeBERT ONNX model",
        backend_type=BackendType.CODEBERT_ONNX,
        download_url=f"{_CODEBERT_BASE}/merges.txt",
        built_in=True,
    ),
]


def file_extension(descriptor: ClassificationModelDescriptor) -> str:
    """Storage extension: vocabulary, merge rules, ONNX graph, or TFLite model."""
    if descriptor.backend_type == BackendType.CODEBERT_ONNX:
        if "vocab" in descriptor.id:
            return ".json"
        if "merges" in descriptor.id:
            return ".txt"
        return ".onnx"
    return ".tflite"
