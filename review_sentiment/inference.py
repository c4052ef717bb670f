"""
Inference module for review sentiment classification.

Composes tokenizer, feature encoder, inference adapter and interpreter
into a single predictor and converts the raw model output to a
user-friendly result.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import torch

from .adapters import InferenceAdapter, TorchScriptAdapter
from .config import PredictorConfig
from .features import FEATURE_LENGTH, FeatureEncoder
from .interpret import (
    get_confidence,
    get_confidence_level,
    interpret,
    is_positive,
    to_probability_dict,
)
from .tokenizer import Tokenizer
from .utils import get_device
from .vocabulary import VocabularyIndex

logger = logging.getLogger("review_sentiment")


@dataclass
class PredictionResult:
    """Result of a sentiment prediction."""

    text: str
    sentiment: str
    is_positive: bool
    confidence: float
    confidence_level: str
    probabilities: dict[str, float]
    prediction: list[float] = field(default_factory=list)
    num_tokens: int = 0
    num_unknown: int = 0
    truncated: bool = False
    inference_time_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "text": self.text[:100] + "..." if len(self.text) > 100 else self.text,
            "sentiment": self.sentiment,
            "is_positive": self.is_positive,
            "confidence": round(self.confidence, 4),
            "confidence_level": self.confidence_level,
            "probabilities": {
                k: round(v, 4) for k, v in self.probabilities.items()
            },
            "prediction": [round(v, 4) for v in self.prediction],
            "num_tokens": self.num_tokens,
            "num_unknown": self.num_unknown,
            "truncated": self.truncated,
            "inference_time_ms": round(self.inference_time_ms, 2),
        }


def validate_prediction_input(text: Any) -> tuple[bool, str]:
    """
    Validate input for prediction.

    Empty and whitespace-only strings are valid; they encode to an
    all-padding feature vector.

    Args:
        text: Input text

    Returns:
        Tuple of (is_valid, error_message)
    """
    if text is None:
        return False, "Input text cannot be None"

    if not isinstance(text, str):
        return False, f"Input must be string, got {type(text).__name__}"

    return True, ""


class SentimentPredictor:
    """
    High-level predictor for movie review sentiment.

    The vocabulary and adapter are created by the caller and shared by
    reference; the predictor itself holds no per-request state.
    """

    def __init__(
        self,
        vocab: VocabularyIndex,
        adapter: InferenceAdapter,
        tokenizer: Tokenizer | None = None,
        feature_length: int = FEATURE_LENGTH,
    ):
        """
        Initialize the predictor.

        Args:
            vocab: Loaded vocabulary
            adapter: Inference backend
            tokenizer: Tokenizer to split review text (default settings if None)
            feature_length: Length of the feature vector the model expects
        """
        self.vocab = vocab
        self.adapter = adapter
        self.tokenizer = tokenizer or Tokenizer()
        self.encoder = FeatureEncoder(vocab, feature_length)

    def predict(self, text: str) -> PredictionResult:
        """
        Make prediction for a single text.

        Args:
            text: Input text

        Returns:
            PredictionResult with sentiment and probabilities

        Raises:
            ValueError: If input is not a string
            AdapterError: If the inference backend fails
        """
        is_valid, error = validate_prediction_input(text)
        if not is_valid:
            raise ValueError(error)

        start_time = time.perf_counter()

        tokens = self.tokenizer.tokenize(text)
        encoded = self.encoder.encode(tokens)

        logger.debug(
            f"Encoded {encoded.num_tokens} tokens ({encoded.num_unknown} unknown, "
            f"truncated={encoded.truncated})"
        )

        prediction = self.adapter.score(encoded.features)

        inference_time = (time.perf_counter() - start_time) * 1000  # Convert to ms

        confidence = get_confidence(prediction)

        return PredictionResult(
            text=text,
            sentiment=interpret(prediction),
            is_positive=is_positive(prediction),
            confidence=confidence,
            confidence_level=get_confidence_level(confidence),
            probabilities=to_probability_dict(prediction),
            prediction=[float(v) for v in prediction],
            num_tokens=encoded.num_tokens,
            num_unknown=encoded.num_unknown,
            truncated=encoded.truncated,
            inference_time_ms=inference_time,
        )

    @classmethod
    def from_pretrained(
        cls,
        vocab_path: str | Path,
        model_path: str | Path,
        feature_length: int = FEATURE_LENGTH,
        apply_softmax: bool = False,
        device: torch.device | None = None,
    ) -> "SentimentPredictor":
        """
        Load predictor from a vocabulary file and a TorchScript artifact.

        Args:
            vocab_path: Path to the ``word,id`` vocabulary file
            model_path: Path to the TorchScript model
            feature_length: Length of the feature vector the model expects
            apply_softmax: Whether the model returns logits
            device: Device to run on

        Returns:
            Loaded SentimentPredictor
        """
        vocab = VocabularyIndex.load(vocab_path)
        adapter = TorchScriptAdapter(
            model_path,
            feature_length=feature_length,
            apply_softmax=apply_softmax,
            device=device,
        )

        return cls(vocab, adapter, feature_length=feature_length)

    @classmethod
    def from_config(cls, config: PredictorConfig) -> "SentimentPredictor":
        """
        Build predictor from a PredictorConfig.

        Args:
            config: Loaded predictor configuration

        Returns:
            Loaded SentimentPredictor
        """
        vocab = VocabularyIndex.load(
            config.vocab_path,
            unknown_id=config.unknown_id,
            strict=config.strict_vocabulary,
        )
        adapter = TorchScriptAdapter(
            config.model_path,
            feature_length=config.feature_length,
            apply_softmax=config.apply_softmax,
            device=get_device(use_cuda=config.use_cuda),
        )
        tokenizer = Tokenizer(lowercase=config.lowercase, strip_html=config.strip_html)

        return cls(vocab, adapter, tokenizer=tokenizer, feature_length=config.feature_length)
