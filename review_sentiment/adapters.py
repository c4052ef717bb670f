"""
Inference adapters for the pretrained sentiment network.

The network is treated as a black box: it takes a fixed-length vector of
token ids and returns two class probabilities. ``InferenceAdapter`` is the
interface the predictor depends on; ``TorchScriptAdapter`` runs a serialized
TorchScript artifact.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import torch

from .errors import AdapterError
from .features import FEATURE_LENGTH
from .vocabulary import PAD_ID

logger = logging.getLogger("review_sentiment")


NUM_CLASSES = 2


@dataclass(frozen=True)
class ModelSchema:
    """Input and output shape of a model artifact."""

    feature_length: int = FEATURE_LENGTH
    num_classes: int = NUM_CLASSES
    input_name: str = "Features"
    output_name: str = "Prediction/Softmax"

    def describe(self) -> list[str]:
        """Human-readable lines describing the schema."""
        return [
            f"Name: {self.input_name}, Type: int64, Size: ({self.feature_length})",
            f"Name: {self.output_name}, Type: float32, Size: ({self.num_classes})",
        ]


class InferenceAdapter(ABC):
    """
    Interface for scoring a fixed-length feature vector.

    Implementations raise ``AdapterError`` for every inference failure,
    including shape mismatches on input or output.
    """

    @abstractmethod
    def score(self, features: np.ndarray) -> np.ndarray:
        """
        Score a single feature vector.

        Args:
            features: Int vector of shape (feature_length,)

        Returns:
            Float vector of shape (2,) with class probabilities,
            index 0 = negative, index 1 = positive
        """
        ...

    @property
    def schema(self) -> ModelSchema | None:
        return None


class TorchScriptAdapter(InferenceAdapter):
    """
    Adapter for a TorchScript model artifact.

    Calls to ``score`` are serialized, so one instance can be shared by
    several request threads.
    """

    def __init__(
        self,
        model_path: str | Path,
        feature_length: int = FEATURE_LENGTH,
        num_classes: int = NUM_CLASSES,
        apply_softmax: bool = False,
        device: torch.device | None = None,
    ):
        """
        Load the model artifact.

        Args:
            model_path: Path to a TorchScript file
            feature_length: Input vector length the model expects
            num_classes: Number of output values the model produces
            apply_softmax: Apply softmax to the output (for artifacts that
                return logits instead of probabilities)
            device: Device to run inference on

        Raises:
            AdapterError: If the artifact is missing or cannot be loaded
        """
        self.model_path = Path(model_path)
        self.apply_softmax = apply_softmax
        self.device = device or torch.device("cpu")
        self._schema = ModelSchema(feature_length=feature_length, num_classes=num_classes)
        self._lock = threading.Lock()

        if not self.model_path.is_file():
            raise AdapterError(f"Model artifact not found: {self.model_path}")

        try:
            self.model = torch.jit.load(str(self.model_path), map_location=self.device)
        except Exception as e:
            raise AdapterError(f"Failed to load model artifact {self.model_path}: {e}") from e

        self.model.eval()

        logger.info(f"Model loaded from {self.model_path}")

    @property
    def schema(self) -> ModelSchema:
        return self._schema

    def score(self, features: np.ndarray) -> np.ndarray:
        features = np.asarray(features)
        expected = (self._schema.feature_length,)

        if features.shape != expected:
            raise AdapterError(
                f"Expected feature vector of shape {expected}, got {features.shape}"
            )

        if not np.issubdtype(features.dtype, np.integer):
            raise AdapterError(f"Expected integer features, got {features.dtype}")

        input_ids = torch.as_tensor(features, dtype=torch.long).unsqueeze(0).to(self.device)

        with self._lock:
            try:
                with torch.no_grad():
                    output = self.model(input_ids)
            except Exception as e:
                raise AdapterError(f"Model inference failed: {e}") from e

        if not isinstance(output, torch.Tensor):
            raise AdapterError(f"Model returned {type(output).__name__}, expected a tensor")

        output = output.detach().float()
        if self.apply_softmax:
            output = torch.softmax(output, dim=-1)

        prediction = output.cpu().reshape(-1).numpy().astype(np.float32)

        if prediction.shape != (self._schema.num_classes,):
            raise AdapterError(
                f"Expected {self._schema.num_classes} output values, got {prediction.size}"
            )

        return prediction

    def verify(self) -> np.ndarray:
        """
        Run an all-padding vector through the model and log its schema.

        Returns:
            Prediction for the padding-only input

        Raises:
            AdapterError: If the model cannot score the all-padding input
        """
        logger.info("=============== Model Schema ===============")
        for line in self._schema.describe():
            logger.info(line)

        padding = np.full(self._schema.feature_length, PAD_ID, dtype=np.int32)
        prediction = self.score(padding)

        logger.info(f"Model output shape: {prediction.shape}")
        return prediction

    def __repr__(self) -> str:
        return (
            f"TorchScriptAdapter(model_path={str(self.model_path)!r}, "
            f"apply_softmax={self.apply_softmax}, device={self.device})"
        )
