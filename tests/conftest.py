"""
Pytest configuration and fixtures for review sentiment tests.
"""

import logging
import sys
from pathlib import Path

import numpy as np
import pytest
import torch

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from review_sentiment.adapters import InferenceAdapter
from review_sentiment.vocabulary import VocabularyIndex


class StubAdapter(InferenceAdapter):
    """Adapter returning a fixed prediction and recording its inputs."""

    def __init__(self, prediction=(0.2, 0.8), error: Exception | None = None):
        self.prediction = np.asarray(prediction, dtype=np.float32)
        self.error = error
        self.calls: list[np.ndarray] = []

    def score(self, features: np.ndarray) -> np.ndarray:
        self.calls.append(np.array(features, copy=True))
        if self.error is not None:
            raise self.error
        return self.prediction


class TokenCountScorer(torch.nn.Module):
    """Probability of 'positive' grows with the number of non-padding ids."""

    def forward(self, input_ids: torch.Tensor) -> torch.Tensor:
        count = (input_ids != 0).float().sum(dim=1, keepdim=True)
        positive = torch.sigmoid(count - 2.5)
        return torch.cat([torch.ones_like(positive) - positive, positive], dim=1)


class TokenCountLogits(torch.nn.Module):
    """Same decision rule as TokenCountScorer, but returns logits."""

    def forward(self, input_ids: torch.Tensor) -> torch.Tensor:
        count = (input_ids != 0).float().sum(dim=1, keepdim=True)
        return torch.cat([torch.zeros_like(count), count - 2.5], dim=1)


class ThreeWayScorer(torch.nn.Module):
    """Model with the wrong number of outputs."""

    def forward(self, input_ids: torch.Tensor) -> torch.Tensor:
        return torch.ones([input_ids.size(0), 3]) / 3.0


def _save_scripted(module: torch.nn.Module, path: Path) -> Path:
    scripted = torch.jit.script(module)
    scripted.save(str(path))
    return path


@pytest.fixture
def vocab_words() -> dict[str, int]:
    """Small lowercase vocabulary."""
    return {
        "this": 10,
        "film": 11,
        "is": 12,
        "really": 13,
        "good": 14,
        "bad": 15,
        "movie": 16,
        "don't": 17,
        "the": 18,
    }


@pytest.fixture
def vocab_file(tmp_path, vocab_words) -> Path:
    """Vocabulary written as a word,id file."""
    path = tmp_path / "imdb_word_index.csv"
    path.write_text(
        "".join(f"{word},{idx}\n" for word, idx in vocab_words.items()),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def vocab(vocab_file) -> VocabularyIndex:
    """Loaded vocabulary."""
    return VocabularyIndex.load(vocab_file)


@pytest.fixture
def make_adapter():
    """Factory for stub adapters."""
    return StubAdapter


@pytest.fixture
def model_path(tmp_path) -> Path:
    """TorchScript artifact returning probabilities."""
    return _save_scripted(TokenCountScorer(), tmp_path / "model.pt")


@pytest.fixture
def logits_model_path(tmp_path) -> Path:
    """TorchScript artifact returning logits."""
    return _save_scripted(TokenCountLogits(), tmp_path / "logits_model.pt")


@pytest.fixture
def bad_output_model_path(tmp_path) -> Path:
    """TorchScript artifact with three outputs."""
    return _save_scripted(ThreeWayScorer(), tmp_path / "three_way.pt")


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers added by setup_logging between tests."""
    yield
    logger = logging.getLogger("review_sentiment")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
