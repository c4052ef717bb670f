"""
Fixed-length feature encoding.

Maps tokens to vocabulary ids and resizes the id sequence to the length the
pretrained model expects. Resizing keeps the first ``length`` ids and
right-pads shorter sequences with ``PAD_ID``.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np

from .tokenizer import Tokenizer
from .vocabulary import PAD_ID, VocabularyIndex

logger = logging.getLogger("review_sentiment")


FEATURE_LENGTH = 600
FEATURE_DTYPE = np.int32


def _check_length(length: int) -> int:
    if isinstance(length, bool) or not isinstance(length, (int, np.integer)) or length < 1:
        raise ValueError(f"Feature length must be a positive integer, got {length!r}")
    return int(length)


def normalize(sequence: Sequence[int], length: int = FEATURE_LENGTH) -> np.ndarray:
    """
    Resize an id sequence to exactly ``length`` entries.

    Longer sequences are truncated from the end, shorter ones are
    right-padded with ``PAD_ID``.

    Args:
        sequence: Variable-length id sequence
        length: Target length

    Returns:
        Numpy array of shape (length,) and dtype int32
    """
    length = _check_length(length)

    features = np.full(length, PAD_ID, dtype=FEATURE_DTYPE)

    kept = min(len(sequence), length)
    if kept:
        features[:kept] = np.asarray(sequence[:kept], dtype=FEATURE_DTYPE)

    return features


def encode(
    tokens: Sequence[str],
    vocab: VocabularyIndex,
    length: int = FEATURE_LENGTH,
) -> np.ndarray:
    """
    Convert tokens to a fixed-length id vector.

    Args:
        tokens: Tokens in order
        vocab: Vocabulary used for lookup
        length: Target length

    Returns:
        Numpy array of shape (length,) and dtype int32
    """
    return normalize(vocab.lookup_many(tokens), length)


@dataclass
class EncodedReview:
    """Fixed-length features plus bookkeeping about how they were built."""

    features: np.ndarray
    num_tokens: int
    num_unknown: int

    @property
    def truncated(self) -> bool:
        return self.num_tokens > len(self.features)


class FeatureEncoder:
    """
    Encoder bound to a vocabulary and a target length.
    """

    def __init__(self, vocab: VocabularyIndex, length: int = FEATURE_LENGTH):
        """
        Initialize the encoder.

        Args:
            vocab: Loaded vocabulary
            length: Length of the feature vector expected by the model

        Raises:
            ValueError: If length is not a positive integer
        """
        self.vocab = vocab
        self.length = _check_length(length)

    def encode(self, tokens: Iterable[str]) -> EncodedReview:
        """
        Encode tokens into a fixed-length feature vector.

        Args:
            tokens: Tokens in order

        Returns:
            EncodedReview with features of shape (length,)
        """
        tokens = list(tokens)
        ids = self.vocab.lookup_many(tokens)
        num_unknown = sum(1 for token in tokens if token not in self.vocab)

        return EncodedReview(
            features=normalize(ids, self.length),
            num_tokens=len(ids),
            num_unknown=num_unknown,
        )

    def encode_text(self, text: str, tokenizer: Tokenizer) -> EncodedReview:
        """Tokenize and encode raw text."""
        return self.encode(tokenizer.tokenize(text))
