"""
Interpretation of the model's output distribution.

The pretrained artifact emits two values ordered [negative, positive]. That
ordering and the 0.5 threshold are fixed by how the artifact was trained;
they are a contract with that artifact, not a tunable policy.
"""

from collections.abc import Sequence

import numpy as np

SENTIMENT_LABELS = {0: "negative", 1: "positive"}
POSITIVE_INDEX = 1
POSITIVE_THRESHOLD = 0.5
CONFIDENCE_THRESHOLDS = {"high": 0.8, "medium": 0.6, "low": 0.0}


def _as_prediction(prediction: Sequence[float]) -> np.ndarray:
    values = np.asarray(prediction, dtype=np.float64).reshape(-1)
    if values.shape != (len(SENTIMENT_LABELS),):
        raise ValueError(
            f"Prediction must have {len(SENTIMENT_LABELS)} values, got {values.size}"
        )
    return values


def is_positive(prediction: Sequence[float]) -> bool:
    """True iff the positive-class probability is strictly above 0.5."""
    values = _as_prediction(prediction)
    return bool(values[POSITIVE_INDEX] > POSITIVE_THRESHOLD)


def interpret(prediction: Sequence[float]) -> str:
    """
    Map a prediction vector to a sentiment label.

    Args:
        prediction: Two class probabilities [negative, positive]

    Returns:
        'positive' if prediction[1] > 0.5, else 'negative'

    Raises:
        ValueError: If the prediction does not have exactly 2 values
    """
    return SENTIMENT_LABELS[POSITIVE_INDEX] if is_positive(prediction) else SENTIMENT_LABELS[0]


def get_confidence(prediction: Sequence[float]) -> float:
    """Probability of the class chosen by ``interpret``."""
    values = _as_prediction(prediction)
    if values[POSITIVE_INDEX] > POSITIVE_THRESHOLD:
        return float(values[POSITIVE_INDEX])
    return float(values[0])


def get_confidence_level(confidence: float) -> str:
    """
    Get confidence level string from confidence score.

    Args:
        confidence: Confidence score (0-1)

    Returns:
        Confidence level: 'high', 'medium', or 'low'
    """
    if confidence >= CONFIDENCE_THRESHOLDS["high"]:
        return "high"
    elif confidence >= CONFIDENCE_THRESHOLDS["medium"]:
        return "medium"
    else:
        return "low"


def to_probability_dict(prediction: Sequence[float]) -> dict[str, float]:
    """Label each prediction value with its class name."""
    values = _as_prediction(prediction)
    return {SENTIMENT_LABELS[i]: float(values[i]) for i in range(len(values))}
