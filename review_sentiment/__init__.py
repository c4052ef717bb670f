"""
Review Sentiment Package

Sentiment classification of movie reviews with a pretrained neural network.
"""
from .adapters import InferenceAdapter, TorchScriptAdapter
from .errors import AdapterError, ConfigError, LoadError, SentimentError
from .features import FEATURE_LENGTH, FeatureEncoder, encode, normalize
from .inference import PredictionResult, SentimentPredictor
from .tokenizer import Tokenizer, tokenize
from .vocabulary import PAD_ID, UNKNOWN_ID, VocabularyIndex

__all__ = [
    "AdapterError",
    "ConfigError",
    "FEATURE_LENGTH",
    "FeatureEncoder",
    "InferenceAdapter",
    "LoadError",
    "PAD_ID",
    "PredictionResult",
    "SentimentError",
    "SentimentPredictor",
    "Tokenizer",
    "TorchScriptAdapter",
    "UNKNOWN_ID",
    "VocabularyIndex",
    "encode",
    "normalize",
    "tokenize",
]
