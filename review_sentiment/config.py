"""
Predictor configuration.

Maps the YAML configuration file onto a ``PredictorConfig``. Every key has
a default; relative paths are resolved against the directory holding the
configuration file.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigError
from .features import FEATURE_LENGTH
from .utils import load_config
from .vocabulary import MAX_ID, UNKNOWN_ID


@dataclass
class PredictorConfig:
    """Settings needed to assemble a SentimentPredictor."""

    vocab_path: Path = Path("sentiment_model/imdb_word_index.csv")
    model_path: Path = Path("sentiment_model/model.pt")
    feature_length: int = FEATURE_LENGTH
    unknown_id: int = UNKNOWN_ID
    lowercase: bool = True
    strip_html: bool = True
    strict_vocabulary: bool = False
    apply_softmax: bool = False
    use_cuda: bool = False
    log_level: str = "INFO"
    log_file: str | None = None


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping")
    return section


def _typed(section: dict[str, Any], key: str, expected: type, default: Any) -> Any:
    value = section.get(key, default)
    if value is None and default is None:
        return None
    # bool is a subclass of int; keep them apart
    if expected is int and isinstance(value, bool):
        raise ConfigError(f"Config key '{key}' must be int, got bool")
    if not isinstance(value, expected):
        raise ConfigError(
            f"Config key '{key}' must be {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _resolve(path: str | Path, base_dir: Path) -> Path:
    path = Path(path)
    return path if path.is_absolute() else base_dir / path


def parse_predictor_config(
    config: dict[str, Any],
    base_dir: str | Path = ".",
) -> PredictorConfig:
    """
    Build a PredictorConfig from a configuration dictionary.

    Args:
        config: Parsed YAML configuration
        base_dir: Directory relative paths are resolved against

    Returns:
        PredictorConfig instance

    Raises:
        ConfigError: If a value has the wrong type or is out of range
    """
    base_dir = Path(base_dir)
    defaults = PredictorConfig()

    paths = _section(config, "paths")
    features = _section(config, "features")
    vocabulary = _section(config, "vocabulary")
    model = _section(config, "model")
    logging_section = _section(config, "logging")

    vocab_path = _typed(paths, "vocabulary", str, str(defaults.vocab_path))
    model_path = _typed(paths, "model", str, str(defaults.model_path))

    feature_length = _typed(features, "length", int, defaults.feature_length)
    if feature_length < 1:
        raise ConfigError(f"features.length must be positive, got {feature_length}")

    unknown_id = _typed(features, "unknown_id", int, defaults.unknown_id)
    if not 0 <= unknown_id <= MAX_ID:
        raise ConfigError(
            f"features.unknown_id must be in [0, {MAX_ID}], got {unknown_id}"
        )

    log_level = _typed(logging_section, "level", str, defaults.log_level)
    if not isinstance(logging.getLevelName(log_level.upper()), int):
        raise ConfigError(f"logging.level must be a logging level name, got {log_level!r}")

    return PredictorConfig(
        vocab_path=_resolve(vocab_path, base_dir),
        model_path=_resolve(model_path, base_dir),
        feature_length=feature_length,
        unknown_id=unknown_id,
        lowercase=_typed(features, "lowercase", bool, defaults.lowercase),
        strip_html=_typed(features, "strip_html", bool, defaults.strip_html),
        strict_vocabulary=_typed(vocabulary, "strict", bool, defaults.strict_vocabulary),
        apply_softmax=_typed(model, "apply_softmax", bool, defaults.apply_softmax),
        use_cuda=_typed(model, "use_cuda", bool, defaults.use_cuda),
        log_level=log_level,
        log_file=_typed(logging_section, "file", str, defaults.log_file),
    )


def load_predictor_config(config_path: str | Path) -> PredictorConfig:
    """
    Load a PredictorConfig from a YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        PredictorConfig instance

    Raises:
        ConfigError: If the file is missing or invalid
    """
    config_path = Path(config_path)
    config = load_config(config_path)
    return parse_predictor_config(config, base_dir=config_path.parent)
