"""
Utility functions for the review sentiment project.

Includes logging setup, configuration loading and device selection.
"""

import logging
import sys
from pathlib import Path
from typing import Any

import torch
import yaml

from .errors import ConfigError

LOGGER_NAME = "review_sentiment"


def setup_logging(
    log_level: str = "INFO",
    log_file: str | None = None,
    log_format: str | None = None,
) -> logging.Logger:
    """
    Setup logging configuration.
    
    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        log_format: Optional custom log format
        
    Returns:
        Configured logger instance
    """
    if log_format is None:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    
    level = getattr(logging, log_level.upper())
    
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    
    logger.handlers.clear()
    
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(log_format))
    logger.addHandler(console_handler)
    
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(log_format))
        logger.addHandler(file_handler)
    
    return logger


def load_config(config_path: str | Path) -> dict[str, Any]:
    """
    Load configuration from YAML file.
    
    Args:
        config_path: Path to YAML configuration file
        
    Returns:
        Configuration dictionary (empty if the file has no content)
        
    Raises:
        ConfigError: If config file doesn't exist or is not valid YAML
    """
    config_path = Path(config_path)
    
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")
    
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f"Configuration root must be a mapping: {config_path}")
    
    return config


def get_device(use_cuda: bool = True, cuda_device: int = 0) -> torch.device:
    """
    Get the appropriate device for computation.
    
    Args:
        use_cuda: Whether to use CUDA if available
        cuda_device: CUDA device index
        
    Returns:
        torch.device instance
    """
    if use_cuda and torch.cuda.is_available():
        device = torch.device(f"cuda:{cuda_device}")
    else:
        device = torch.device("cpu")
    
    return device


def ensure_dir(dir_path: str | Path) -> Path:
    """
    Ensure directory exists, create if necessary.
    
    Args:
        dir_path: Directory path
        
    Returns:
        Path object
    """
    path = Path(dir_path)
    path.mkdir(parents=True, exist_ok=True)
    return path
