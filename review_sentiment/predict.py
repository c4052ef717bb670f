"""
Prediction script for the review sentiment classifier.

Usage:
    python -m review_sentiment.predict --config configs/predict_config.yaml
    python -m review_sentiment.predict --config configs/predict_config.yaml --text "what a dull film"
    python -m review_sentiment.predict --config configs/predict_config.yaml --input_path reviews.csv --output_path preds.csv
"""

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd
from tqdm import tqdm

from .config import PredictorConfig, load_predictor_config
from .errors import InputError, SentimentError
from .inference import SentimentPredictor
from .utils import ensure_dir, setup_logging

logger = logging.getLogger("review_sentiment")

DEFAULT_REVIEW = "this film is really good"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Predict sentiment of movie reviews",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--config", type=str, default=None, help="Path to configuration file")
    parser.add_argument("--vocab-path", type=str, default=None, help="Override vocabulary path")
    parser.add_argument("--model-path", type=str, default=None, help="Override model path")
    parser.add_argument("--text", type=str, default=DEFAULT_REVIEW, help="Review text to classify")
    parser.add_argument("--input_path", type=str, default=None, help="Input CSV with a text column")
    parser.add_argument("--output_path", type=str, default=None, help="Output CSV path")
    parser.add_argument("--text_column", type=str, default="text", help="Text column name")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> PredictorConfig:
    """Load the config file (if any) and apply command line overrides."""
    config = load_predictor_config(args.config) if args.config else PredictorConfig()

    if args.vocab_path:
        config.vocab_path = Path(args.vocab_path)
    if args.model_path:
        config.model_path = Path(args.model_path)
    if args.verbose:
        config.log_level = "DEBUG"

    return config


def predict_text(predictor: SentimentPredictor, text: str) -> None:
    """Classify one review and print the verdict."""
    result = predictor.predict(text)

    print(f"Number of classes: {len(result.prediction)}")
    print(f"Is sentiment/review positive? {'Yes.' if result.is_positive else 'No.'}")


def predict_file(
    predictor: SentimentPredictor,
    input_path: str,
    output_path: str,
    text_column: str = "text",
) -> pd.DataFrame:
    """
    Classify every row of a CSV file.

    Args:
        predictor: Loaded predictor
        input_path: CSV with a text column
        output_path: Where to write the CSV with predictions
        text_column: Name of the text column

    Returns:
        DataFrame with the input columns plus prediction columns

    Raises:
        InputError: If the CSV cannot be read or lacks the text column
    """
    logger.info(f"Loading data from {input_path}")
    try:
        df = pd.read_csv(input_path)
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise InputError(f"Cannot read input file {input_path}: {e}") from e

    if text_column not in df.columns:
        raise InputError(f"Column '{text_column}' not found in {input_path}")

    results = []
    for text in tqdm(df[text_column].tolist(), desc="Predicting"):
        # Missing cells are scored as empty reviews
        text = "" if pd.isna(text) else str(text)
        pred = predictor.predict(text)
        results.append({
            "prediction": pred.sentiment,
            "is_positive": pred.is_positive,
            "prob_negative": pred.probabilities.get("negative", 0.0),
            "prob_positive": pred.probabilities.get("positive", 0.0),
        })

    output_df = pd.concat([df.reset_index(drop=True), pd.DataFrame(results)], axis=1)
    ensure_dir(Path(output_path).parent)
    output_df.to_csv(output_path, index=False)

    positive = sum(1 for r in results if r["is_positive"])
    logger.info(f"Done! Positive: {positive}, Negative: {len(results) - positive}")
    logger.info(f"Saved to {output_path}")

    return output_df


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        config = build_config(args)
    except SentimentError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(log_level=config.log_level, log_file=config.log_file)

    if args.input_path and not args.output_path:
        logger.error("--output_path is required with --input_path")
        return 2

    try:
        predictor = SentimentPredictor.from_config(config)
        predictor.adapter.verify()

        if args.input_path:
            predict_file(predictor, args.input_path, args.output_path, args.text_column)
        else:
            predict_text(predictor, args.text)
    except SentimentError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
