"""
Tests for inference adapters.

Tests cover:
- Loading TorchScript artifacts
- Input and output shape checks
- Softmax for logit outputs
- Error wrapping
- Concurrent scoring
"""

import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from review_sentiment.adapters import (
    NUM_CLASSES,
    InferenceAdapter,
    ModelSchema,
    TorchScriptAdapter,
)
from review_sentiment.errors import AdapterError
from review_sentiment.features import FEATURE_LENGTH, normalize


def features_with(n_tokens: int, length: int = FEATURE_LENGTH) -> np.ndarray:
    return normalize(list(range(1, n_tokens + 1)), length)


class TestInterface:
    """Tests for the adapter interface."""

    def test_cannot_instantiate_abstract(self):
        """Test that InferenceAdapter requires score."""
        with pytest.raises(TypeError):
            InferenceAdapter()

    def test_stub_is_substitutable(self, make_adapter):
        """Test that a stub satisfies the interface."""
        adapter = make_adapter(prediction=[0.3, 0.7])

        assert isinstance(adapter, InferenceAdapter)
        assert adapter.score(features_with(2)).tolist() == pytest.approx([0.3, 0.7])
        assert adapter.schema is None


class TestModelSchema:
    """Tests for the schema description."""

    def test_defaults(self):
        """Test the default schema matches the pretrained model."""
        schema = ModelSchema()

        assert schema.feature_length == 600
        assert schema.num_classes == NUM_CLASSES == 2

    def test_describe(self):
        """Test the schema lines."""
        lines = ModelSchema().describe()

        assert "Name: Features" in lines[0]
        assert "(600)" in lines[0]
        assert "(2)" in lines[1]


class TestTorchScriptAdapter:
    """Tests for the TorchScript adapter."""

    def test_score_shape_and_dtype(self, model_path):
        """Test that scoring returns two float32 values."""
        adapter = TorchScriptAdapter(model_path)
        prediction = adapter.score(features_with(5))

        assert prediction.shape == (2,)
        assert prediction.dtype == np.float32

    def test_score_values(self, model_path):
        """Test the probabilities of the test artifact."""
        adapter = TorchScriptAdapter(model_path)

        positive = adapter.score(features_with(5))
        negative = adapter.score(features_with(0))

        assert positive[1] > 0.5
        assert negative[1] < 0.5
        assert positive.sum() == pytest.approx(1.0, abs=1e-5)

    def test_softmax_applied_to_logits(self, model_path, logits_model_path):
        """Test that apply_softmax turns logits into the same probabilities."""
        probs_adapter = TorchScriptAdapter(model_path)
        logits_adapter = TorchScriptAdapter(logits_model_path, apply_softmax=True)

        features = features_with(4)
        assert logits_adapter.score(features) == pytest.approx(probs_adapter.score(features), abs=1e-5)

    def test_custom_feature_length(self, model_path):
        """Test an artifact used with a different input length."""
        adapter = TorchScriptAdapter(model_path, feature_length=16)

        assert adapter.schema.feature_length == 16
        assert adapter.score(features_with(3, 16)).shape == (2,)

    def test_wrong_input_length(self, model_path):
        """Test that a wrongly sized vector is rejected."""
        adapter = TorchScriptAdapter(model_path)

        with pytest.raises(AdapterError, match="shape"):
            adapter.score(features_with(3, 599))

    def test_wrong_input_rank(self, model_path):
        """Test that a batch-shaped input is rejected."""
        adapter = TorchScriptAdapter(model_path)

        with pytest.raises(AdapterError):
            adapter.score(np.zeros((1, FEATURE_LENGTH), dtype=np.int32))

    def test_float_input_rejected(self, model_path):
        """Test that non-integer features are rejected."""
        adapter = TorchScriptAdapter(model_path)

        with pytest.raises(AdapterError, match="integer"):
            adapter.score(np.zeros(FEATURE_LENGTH, dtype=np.float32))

    def test_wrong_output_arity(self, bad_output_model_path):
        """Test that a model with three outputs is rejected."""
        adapter = TorchScriptAdapter(bad_output_model_path)

        with pytest.raises(AdapterError, match="2 output values"):
            adapter.score(features_with(2))

    def test_missing_artifact(self, tmp_path):
        """Test that a missing artifact raises AdapterError."""
        with pytest.raises(AdapterError, match="not found"):
            TorchScriptAdapter(tmp_path / "missing.pt")

    def test_corrupt_artifact(self, tmp_path):
        """Test that a file that is not TorchScript raises AdapterError."""
        path = tmp_path / "corrupt.pt"
        path.write_bytes(b"not a torchscript archive")

        with pytest.raises(AdapterError) as exc_info:
            TorchScriptAdapter(path)

        assert exc_info.value.__cause__ is not None

    def test_verify_logs_schema(self, model_path, caplog):
        """Test that verify scores an all-padding vector and logs the schema."""
        adapter = TorchScriptAdapter(model_path)

        with caplog.at_level(logging.INFO, logger="review_sentiment"):
            prediction = adapter.verify()

        assert prediction.shape == (2,)
        assert "Name: Features" in caplog.text
        assert "Model output shape" in caplog.text

    def test_concurrent_scoring(self, model_path):
        """Test that a shared adapter gives consistent results across threads."""
        adapter = TorchScriptAdapter(model_path)
        inputs = [features_with(n % 7) for n in range(40)]
        expected = [adapter.score(f) for f in inputs]

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(adapter.score, inputs))

        for got, want in zip(results, expected):
            assert np.allclose(got, want)
