import os
import sys
from pathlib import Path

os.environ['TF_CPP_MIN_LOG_LEVEL'] = '3'

import numpy as np
import pytest

# Add src to Python path
src_path = str(Path(__file__).parent.parent / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


def _reference_min_max_norm(weights, axes, min_value, max_value, rate=1.0, epsilon=1e-6):
    """Plain numpy min/max norm rescale using keepdims broadcasting."""
    weights = np.asarray(weights, dtype=np.float64)
    norms = np.sqrt(np.sum(np.square(weights), axis=axes, keepdims=True))
    clipped = np.maximum(np.minimum(norms, max_value), min_value)
    scale = clipped / (norms + epsilon)
    if rate != 1.0:
        scale = scale * rate + (1.0 - rate)
    return weights * scale


@pytest.fixture
def reference_min_max_norm():
    """Independent numpy implementation to compare the constraints against."""
    return _reference_min_max_norm
