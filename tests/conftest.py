'''
Pytest configuration and fixtures for the explosive test suite.

Provides seeded random generators, simulated random walks and panels, a
series with an injected explosive segment, and a fixture that restores the
default configuration around every test.
'''

import numpy as np
import pandas as pd
import pytest

from explosive.core.config import reset_config
from explosive.models.diagnostics import default_cv


# ---- Configuration ----

@pytest.fixture(autouse=True)
def default_config():
    """Run every test against the default configuration and an empty critical value cache."""
    reset_config()
    default_cv.cache_clear()
    yield
    reset_config()
    default_cv.cache_clear()


# ---- Basic Data Generation Fixtures ----

@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def random_walk(rng: np.random.Generator) -> np.ndarray:
    """Gaussian random walk of length 100."""
    return 100.0 + np.cumsum(rng.standard_normal(100))


@pytest.fixture
def short_panel(rng: np.random.Generator) -> np.ndarray:
    """Three independent random walks of length 80."""
    return 50.0 + np.cumsum(rng.standard_normal((80, 3)), axis=0)


@pytest.fixture
def dated_panel(short_panel: np.ndarray) -> pd.DataFrame:
    """``short_panel`` as a DataFrame with a monthly date column."""
    frame = pd.DataFrame(short_panel, columns=["housing", "equity", "credit"])
    frame.insert(0, "date", pd.date_range("2000-01-01", periods=len(frame), freq="MS"))
    return frame


@pytest.fixture
def bubble_series() -> np.ndarray:
    """Random walk for 50 periods followed by 50 periods of exponential growth."""
    rng = np.random.default_rng(12)
    walk = 100.0 + np.cumsum(rng.standard_normal(50))
    growth = walk[-1] * 1.06 ** np.arange(1, 51)
    return np.concatenate([walk, growth])
