"""Test configuration for the ceteris paribus toolbox."""

from pathlib import Path
import sys

import numpy as np
import pandas as pd
import pytest
from sklearn.compose import ColumnTransformer
from sklearn.linear_model import LinearRegression, LogisticRegression
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder


# Ensure the local package is importable when the repo isn't installed.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


FEATURES = ["construction_year", "surface", "floor", "no_rooms", "district"]
DISTRICTS = ["Srodmiescie", "Ochota", "Mokotow", "Wola"]


@pytest.fixture(scope="session")
def apartments() -> pd.DataFrame:
    """Synthetic apartment prices with four numeric and one categorical feature."""
    rng = np.random.default_rng(59)
    n = 200
    frame = pd.DataFrame(
        {
            "construction_year": rng.integers(1920, 2011, n),
            "surface": rng.integers(20, 151, n),
            "floor": rng.integers(1, 11, n),
            "no_rooms": rng.integers(1, 7, n),
            "district": rng.choice(DISTRICTS, n),
        },
    )
    bonus = frame["district"].map({"Srodmiescie": 1500.0, "Ochota": 300.0, "Mokotow": 600.0, "Wola": 0.0})
    frame["m2_price"] = (
        5000.0 - 10.0 * frame["surface"] - 50.0 * frame["floor"] + bonus + rng.normal(0.0, 100.0, n)
    )
    return frame


@pytest.fixture(scope="session")
def apartments_x(apartments: pd.DataFrame) -> pd.DataFrame:
    return apartments[FEATURES]


def _encoder() -> ColumnTransformer:
    return ColumnTransformer(
        [("district", OneHotEncoder(handle_unknown="ignore"), ["district"])],
        remainder="passthrough",
    )


@pytest.fixture(scope="session")
def price_model(apartments: pd.DataFrame) -> Pipeline:
    """Linear regression on one-hot encoded district plus numeric features."""
    model = Pipeline([("encode", _encoder()), ("regress", LinearRegression())])
    return model.fit(apartments[FEATURES], apartments["m2_price"])


@pytest.fixture(scope="session")
def district_classifier(apartments: pd.DataFrame) -> Pipeline:
    """Multi-class classifier predicting the district from the numeric features."""
    numeric = ["construction_year", "surface", "floor", "no_rooms"]
    model = Pipeline([("classify", LogisticRegression(max_iter=1000))])
    return model.fit(apartments[numeric], apartments["district"])


@pytest.fixture
def small_frame() -> pd.DataFrame:
    """Three observations with a numeric and a categorical feature."""
    return pd.DataFrame(
        {
            "floor": [1, 5, 10],
            "surface": [30.0, 60.0, 90.0],
            "district": ["Ochota", "Mokotow", "Ochota"],
        },
    )


def sum_predict(model: object, rows: pd.DataFrame, offset: float = 0.0) -> np.ndarray:
    """Deterministic stand-in model: floor + surface (+ offset)."""
    return (rows["floor"] + rows["surface"] + offset).to_numpy()


def identity_predict(model: object, rows: pd.DataFrame, column: str = "floor") -> np.ndarray:
    """Return the value of ``column`` unchanged."""
    return rows[column].to_numpy(dtype=float)


@pytest.fixture
def sum_fn():
    return sum_predict


@pytest.fixture
def identity_fn():
    return identity_predict
