"""Observation subsetting to keep the observations x grid blow-up affordable."""

import logging
from collections.abc import Hashable, Iterable, Mapping

import numpy as np
import pandas as pd
from sklearn.preprocessing import MinMaxScaler

from ceteris_tlbx.errors import InvalidArgumentError
from ceteris_tlbx.utils.profile_config import DEFAULT_PROFILE_CFG

from .tabular_source import as_source


logger = logging.getLogger(__name__)


def select_sample(
    data: object,
    n: int = DEFAULT_PROFILE_CFG.sample_size,
    random_state: int | np.random.Generator | None = None,
) -> pd.DataFrame:
    """Draw ``n`` observations without replacement.

    The returned frame is indexed by the original row ids, so profiles built from
    it refer back to the full dataset. All rows are returned when ``n`` is not
    smaller than the number of observations.
    """
    if n < 1:
        raise InvalidArgumentError(f"n must be >= 1, got {n}")
    frame = as_source(data).to_frame()
    if n >= len(frame):
        return frame
    return frame.sample(n=n, replace=False, random_state=random_state)


def _as_observation(observation: object) -> pd.Series:
    if isinstance(observation, pd.DataFrame):
        if len(observation) != 1:
            raise InvalidArgumentError(f"Expected a single observation, got {len(observation)} rows")
        return observation.iloc[0]
    if isinstance(observation, pd.Series):
        return observation
    if isinstance(observation, Mapping):
        return pd.Series(dict(observation))
    raise InvalidArgumentError(f"Unsupported observation type '{type(observation).__name__}'")


def gower_distances(data: object, observation: object, variables: Iterable[Hashable] | None = None) -> pd.Series:
    r"""Gower distance of every row to ``observation``.

    Numeric variables contribute :math:`|x_i - x| / (\max - \min)` (scaled with
    :class:`sklearn.preprocessing.MinMaxScaler`), all others a 0/1 mismatch. The
    per-variable terms are averaged, skipping missing comparisons.
    """
    source = as_source(data)
    obs = _as_observation(observation)
    variables = list(variables) if variables is not None else [col for col in source.columns if col in obs.index]
    if not variables:
        raise InvalidArgumentError("No shared variables between data and observation")
    source.require_columns(variables)
    missing = [var for var in variables if var not in obs.index]
    if missing:
        raise InvalidArgumentError(f"Observation lacks variables: {missing}")

    numeric = [var for var in variables if source.is_numeric(var)]
    categorical = [var for var in variables if var not in numeric]
    frame = source.to_frame()

    terms = []
    if numeric:
        scaler = MinMaxScaler().fit(frame[numeric].astype(float))
        scaled = scaler.transform(frame[numeric].astype(float))
        target = scaler.transform(pd.DataFrame([obs[numeric].astype(float)], columns=numeric))
        # constant columns carry no information
        span = scaler.data_range_
        terms.append(np.where(span > 0, np.abs(scaled - target), 0.0))
    if categorical:
        mismatch = frame[categorical].ne(obs[categorical]).to_numpy(dtype=float)
        mismatch[frame[categorical].isna().to_numpy()] = np.nan
        terms.append(mismatch)

    distances = np.nanmean(np.hstack(terms), axis=1)
    return pd.Series(distances, index=frame.index, name="gower_distance")


def select_neighbours(
    data: object,
    observation: object,
    variables: Iterable[Hashable] | None = None,
    n: int = DEFAULT_PROFILE_CFG.neighbours,
) -> pd.DataFrame:
    """Return the ``n`` rows of ``data`` closest to ``observation`` (Gower distance).

    Rows keep their original ids as index; ties keep the original row order.
    """
    if n < 1:
        raise InvalidArgumentError(f"n must be >= 1, got {n}")
    distances = gower_distances(data, observation, variables)
    order = np.argsort(distances.to_numpy(), kind="stable")[:n]
    logger.debug("Selected %d neighbours, max distance %.4f", len(order), distances.iloc[order].max())
    return as_source(data).to_frame().iloc[order]
