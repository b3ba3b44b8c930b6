"""Ceteris paribus (individual conditional expectation) profiles for black-box models."""

from .analysis import (
    AggregatedCurve,
    Grouping,
    ProfileAggregator,
    ProfileBuilder,
    SplitSelector,
    aggregate,
    build_profiles,
    compute_splits,
    default_predict,
)
from .data import ProfileColumn, ProfileRow, ProfileTable, TabularSource, VariableSplit, as_source
from .errors import InvalidArgumentError
from .explainer import ModelExplainer


__all__ = [
    "AggregatedCurve",
    "Grouping",
    "InvalidArgumentError",
    "ModelExplainer",
    "ProfileAggregator",
    "ProfileBuilder",
    "ProfileColumn",
    "ProfileRow",
    "ProfileTable",
    "SplitSelector",
    "TabularSource",
    "VariableSplit",
    "aggregate",
    "as_source",
    "build_profiles",
    "compute_splits",
    "default_predict",
]
