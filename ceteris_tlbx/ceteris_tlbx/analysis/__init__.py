"""Profile computation: split selection, profile building and aggregation."""

from .profile_aggregator import AggregatedCurve, Grouping, ProfileAggregator, aggregate
from .profile_builder import ProfileBuilder, build_profiles, default_predict
from .split_selector import SplitSelector, compute_splits


__all__ = [
    "AggregatedCurve",
    "Grouping",
    "ProfileAggregator",
    "ProfileBuilder",
    "SplitSelector",
    "aggregate",
    "build_profiles",
    "compute_splits",
    "default_predict",
]
