"""Data contracts: sources, grids, profile tables and observation sampling."""

from .profile_columns import ProfileColumn
from .profile_table import ProfileRow, ProfileTable
from .sampling import gower_distances, select_neighbours, select_sample
from .tabular_source import DataFrameSource, RecordsSource, TabularSource, as_source
from .variable_split import VariableSplit


__all__ = [
    "DataFrameSource",
    "ProfileColumn",
    "ProfileRow",
    "ProfileTable",
    "RecordsSource",
    "TabularSource",
    "VariableSplit",
    "as_source",
    "gower_distances",
    "select_neighbours",
    "select_sample",
]
