"""Reserved column names shared by profile tables and aggregated curves."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

import pandas as pd


@dataclass(frozen=True)
class ColumnMetadata:
    """Metadata for a reserved column.

    Attributes:
        dtype: Pandas data type of the column in an empty table.
        pretty_name: Human-readable name for presentation layers.
    """

    dtype: str
    pretty_name: str


class ProfileColumn(StrEnum):
    """Columns appended by the profile engine to the original features.

    Presentation code relies on exactly these names, so they are wrapped in
    underscores to stay clear of ordinary feature names.
    """

    YHAT = "_yhat_"
    VNAME = "_vname_"
    IDS = "_ids_"
    LABEL = "_label_"
    X = "_x_"
    GROUP = "_group_"
    N = "_n_"

    def metadata(self) -> ColumnMetadata:
        """Get metadata for this column."""
        return _METADATA[self]

    @property
    def pretty_name(self) -> str:
        """Get the human-readable name for plots and tables."""
        return self.metadata().pretty_name

    @property
    def dtype(self) -> str:
        return self.metadata().dtype

    @classmethod
    def profile_columns(cls) -> list[str]:
        """Columns appended to every profile row, in table order."""
        return [cls.YHAT, cls.VNAME, cls.IDS, cls.LABEL]

    @classmethod
    def curve_columns(cls) -> list[str]:
        """Columns of an aggregated curve, in table order."""
        return [cls.VNAME, cls.X, cls.GROUP, cls.YHAT, cls.N]

    @classmethod
    def reserved(cls) -> set[str]:
        """All names a dataset must not use for its own features."""
        return {str(member) for member in cls}

    @classmethod
    def empty_columns(cls, columns: Iterable[ProfileColumn]) -> dict[ProfileColumn, pd.Series]:
        """Empty, correctly typed Series for each reserved column in ``columns``."""
        return {column: pd.Series(dtype=cls(column).dtype) for column in columns}


_METADATA: dict[ProfileColumn, ColumnMetadata] = {
    ProfileColumn.YHAT: ColumnMetadata("float64", "Prediction"),
    ProfileColumn.VNAME: ColumnMetadata("object", "Variable"),
    ProfileColumn.IDS: ColumnMetadata("object", "Observation"),
    ProfileColumn.LABEL: ColumnMetadata("object", "Model"),
    ProfileColumn.X: ColumnMetadata("object", "Variable value"),
    ProfileColumn.GROUP: ColumnMetadata("object", "Group"),
    ProfileColumn.N: ColumnMetadata("int64", "Observations"),
}
