"""Profile rows and the tables that hold them."""

from collections.abc import Hashable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

import pandas as pd

from ceteris_tlbx.errors import InvalidArgumentError

from .profile_columns import ProfileColumn
from .variable_split import VariableSplit


@dataclass(frozen=True)
class ProfileRow:
    """One evaluation point of a ceteris paribus profile.

    Attributes:
        yhat: Model prediction at this point.
        vname: Name of the variable being swept.
        ids: Id of the observation the row was derived from.
        label: Model (or model/class) label the prediction belongs to.
        features: Feature values of the observation with ``vname`` overridden.
    """

    yhat: float
    vname: Hashable
    ids: Hashable
    label: str
    features: Mapping[Hashable, Any]

    @property
    def x(self) -> Any:
        """Value of the swept variable at this point."""
        return self.features[self.vname]


@dataclass(frozen=True, eq=False)
class ProfileTable:
    """Ceteris paribus profiles for a set of observations.

    Attributes:
        profiles: One row per observation x grid point x variable. Columns are the
            original features followed by ``_yhat_``, ``_vname_``, ``_ids_`` and
            ``_label_``. Rows are laid out variable by variable; inside a variable
            block each observation contributes its grid in grid order.
        observations: The observations the profiles were computed for, with
            ``_yhat_`` holding the prediction at the observation itself plus
            ``_ids_`` and ``_label_``.
        variable_splits: Grids used for the sweep.
    """

    profiles: pd.DataFrame
    observations: pd.DataFrame
    variable_splits: VariableSplit

    def __len__(self) -> int:
        return len(self.profiles)

    @property
    def variables(self) -> list[Hashable]:
        """Swept variables in table order."""
        return pd.unique(self.profiles[ProfileColumn.VNAME]).tolist()

    @property
    def labels(self) -> list[str]:
        return pd.unique(self.profiles[ProfileColumn.LABEL]).tolist()

    @property
    def feature_columns(self) -> list[Hashable]:
        reserved = ProfileColumn.reserved()
        return [col for col in self.profiles.columns if col not in reserved]

    def rows(self) -> Iterator[ProfileRow]:
        """Iterate over the table as structured :class:`ProfileRow` records."""
        features = self.feature_columns
        for record in self.profiles.to_dict(orient="records"):
            yield ProfileRow(
                yhat=float(record[ProfileColumn.YHAT]),
                vname=record[ProfileColumn.VNAME],
                ids=record[ProfileColumn.IDS],
                label=record[ProfileColumn.LABEL],
                features=MappingProxyType({col: record[col] for col in features}),
            )

    def block(self, vname: Hashable, ids: Hashable, label: str | None = None) -> pd.DataFrame:
        """Return the rows sweeping ``vname`` for a single observation."""
        mask = (self.profiles[ProfileColumn.VNAME] == vname) & (self.profiles[ProfileColumn.IDS] == ids)
        if label is not None:
            mask &= self.profiles[ProfileColumn.LABEL] == label
        return self.profiles.loc[mask]

    @classmethod
    def concat(cls, *tables: "ProfileTable") -> "ProfileTable":
        """Union of several tables (e.g. one per model); nothing is deduplicated."""
        if not tables:
            raise InvalidArgumentError("At least one ProfileTable is required")
        splits = VariableSplit()
        for table in tables:
            splits = splits.merge(table.variable_splits)
        return cls(
            profiles=pd.concat([table.profiles for table in tables], ignore_index=True),
            observations=pd.concat([table.observations for table in tables], ignore_index=True),
            variable_splits=splits,
        )
