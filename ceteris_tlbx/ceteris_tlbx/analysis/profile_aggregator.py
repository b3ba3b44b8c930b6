"""Aggregate many ceteris paribus profiles into partial-dependence style curves."""

import logging
from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from functools import cached_property
from typing import Literal

import pandas as pd
from pandas.api.types import is_bool, is_number

from ceteris_tlbx.data.profile_columns import ProfileColumn
from ceteris_tlbx.data.profile_table import ProfileTable
from ceteris_tlbx.errors import InvalidArgumentError

from .base_analyser import BaseAnalyser


logger = logging.getLogger(__name__)

CURVE_COLUMNS = ProfileColumn.curve_columns()

GroupingKind = Literal["none", "feature", "label", "ids", "vname"]


@dataclass(frozen=True)
class Grouping:
    """How profiles are partitioned before averaging.

    Attributes:
        kind: ``"none"`` (one group of all observations), ``"feature"`` (the
            observation's original value of ``key``), ``"label"`` (model / source
            label), ``"ids"`` (observation id, i.e. no averaging across rows) or
            ``"vname"`` (the swept variable, so each curve is keyed by its own name).
        key: Feature name for ``kind="feature"``, otherwise the reserved column.
    """

    kind: GroupingKind = "none"
    key: Hashable | None = None

    @classmethod
    def none(cls) -> "Grouping":
        return cls()

    @classmethod
    def by_feature(cls, name: Hashable) -> "Grouping":
        return cls("feature", name)

    @classmethod
    def by_label(cls) -> "Grouping":
        return cls("label", ProfileColumn.LABEL)

    @classmethod
    def by_ids(cls) -> "Grouping":
        return cls("ids", ProfileColumn.IDS)

    @classmethod
    def by_vname(cls) -> "Grouping":
        return cls("vname", ProfileColumn.VNAME)

    @classmethod
    def resolve(cls, group_by: "Grouping | Hashable | None", features: Iterable[Hashable]) -> "Grouping":
        """Map a ``group_by`` argument to an explicit grouping mode.

        ``None`` means no grouping, ``"_label_"``, ``"_ids_"`` and ``"_vname_"``
        select the reserved modes and any feature column selects feature grouping.

        Raises:
            InvalidArgumentError: If ``group_by`` names neither a reserved key nor a feature.
        """
        features = list(features)
        if isinstance(group_by, Grouping):
            grouping = group_by
        elif group_by is None:
            grouping = cls.none()
        elif group_by == ProfileColumn.LABEL:
            grouping = cls.by_label()
        elif group_by == ProfileColumn.IDS:
            grouping = cls.by_ids()
        elif group_by == ProfileColumn.VNAME:
            grouping = cls.by_vname()
        else:
            grouping = cls.by_feature(group_by)

        if grouping.kind == "feature" and grouping.key not in features:
            raise InvalidArgumentError(
                f"Cannot group by '{grouping.key}': use '{ProfileColumn.LABEL}', '{ProfileColumn.IDS}', "
                f"'{ProfileColumn.VNAME}' or one of the features {features}",
            )
        return grouping


@dataclass(frozen=True, eq=False)
class AggregatedCurve:
    """Mean prediction per variable, grid value and group.

    Attributes:
        frame: DataFrame with columns ``_vname_``, ``_x_`` (grid value), ``_group_``
            (``None`` when ungrouped), ``_yhat_`` (mean prediction) and ``_n_``
            (number of profile rows averaged). Ordered by variable, then ascending
            ``_x_`` for numeric grids or first-seen grid order otherwise.
        grouping: Grouping the curve was computed with.
    """

    frame: pd.DataFrame
    grouping: Grouping

    def __len__(self) -> int:
        return len(self.frame)

    def __getitem__(self, key: tuple) -> float:
        """Look up ``curve[vname, x]`` or ``curve[vname, x, group]``."""
        if len(key) == 2:
            key = (*key, None)
        return self.as_mapping()[key]

    @property
    def variables(self) -> list[Hashable]:
        return self.frame[ProfileColumn.VNAME].unique().tolist()

    @property
    def groups(self) -> list[Hashable]:
        return self.frame[ProfileColumn.GROUP].unique().tolist()

    @cached_property
    def _mapping(self) -> dict[tuple, float]:
        return {
            (vname, x, group): float(yhat)
            for vname, x, group, yhat in zip(
                self.frame[ProfileColumn.VNAME],
                self.frame[ProfileColumn.X],
                self.frame[ProfileColumn.GROUP],
                self.frame[ProfileColumn.YHAT],
                strict=True,
            )
        }

    def as_mapping(self) -> dict[tuple, float]:
        """Return ``{(vname, x, group): mean yhat}``."""
        return dict(self._mapping)

    def mean(self, vname: Hashable, x: object, group: Hashable | None = None) -> float:
        return self._mapping[(vname, x, group)]

    def for_variable(self, vname: Hashable) -> pd.DataFrame:
        """Curve rows of a single variable."""
        return self.frame.loc[self.frame[ProfileColumn.VNAME] == vname].reset_index(drop=True)


class ProfileAggregator(BaseAnalyser):
    """Average profiles from one or more tables into aggregated curves.

    Tables are combined by plain union: observation ids are not deduplicated, so
    each table (model) contributes its rows independently. Within each
    ``(group, variable, grid value)`` cell the mean of ``_yhat_`` is taken, which
    does not depend on row order.

    Example:
        >>> curve = ProfileAggregator([cp_lm, cp_rf], group_by="_label_", variables=["surface"]).fit().result()
        >>> curve.for_variable("surface").head()
    """

    def __init__(
        self,
        profile_tables: ProfileTable | Iterable[ProfileTable],
        group_by: Grouping | Hashable | None = None,
        variables: Iterable[Hashable] | None = None,
    ) -> None:
        """Validate the tables, grouping and variable selection.

        Raises:
            InvalidArgumentError: If no table is given, ``variables`` does not
                overlap with the profiled variables or ``group_by`` is unknown.
        """
        tables = [profile_tables] if isinstance(profile_tables, ProfileTable) else list(profile_tables)
        if not tables:
            raise InvalidArgumentError("At least one ProfileTable is required")
        self._tables = tables
        self._table = ProfileTable.concat(*tables)

        available = self._table.variables
        if variables is None:
            self.variables = available
        else:
            requested = list(variables)
            self.variables = [name for name in available if name in requested]
            if not self.variables:
                raise InvalidArgumentError(f"Variables {requested} do not overlap with {available}")

        self.grouping = Grouping.resolve(group_by, self._table.feature_columns)
        self._curve: AggregatedCurve | None = None

    def _group_keys(self, table: ProfileTable, profiles: pd.DataFrame) -> pd.Series:
        """Group key of every row in ``profiles``, which all come from ``table``."""
        if self.grouping.kind in ("label", "ids", "vname"):
            return profiles[self.grouping.key]

        # original (un-swept) value of the feature, looked up in the row's own table
        key = self.grouping.key
        original = table.observations[[ProfileColumn.LABEL, ProfileColumn.IDS, key]].drop_duplicates(
            [ProfileColumn.LABEL, ProfileColumn.IDS],
        )
        merged = profiles[[ProfileColumn.LABEL, ProfileColumn.IDS]].merge(
            original,
            on=[ProfileColumn.LABEL, ProfileColumn.IDS],
            how="left",
        )
        return pd.Series(merged[key].to_numpy(), index=profiles.index)

    def _cells(self, vname: Hashable) -> pd.DataFrame:
        """``(x, group, yhat)`` of every profile row of ``vname`` across all tables."""
        frames = []
        for table in self._tables:
            profiles = table.profiles.loc[table.profiles[ProfileColumn.VNAME] == vname]
            if profiles.empty:
                continue
            cells = pd.DataFrame(
                {
                    ProfileColumn.X: profiles[vname].astype(object),
                    ProfileColumn.YHAT: profiles[ProfileColumn.YHAT].astype(float),
                },
            )
            if self.grouping.kind != "none":
                cells[ProfileColumn.GROUP] = self._group_keys(table, profiles)
            frames.append(cells)
        return pd.concat(frames, ignore_index=True)

    def _grid_order(self, vname: Hashable) -> dict[object, int]:
        """Position of each grid value in the union of all tables' grids."""
        position: dict[object, int] = {}
        for table in self._tables:
            for value in table.variable_splits.get(vname, ()):
                position.setdefault(value, len(position))
        return position

    def _aggregate_variable(self, vname: Hashable) -> pd.DataFrame:
        cells = self._cells(vname)
        keys: list[Hashable] = [ProfileColumn.X]
        if self.grouping.kind != "none":
            keys.append(ProfileColumn.GROUP)

        curve = (
            cells.groupby(keys, sort=False, dropna=False)
            .agg(**{ProfileColumn.YHAT: (ProfileColumn.YHAT, "mean"), ProfileColumn.N: (ProfileColumn.YHAT, "size")})
            .reset_index()
        )
        if self.grouping.kind == "none":
            curve[ProfileColumn.GROUP] = None

        if all(is_number(value) and not is_bool(value) for value in curve[ProfileColumn.X]):
            sort_key = lambda s: s.astype(float)  # noqa: E731
        else:
            position = self._grid_order(vname)
            sort_key = lambda s: s.map(lambda v: position.get(v, len(position)))  # noqa: E731
        curve = curve.sort_values(ProfileColumn.X, key=sort_key, kind="stable")
        curve.insert(0, ProfileColumn.VNAME, vname)
        return curve[CURVE_COLUMNS]

    def fit(self) -> "ProfileAggregator":
        curves = []
        for vname in self.variables:
            curves.append(self._aggregate_variable(vname))
            logger.debug("Aggregated '%s' into %d curve points", vname, len(curves[-1]))

        frame = pd.concat(curves, ignore_index=True) if curves else pd.DataFrame(ProfileColumn.empty_columns(CURVE_COLUMNS))
        if self.grouping.kind == "none":
            frame[ProfileColumn.GROUP] = pd.Series([None] * len(frame), index=frame.index, dtype=object)
        self._curve = AggregatedCurve(frame=frame, grouping=self.grouping)
        return self

    def result(self) -> AggregatedCurve:
        self._check_fitted(self._curve)
        return self._curve


def aggregate(
    profile_tables: ProfileTable | Iterable[ProfileTable],
    group_by: Grouping | Hashable | None = None,
    variables: Iterable[Hashable] | None = None,
) -> AggregatedCurve:
    """Functional shortcut for ``ProfileAggregator(...).fit().result()``."""
    return ProfileAggregator(profile_tables, group_by=group_by, variables=variables).fit().result()
