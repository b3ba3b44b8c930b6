"""Storage-agnostic access to the observations a profile is computed for."""

from abc import ABC, abstractmethod
from collections.abc import Hashable, Iterable, Mapping, Sequence
from functools import singledispatch

import numpy as np
import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype

from ceteris_tlbx.errors import InvalidArgumentError


class TabularSource(ABC):
    """Capability the split selector and profile builder depend on.

    Adapters for new storage backends subclass this and register themselves
    with :func:`as_source`:

    ```python
    class ParquetSource(TabularSource):
        ...

    @as_source.register(pq.ParquetFile)
    def _(data):
        return ParquetSource(data)
    ```
    """

    @property
    @abstractmethod
    def n_rows(self) -> int:
        """Number of observations."""
        ...

    @property
    @abstractmethod
    def columns(self) -> list[Hashable]:
        """Column names in source order."""
        ...

    @abstractmethod
    def column(self, name: Hashable) -> pd.Series:
        """Return a positionally indexed copy of one column."""
        ...

    @abstractmethod
    def row_ids(self) -> pd.Index:
        """Return explicit row labels, or 1-based positions when there are none."""
        ...

    @abstractmethod
    def repeat_rows(self, times: int) -> pd.DataFrame:
        """Return every row repeated ``times`` times consecutively.

        The result has a fresh positional index and never shares memory
        with the source.
        """
        ...

    @abstractmethod
    def subset(self, positions: Sequence[int]) -> "TabularSource":
        """Return a positional row subset that keeps the original row ids."""
        ...

    def has_column(self, name: Hashable) -> bool:
        return name in self.columns

    def require_columns(self, names: Iterable[Hashable]) -> None:
        """Raise if any of ``names`` is not a column of this source."""
        missing = [name for name in names if not self.has_column(name)]
        if missing:
            raise InvalidArgumentError(f"Variables not found in data: {missing}. Available: {self.columns}")

    def is_numeric(self, name: Hashable) -> bool:
        """Numeric, non-boolean columns get quantile grids; everything else is categorical."""
        series = self.column(name)
        return is_numeric_dtype(series) and not is_bool_dtype(series)

    def to_frame(self) -> pd.DataFrame:
        """Materialize the source as a DataFrame indexed by row id."""
        frame = self.repeat_rows(1)
        frame.index = self.row_ids()
        return frame

    def __len__(self) -> int:
        return self.n_rows


class DataFrameSource(TabularSource):
    """Adapter over an in-memory :class:`pandas.DataFrame`.

    A default ``RangeIndex(0..n-1)`` is treated as "no explicit labels", so
    ids become ``1..n``; any other index supplies the ids.
    """

    def __init__(self, df: pd.DataFrame) -> None:
        self._df = df

    @property
    def n_rows(self) -> int:
        return len(self._df)

    @property
    def columns(self) -> list[Hashable]:
        return self._df.columns.tolist()

    def column(self, name: Hashable) -> pd.Series:
        self.require_columns([name])
        return self._df[name].reset_index(drop=True)

    def row_ids(self) -> pd.Index:
        index = self._df.index
        if isinstance(index, pd.RangeIndex) and index.start == 0 and index.step == 1:
            return pd.RangeIndex(1, self.n_rows + 1)
        return index.copy()

    def repeat_rows(self, times: int) -> pd.DataFrame:
        positions = np.repeat(np.arange(self.n_rows), times)
        return self._df.iloc[positions].reset_index(drop=True)

    def subset(self, positions: Sequence[int]) -> "DataFrameSource":
        positions = list(positions)
        frame = self._df.iloc[positions].copy()
        frame.index = pd.Index(self.row_ids()[positions].tolist())
        return DataFrameSource(frame)


class RecordsSource(DataFrameSource):
    """Adapter over a sequence of mappings (one mapping per observation).

    Column order follows the first-seen key order across records.
    """

    def __init__(self, records: Iterable[Mapping[Hashable, object]], ids: Sequence[Hashable] | None = None) -> None:
        rows = [dict(record) for record in records]
        frame = pd.DataFrame(rows)
        if ids is not None:
            if len(ids) != len(rows):
                raise InvalidArgumentError(f"Got {len(ids)} ids for {len(rows)} records")
            frame.index = pd.Index(list(ids))
        super().__init__(frame)


@singledispatch
def as_source(data: object) -> TabularSource:
    """Wrap supported inputs in a :class:`TabularSource`.

    Supports TabularSource instances (returned unchanged), DataFrames and
    sequences of mappings. Other backends plug in via ``as_source.register``.
    """
    raise InvalidArgumentError(
        f"Unsupported data type '{type(data).__name__}'. Register an adapter with as_source.register().",
    )


@as_source.register(TabularSource)
def _(data: TabularSource) -> TabularSource:
    return data


@as_source.register(pd.DataFrame)
def _(data: pd.DataFrame) -> TabularSource:
    return DataFrameSource(data)


@as_source.register(list)
@as_source.register(tuple)
def _(data: Sequence[Mapping[Hashable, object]]) -> TabularSource:
    return RecordsSource(data)
