"""Immutable per-variable grids of split points."""

from collections.abc import Hashable, Iterable, Iterator, Mapping


class VariableSplit(Mapping[Hashable, tuple]):
    """Ordered mapping from variable name to its distinct grid values.

    Numeric grids are ascending floats; categorical grids keep first-occurrence
    order. Iteration follows the order the variables were requested in.
    """

    def __init__(self, grids: Mapping[Hashable, Iterable[object]] | None = None) -> None:
        self._grids: dict[Hashable, tuple] = {name: tuple(values) for name, values in (grids or {}).items()}

    def __getitem__(self, name: Hashable) -> tuple:
        return self._grids[name]

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._grids)

    def __len__(self) -> int:
        return len(self._grids)

    def __repr__(self) -> str:
        sizes = ", ".join(f"{name!r}: {len(values)}" for name, values in self._grids.items())
        return f"VariableSplit({{{sizes}}})"

    def grid_size(self, name: Hashable) -> int:
        return len(self._grids[name])

    @property
    def total_points(self) -> int:
        """Sum of grid sizes, i.e. synthetic rows generated per observation."""
        return sum(len(values) for values in self._grids.values())

    def restrict(self, variables: Iterable[Hashable]) -> "VariableSplit":
        """Return a split limited to ``variables``, in the given order."""
        return VariableSplit({name: self._grids[name] for name in variables})

    def merge(self, other: Mapping[Hashable, Iterable[object]]) -> "VariableSplit":
        """Union of two splits; grids already present here take precedence."""
        merged = dict(self._grids)
        for name, values in other.items():
            merged.setdefault(name, tuple(values))
        return VariableSplit(merged)
