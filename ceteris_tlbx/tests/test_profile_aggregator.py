"""Tests for ProfileAggregator and aggregate."""

from dataclasses import replace

import numpy as np
import pandas as pd
import pytest

from ceteris_tlbx.analysis.profile_aggregator import AggregatedCurve, Grouping, ProfileAggregator, aggregate
from ceteris_tlbx.analysis.profile_builder import build_profiles
from ceteris_tlbx.data.profile_columns import ProfileColumn
from ceteris_tlbx.data.profile_table import ProfileTable
from ceteris_tlbx.errors import InvalidArgumentError


@pytest.fixture
def grouped_frame() -> pd.DataFrame:
    """Four observations in two districts with distinct surfaces."""
    return pd.DataFrame(
        {
            "floor": [1, 2, 3, 4],
            "surface": [10.0, 30.0, 100.0, 200.0],
            "district": ["Ochota", "Ochota", "Wola", "Wola"],
        },
    )


@pytest.fixture
def table(grouped_frame: pd.DataFrame, sum_fn) -> ProfileTable:
    splits = {"floor": [1.0, 5.0, 9.0], "district": ["Ochota", "Wola"]}
    return build_profiles(grouped_frame, splits, model=None, predict_fn=sum_fn, label="sum")


class TestProfileAggregator:
    """Test aggregation of profiles into mean curves."""

    def test_identity_prediction_mean_equals_grid_value(self, identity_fn) -> None:
        """Test two observations, three grid points, prediction = swept value."""
        data = pd.DataFrame({"floor": [2, 8], "surface": [40.0, 70.0]})
        grid = [1.0, 5.0, 9.0]
        profiles = build_profiles(data, {"floor": grid}, model=None, predict_fn=identity_fn)
        curve = aggregate(profiles)
        for value in grid:
            assert curve["floor", value] == value
        assert curve.frame[ProfileColumn.N].tolist() == [2, 2, 2]

    def test_ungrouped_mean(self, table: ProfileTable, grouped_frame: pd.DataFrame) -> None:
        """Test that the ungrouped curve averages over all observations."""
        curve = aggregate(table, variables=["floor"])
        mean_surface = grouped_frame["surface"].mean()
        for x in [1.0, 5.0, 9.0]:
            assert curve.mean("floor", x) == pytest.approx(x + mean_surface)
        assert curve.groups == [None]
        assert curve.grouping == Grouping.none()

    def test_curve_follows_grid_order(self, table: ProfileTable) -> None:
        """Test that curve rows are ordered by variable, then grid value."""
        frame = aggregate(table).frame
        assert frame[ProfileColumn.VNAME].tolist() == ["floor"] * 3 + ["district"] * 2
        assert frame[ProfileColumn.X].tolist() == [1.0, 5.0, 9.0, "Ochota", "Wola"]

    def test_group_by_feature_uses_original_values(self, table: ProfileTable) -> None:
        """Test grouping by a categorical feature of each observation."""
        curve = aggregate(table, group_by="district", variables=["floor"])
        assert curve.grouping == Grouping.by_feature("district")
        assert sorted(curve.groups) == ["Ochota", "Wola"]
        assert curve["floor", 5.0, "Ochota"] == pytest.approx(5.0 + 20.0)
        assert curve["floor", 5.0, "Wola"] == pytest.approx(5.0 + 150.0)

    def test_group_by_swept_variable(self, table: ProfileTable) -> None:
        """Test grouping by the variable being swept uses the un-swept value."""
        curve = aggregate(table, group_by="district", variables=["district"])
        # sum_fn ignores district, so each group keeps its own mean surface
        assert curve["district", "Wola", "Ochota"] == pytest.approx(1.5 + 20.0)
        assert curve["district", "Ochota", "Wola"] == pytest.approx(3.5 + 150.0)

    def test_group_by_label(self, grouped_frame: pd.DataFrame, sum_fn) -> None:
        """Test grouping by model label across several tables."""
        splits = {"floor": [1.0, 9.0]}
        base = build_profiles(grouped_frame, splits, model=None, predict_fn=sum_fn, label="base")
        shifted = build_profiles(
            grouped_frame,
            splits,
            model=None,
            predict_fn=sum_fn,
            predict_kwargs={"offset": 10.0},
            label="shifted",
        )
        curve = aggregate([base, shifted], group_by=ProfileColumn.LABEL)
        assert curve.grouping.kind == "label"
        assert curve["floor", 1.0, "shifted"] - curve["floor", 1.0, "base"] == pytest.approx(10.0)

    def test_tables_contribute_independently(self, grouped_frame: pd.DataFrame, sum_fn) -> None:
        """Test that observation ids are not deduplicated across tables."""
        splits = {"floor": [1.0]}
        first = build_profiles(grouped_frame, splits, model=None, predict_fn=sum_fn, label="a")
        second = build_profiles(grouped_frame, splits, model=None, predict_fn=sum_fn, label="b")
        curve = aggregate([first, second])
        assert curve.frame[ProfileColumn.N].tolist() == [8]

    def test_group_by_feature_with_colliding_ids_and_labels(self, sum_fn) -> None:
        """Test that each table looks up group values among its own observations."""
        ochota = pd.DataFrame({"floor": [1, 2], "surface": [10.0, 30.0], "district": ["Ochota", "Ochota"]})
        wola = pd.DataFrame({"floor": [3, 4], "surface": [100.0, 200.0], "district": ["Wola", "Wola"]})
        # same default label and ids 1..2 in both tables
        first = build_profiles(ochota, {"floor": [1.0]}, model=None, predict_fn=sum_fn)
        second = build_profiles(wola, {"floor": [1.0]}, model=None, predict_fn=sum_fn)
        assert first.labels == second.labels

        curve = aggregate([first, second], group_by="district")
        assert sorted(curve.groups) == ["Ochota", "Wola"]
        assert curve["floor", 1.0, "Ochota"] == pytest.approx(1.0 + 20.0)
        assert curve["floor", 1.0, "Wola"] == pytest.approx(1.0 + 150.0)
        assert curve.frame[ProfileColumn.N].tolist() == [2, 2]

    def test_group_by_vname(self, table: ProfileTable, grouped_frame: pd.DataFrame) -> None:
        """Test that grouping by the swept variable keys each curve by its name."""
        curve = aggregate(table, group_by=ProfileColumn.VNAME)
        assert curve.grouping == Grouping.by_vname()
        assert curve.groups == ["floor", "district"]
        assert curve["floor", 5.0, "floor"] == pytest.approx(5.0 + grouped_frame["surface"].mean())

    def test_group_by_ids_reproduces_profiles(self, table: ProfileTable) -> None:
        """Test that grouping by observation id returns the individual profiles."""
        curve = aggregate(table, group_by=Grouping.by_ids(), variables=["floor"])
        profiles = table.profiles.loc[table.profiles[ProfileColumn.VNAME] == "floor"]
        for _, row in profiles.iterrows():
            assert curve["floor", row["floor"], row[ProfileColumn.IDS]] == pytest.approx(row[ProfileColumn.YHAT])

    def test_numeric_curve_sorted_across_grids(self, grouped_frame: pd.DataFrame, identity_fn) -> None:
        """Test that numeric grid values from different tables are ordered ascending."""
        first = build_profiles(grouped_frame, {"floor": [1.0, 5.0]}, model=None, predict_fn=identity_fn, label="a")
        second = build_profiles(grouped_frame, {"floor": [3.0, 9.0]}, model=None, predict_fn=identity_fn, label="b")
        curve = aggregate([first, second])
        assert curve.frame[ProfileColumn.X].tolist() == [1.0, 3.0, 5.0, 9.0]
        assert curve.frame[ProfileColumn.YHAT].tolist() == [1.0, 3.0, 5.0, 9.0]

    def test_categorical_curve_follows_union_of_grids(self, grouped_frame: pd.DataFrame, sum_fn) -> None:
        """Test that categorical values keep first-seen order across all grids."""
        first = build_profiles(grouped_frame, {"district": ["Wola"]}, model=None, predict_fn=sum_fn, label="a")
        second = build_profiles(
            grouped_frame,
            {"district": ["Ochota", "Mokotow", "Wola"]},
            model=None,
            predict_fn=sum_fn,
            label="b",
        )
        curve = aggregate([first, second])
        assert curve.frame[ProfileColumn.X].tolist() == ["Wola", "Ochota", "Mokotow"]

    def test_order_independent(self, table: ProfileTable) -> None:
        """Test that shuffling profile rows does not change the curve."""
        shuffled = replace(table, profiles=table.profiles.sample(frac=1.0, random_state=3))
        expected = aggregate(table, group_by="district").as_mapping()
        actual = aggregate(shuffled, group_by="district").as_mapping()
        assert actual.keys() == expected.keys()
        for key, value in expected.items():
            assert actual[key] == pytest.approx(value)

    def test_variables_restrict_curve(self, table: ProfileTable) -> None:
        """Test that only requested variables are aggregated."""
        curve = aggregate(table, variables=["district", "unknown"])
        assert curve.variables == ["district"]
        assert len(curve.for_variable("district")) == 2

    def test_empty_variable_intersection_raises(self, table: ProfileTable) -> None:
        """Test that no overlap between requested and profiled variables raises."""
        with pytest.raises(InvalidArgumentError, match=r"do not overlap"):
            aggregate(table, variables=["surface"])

    def test_unknown_group_by_raises(self, table: ProfileTable) -> None:
        """Test that group_by must be a feature or a reserved key."""
        with pytest.raises(InvalidArgumentError, match=r"Cannot group by"):
            aggregate(table, group_by="nonexistent")

    def test_no_tables_raises(self) -> None:
        """Test that at least one table is required."""
        with pytest.raises(InvalidArgumentError):
            aggregate([])

    def test_result_before_fit_raises(self, table: ProfileTable) -> None:
        """Test that result() requires fit()."""
        with pytest.raises(ValueError, match=r"Call fit\(\) first"):
            ProfileAggregator(table).result()

    def test_curve_mapping(self, table: ProfileTable) -> None:
        """Test the mapping view of a curve."""
        curve = ProfileAggregator(table).fit().result()
        assert isinstance(curve, AggregatedCurve)
        mapping = curve.as_mapping()
        assert len(mapping) == len(curve) == 5
        assert ("floor", 1.0, None) in mapping
        assert np.isfinite(list(mapping.values())).all()


class TestGrouping:
    """Test resolution of group_by arguments into explicit modes."""

    def test_resolve(self) -> None:
        """Test each supported group_by form."""
        features = ["floor", "district"]
        assert Grouping.resolve(None, features).kind == "none"
        assert Grouping.resolve("_label_", features).kind == "label"
        assert Grouping.resolve("_ids_", features).kind == "ids"
        assert Grouping.resolve("_vname_", features) == Grouping.by_vname()
        assert Grouping.resolve("district", features) == Grouping("feature", "district")
        assert Grouping.resolve(Grouping.by_label(), features) == Grouping.by_label()

    def test_resolve_unknown_feature(self) -> None:
        """Test that explicit feature grouping is validated too."""
        with pytest.raises(InvalidArgumentError):
            Grouping.resolve(Grouping.by_feature("nonexistent"), ["floor"])
