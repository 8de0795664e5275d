import pytest

from tablescan.analyzers.group_analyzer import MAX_GROUPS, GroupByAggregator


class TestGroupByAggregator:

    @pytest.fixture
    def names(self):
        return ["Region", "Site", "Value", "Other"]

    def test_key_format(self, names):
        grouper = GroupByAggregator(["region", " SITE "], names)
        assert grouper.group_key(["North", "S1", "3", ""]) == "Region=North | Site=S1"

    def test_missing_parts_are_skipped(self, names):
        grouper = GroupByAggregator(["Region", "Site"], names)
        assert grouper.group_key(["", "S1", "3", ""]) == "Site=S1"
        assert grouper.group_key(["  ", "", "3", ""]) is None

    def test_key_values_are_flattened(self, names):
        grouper = GroupByAggregator(["Region"], names)
        assert grouper.group_key(["a|b\nc", "", "", ""]) == "Region=a/b c"

    def test_unknown_columns_are_ignored(self, names):
        grouper = GroupByAggregator(["Nope"], names)
        assert not grouper.enabled

    def test_summaries(self, names):
        grouper = GroupByAggregator(["Region"], names)
        rows = [
            (["N", "", "1", ""], {2: 1.0}),
            (["N", "", "5", ""], {2: 5.0}),
            (["S", "", "", ""], {}),
        ]
        for row, numbers in rows:
            grouper.add_row(grouper.group_key(row), numbers)

        results = grouper.results([2])
        assert [(g.key, g.size) for g in results] == [("Region=N", 2), ("Region=S", 1)]
        north = results[0].metrics["Value"]
        assert (north.count, north.min, north.max, north.mean) == (2, 1.0, 5.0, 3.0)
        # a group without values for a column has no summary for it
        assert results[1].metrics == {}

    def test_ordering_and_cap(self, names):
        grouper = GroupByAggregator(["Region"], names)
        for i in range(MAX_GROUPS + 5):
            for _ in range(1 + (i % 3)):
                grouper.add_row(f"Region=g{i:02d}", {})
        results = grouper.results([])
        assert len(results) == MAX_GROUPS
        order = [(-g.size, g.key) for g in results]
        assert order == sorted(order)

    def test_per_group_correlations(self, names):
        grouper = GroupByAggregator(["Region"], names, with_correlations=True)
        for i in range(6):
            grouper.add_row("Region=N", {2: float(i), 3: float(2 * i + 1)})
        grouper.add_row("Region=S", {2: 1.0, 3: 4.0})

        results = {g.key: g for g in grouper.results([2, 3])}
        pairs = results["Region=N"].corr_pairs
        assert [(p.a, p.b) for p in pairs] == [("Value", "Other")]
        assert pairs[0].r == pytest.approx(1.0)
        assert results["Region=S"].corr_pairs == []

    def test_no_correlations_when_not_requested(self, names):
        grouper = GroupByAggregator(["Region"], names)
        for i in range(4):
            grouper.add_row("Region=N", {2: float(i), 3: float(i)})
        assert grouper.results([2, 3])[0].corr_pairs == []
