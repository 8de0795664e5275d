import numpy as np
import pytest

from tablescan.analyzers.correlation_analyzer import PairAccumulator, PairwiseCorrelation, rank_pairs
from tablescan.models import PairCorr


def rows_from_columns(*columns):
    """Row dicts {index: value} skipping None cells"""
    rows = []
    for cells in zip(*columns):
        rows.append({i: x for i, x in enumerate(cells) if x is not None})
    return rows


class TestPairAccumulator:

    def test_matches_numpy(self):
        rng = np.random.default_rng(3)
        x = rng.normal(size=50)
        y = 0.6 * x + rng.normal(size=50)
        acc = PairAccumulator()
        for a, b in zip(x, y):
            acc.add(a, b)
        assert acc.pearson() == pytest.approx(np.corrcoef(x, y)[0, 1])

    def test_perfect_negative(self):
        acc = PairAccumulator()
        for a in range(10):
            acc.add(a, -2 * a + 1)
        assert acc.pearson() == pytest.approx(-1.0)
        assert acc.pearson() >= -1.0

    def test_undefined_cases(self):
        single = PairAccumulator()
        single.add(1.0, 2.0)
        assert single.pearson() is None

        constant = PairAccumulator()
        for a in range(5):
            constant.add(float(a), 7.0)
        assert constant.pearson() is None


class TestPairwiseCorrelation:

    def test_pairwise_complete(self):
        a = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]
        b = [2.0, 1.0, 4.0, 3.0, 6.0, 5.0]
        c = [1.5, 2.5, 2.0, 4.5, 5.0, 7.0]
        corr = PairwiseCorrelation()
        for row in rows_from_columns(a, b, c):
            corr.update(row)
        before = corr.r(1, 2)

        # a row missing column 0 only touches pairs that involve column 0
        corr.update({1: 100.0})
        corr.update({0: 9.0, 2: 8.0})
        assert corr.r(1, 2) == before
        assert corr.pairs[(1, 2)].n == 6
        assert corr.pairs[(0, 2)].n == 7

    def test_uses_only_joint_rows(self):
        a = [1.0, 2.0, None, 4.0, 5.0]
        b = [2.0, None, 6.0, 8.0, 11.0]
        corr = PairwiseCorrelation()
        for row in rows_from_columns(a, b):
            corr.update(row)
        expected = np.corrcoef([1.0, 4.0, 5.0], [2.0, 8.0, 11.0])[0, 1]
        assert corr.r(0, 1) == pytest.approx(expected)
        assert corr.r(1, 0) == corr.r(0, 1)

    def test_matrix_is_symmetric(self):
        rng = np.random.default_rng(11)
        data = rng.normal(size=(40, 4))
        data[::5, 2] = np.nan
        corr = PairwiseCorrelation()
        for row in data:
            corr.update({i: float(x) for i, x in enumerate(row) if not np.isnan(x)})

        matrix = corr.matrix([0, 1, 2, 3], ["a", "b", "c", "d"])
        values = np.array(matrix.values)
        assert matrix.columns == ["a", "b", "c", "d"]
        assert np.array_equal(values, values.T)
        assert np.all(np.diag(values) == 1.0)
        assert np.all(np.abs(values) <= 1.0)

    def test_undefined_pairs_are_zero_in_matrix_and_skipped_in_top_pairs(self):
        corr = PairwiseCorrelation()
        for i in range(5):
            corr.update({0: float(i), 1: 3.0, 2: float(i * i)})
        matrix = corr.matrix([0, 1, 2], ["x", "flat", "sq"])
        assert matrix.value("x", "flat") == 0.0
        assert matrix.value("flat", "x") == 0.0

        pairs = corr.top_pairs([0, 1, 2], ["x", "flat", "sq"])
        assert [(p.a, p.b) for p in pairs] == [("x", "sq")]

    def test_top_pairs_respects_allowed_indexes(self):
        corr = PairwiseCorrelation()
        for i in range(6):
            corr.update({0: float(i), 1: float(i % 3), 2: float(-i)})
        pairs = corr.top_pairs([0, 2], ["a", "b", "c"])
        assert len(pairs) == 1
        assert pairs[0].r == pytest.approx(-1.0)


class TestRankPairs:

    def test_orders_by_abs_r_then_names(self):
        pairs = [
            PairCorr("b", "c", 0.5),
            PairCorr("a", "d", -0.9),
            PairCorr("a", "c", 0.5),
            PairCorr("c", "d", 0.1),
        ]
        ranked = rank_pairs(pairs)
        assert [(p.a, p.b) for p in ranked] == [("a", "d"), ("a", "c"), ("b", "c"), ("c", "d")]

    def test_limit(self):
        pairs = [PairCorr(f"c{i}", "z", i / 20) for i in range(15)]
        assert len(rank_pairs(pairs)) == 10
        assert len(rank_pairs(pairs, 3)) == 3
