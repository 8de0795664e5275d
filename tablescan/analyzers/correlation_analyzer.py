import math
from itertools import combinations

from ..models import CorrMatrix, PairCorr

MAX_PAIRS = 10


class PairAccumulator:
    """Sufficient statistics for Pearson's r over rows where both columns are numeric"""
    __slots__ = ("n", "sum_x", "sum_y", "sum_xx", "sum_yy", "sum_xy")

    def __init__(self):
        self.n = 0
        self.sum_x = 0.0
        self.sum_y = 0.0
        self.sum_xx = 0.0
        self.sum_yy = 0.0
        self.sum_xy = 0.0

    def add(self, x, y):
        self.n += 1
        self.sum_x += x
        self.sum_y += y
        self.sum_xx += x * x
        self.sum_yy += y * y
        self.sum_xy += x * y

    def pearson(self):
        """Pearson's r clamped to [-1, 1]; None when undefined"""
        if self.n < 2:
            return None
        n = self.n
        spread = (n * self.sum_xx - self.sum_x ** 2) * (n * self.sum_yy - self.sum_y ** 2)
        # zero (or round-off negative) variance in either column
        if not spread > 0:
            return None
        r = (n * self.sum_xy - self.sum_x * self.sum_y) / math.sqrt(spread)
        if math.isnan(r) or math.isinf(r):
            return None
        return max(-1.0, min(1.0, r))


class PairwiseCorrelation:
    """Pairwise-complete accumulators for one scope (the whole table or one group).

    Keys are (i, j) column indexes with i < j, so each unordered pair has a
    single authoritative entry.
    """

    def __init__(self):
        self.pairs = {}

    def update(self, row_numbers):
        """Feed the numeric values of one row, keyed by column index"""
        if len(row_numbers) < 2:
            return
        for i, j in combinations(sorted(row_numbers), 2):
            acc = self.pairs.get((i, j))
            if acc is None:
                acc = self.pairs[(i, j)] = PairAccumulator()
            acc.add(row_numbers[i], row_numbers[j])

    def r(self, i, j):
        acc = self.pairs.get((min(i, j), max(i, j)))
        if acc is None:
            return None
        return acc.pearson()

    def matrix(self, indexes, names):
        """Square matrix over the given column indexes; undefined pairs are 0"""
        size = len(indexes)
        values = [[0.0] * size for _ in range(size)]
        for a in range(size):
            values[a][a] = 1.0
            for b in range(a + 1, size):
                r = self.r(indexes[a], indexes[b])
                values[a][b] = values[b][a] = r if r is not None else 0.0
        return CorrMatrix(columns=[names[i] for i in indexes], values=values)

    def top_pairs(self, indexes, names, limit=MAX_PAIRS):
        """Defined pairs among indexes ranked by |r|; undefined pairs are omitted"""
        allowed = set(indexes)
        pairs = []
        for (i, j), acc in self.pairs.items():
            if i not in allowed or j not in allowed:
                continue
            r = acc.pearson()
            if r is None:
                continue
            pairs.append(PairCorr(names[i], names[j], r))
        return rank_pairs(pairs, limit)


def rank_pairs(pairs, limit=MAX_PAIRS):
    """Sort by descending |r|, ties by the concatenated names"""
    return sorted(pairs, key=lambda p: (-abs(p.r), p.a + p.b))[:limit]
