from collections import namedtuple

import numpy as np

MIN_VALUES = 8
MAD_SCALE = 0.6745

OutlierStats = namedtuple("OutlierStats", ["count", "max_abs_z", "threshold"])


def median_mad(values):
    """Median and median absolute deviation of values"""
    data = np.asarray(values, dtype=float)
    if data.size == 0:
        return 0.0, 0.0
    median = float(np.median(data))
    mad = float(np.median(np.abs(data - median)))
    return median, mad


def detect_outliers(values, threshold):
    """Count values whose robust z-score exceeds threshold.

    Returns None for fewer than MIN_VALUES values. With zero MAD nothing is
    flagged and the max |z| stays 0.
    """
    if len(values) < MIN_VALUES:
        return None
    median, mad = median_mad(values)
    if mad == 0:
        return OutlierStats(0, 0.0, threshold)
    # Modified Z-score (using median)
    z = np.abs(MAD_SCALE * (np.asarray(values, dtype=float) - median) / mad)
    return OutlierStats(int(np.count_nonzero(z > threshold)), float(z.max()), threshold)
