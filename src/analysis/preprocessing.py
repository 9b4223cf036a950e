"""
Column standardisation helpers shared by the clustering reports.
"""
from typing import Iterable

import numpy as np
import pandas as pd


def mean_sd_standard(values) -> np.ndarray:
    """
    Z-score standardisation using the sample standard deviation.
    Missing values are ignored in the fit and stay missing; constant input
    maps to zeros.
    """
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        raise ValueError("Cannot standardise an empty array")

    observed = ~np.isnan(values)
    if observed.sum() < 2:
        return np.where(observed, 0.0, np.nan)
    sd = np.nanstd(values, ddof=1)
    if sd == 0:
        return np.where(observed, 0.0, np.nan)
    return (values - np.nanmean(values)) / sd


def min_max_standard(values) -> np.ndarray:
    """Rescale to [0, 1] ignoring missing values; a constant column becomes all zeros."""
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        raise ValueError("Cannot rescale an empty array")

    observed = ~np.isnan(values)
    if not observed.any():
        return values.copy()
    low, high = np.nanmin(values), np.nanmax(values)
    if high == low:
        return np.where(observed, 0.0, np.nan)
    return (values - low) / (high - low)


def standardize_frame(df: pd.DataFrame, columns: Iterable[str], method: str = 'zscore') -> pd.DataFrame:
    if method == 'zscore':
        scaler = mean_sd_standard
    elif method == 'minmax':
        scaler = min_max_standard
    else:
        raise ValueError(f"Unknown standardisation method: {method}")

    result = df.copy()
    for column in columns:
        result[column] = scaler(pd.to_numeric(df[column], errors='coerce'))
    return result


def remove_outliers_sd(df: pd.DataFrame, columns: Iterable[str], n_sd: float = 3) -> pd.DataFrame:
    mask = pd.Series(True, index=df.index)
    for column in columns:
        values = pd.to_numeric(df[column], errors='coerce')
        mean, std = values.mean(), values.std()
        if std > 0:
            mask &= (values >= mean - n_sd * std) & (values <= mean + n_sd * std)
    return df[mask]
