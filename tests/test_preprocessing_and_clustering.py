import numpy as np
import pandas as pd
import pytest

from src.analysis import (
    best_silhouette_k,
    choose_k,
    elbow_curve,
    elbow_k,
    fit_kmeans,
    gap_statistic,
    mean_sd_standard,
    min_max_standard,
    pca_projection,
    remove_outliers_sd,
    standardize_frame
)
from src.analysis.clustering import _first_se_max


def test_mean_sd_standard():
    np.testing.assert_allclose(mean_sd_standard([1, 2, 3]), [-1.0, 0.0, 1.0])


def test_mean_sd_standard_constant_and_empty():
    np.testing.assert_array_equal(mean_sd_standard([5, 5, 5]), [0.0, 0.0, 0.0])
    np.testing.assert_array_equal(mean_sd_standard([7]), [0.0])
    with pytest.raises(ValueError):
        mean_sd_standard([])


def test_min_max_standard():
    np.testing.assert_allclose(min_max_standard([2, 4, 6]), [0.0, 0.5, 1.0])
    np.testing.assert_array_equal(min_max_standard([3, 3]), [0.0, 0.0])


def test_standardisers_ignore_missing_values():
    z = mean_sd_standard([1, 2, 3, np.nan])
    np.testing.assert_allclose(z[:3], [-1.0, 0.0, 1.0])
    assert np.isnan(z[3])

    scaled = min_max_standard([1, 2, 3, np.nan])
    np.testing.assert_allclose(scaled[:3], [0.0, 0.5, 1.0])
    assert np.isnan(scaled[3])


def test_standardize_frame_keeps_unparseable_cells_missing():
    result = standardize_frame(pd.DataFrame({'x': ['1', '2', '3', 'n/a']}), ['x'])
    assert result['x'].tolist()[:3] == pytest.approx([-1.0, 0.0, 1.0])
    assert pd.isna(result['x'].iloc[3])


def test_standardize_frame_leaves_other_columns():
    df = pd.DataFrame({'x': [1, 2, 3], 'label': ['a', 'b', 'c']})
    result = standardize_frame(df, ['x'], method='minmax')
    assert result['x'].tolist() == [0.0, 0.5, 1.0]
    assert result['label'].tolist() == ['a', 'b', 'c']
    assert df['x'].tolist() == [1, 2, 3]

    with pytest.raises(ValueError):
        standardize_frame(df, ['x'], method='robust')


def test_remove_outliers_sd():
    df = pd.DataFrame({'value': [10] * 20 + [1000]})
    assert len(remove_outliers_sd(df, ['value'])) == 20


def test_fit_kmeans_rejects_bad_k(blobs):
    with pytest.raises(ValueError):
        fit_kmeans(blobs, 0)
    with pytest.raises(ValueError):
        fit_kmeans(blobs[:3], 5)


def test_elbow_finds_three_blobs(blobs):
    wss = elbow_curve(blobs, k_max=6)
    assert list(wss) == [1, 2, 3, 4, 5, 6]
    assert all(wss[k] >= wss[k + 1] for k in range(1, 6))
    assert elbow_k(wss) == 3


def test_elbow_k_short_and_flat_curves():
    assert elbow_k({1: 10.0, 2: 5.0}) == 2
    assert elbow_k({1: 4.0, 2: 4.0, 3: 4.0}) == 1


def test_gap_statistic_finds_three_blobs(blobs):
    gap = gap_statistic(blobs, k_max=5, n_refs=10, random_state=1)
    assert gap['k'] == [1, 2, 3, 4, 5]
    assert len(gap['gap']) == len(gap['se']) == 5
    assert gap['best_k'] == 3


def test_gap_statistic_needs_two_references(blobs):
    with pytest.raises(ValueError):
        gap_statistic(blobs, k_max=3, n_refs=1)


def test_first_se_max_rule():
    assert _first_se_max([0.1, 0.5, 0.6, 0.55], [0.1, 0.1, 0.1, 0.1]) == 2
    # strictly increasing gaps fall back to the largest one
    assert _first_se_max([0.1, 0.5, 0.9], [0.0, 0.0, 0.0]) == 3


def test_choose_k(blobs):
    selection = choose_k(blobs, k_max=5, n_refs=5)
    assert selection['silhouette_k'] == 3
    assert selection['elbow_k'] == 3
    assert set(selection['silhouette']) == {2, 3, 4, 5}


def test_best_silhouette_k_empty():
    assert best_silhouette_k({}) is None


def test_pca_projection(blobs):
    projection = pca_projection(blobs, n_components=2)
    assert projection['scores'].shape == (90, 2)
    assert projection['cumulative_variance'][-1] == pytest.approx(1.0)


def test_pca_projection_caps_components():
    projection = pca_projection(np.arange(10.0), n_components=2)
    assert projection['scores'].shape == (10, 1)
