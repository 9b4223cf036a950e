import numpy as np
import pandas as pd
import pytest

from config.settings import BIRDS
from src.analysis import (
    build_training_set,
    fit_distribution_model,
    predict_occurrence,
    run_bird_report,
    sample_pseudo_absences
)
from src.analysis.birds import baseline_grid, climate_features


def test_climate_features_skip_coordinates_and_period(climate_grid):
    assert climate_features(climate_grid) == ['temperature', 'precipitation']


def test_pseudo_absences_avoid_occupied_cells(climate_grid, bird_presences):
    grid = baseline_grid(climate_grid)
    absences = sample_pseudo_absences(grid, bird_presences, 20, random_state=0)

    assert len(absences) == 20
    assert (absences['latitude'] < 57.5).all()
    assert not absences.duplicated(subset=['longitude', 'latitude']).any()


def test_pseudo_absences_are_reproducible(climate_grid, bird_presences):
    grid = baseline_grid(climate_grid)
    first = sample_pseudo_absences(grid, bird_presences, 10, random_state=3)
    second = sample_pseudo_absences(grid, bird_presences, 10, random_state=3)
    pd.testing.assert_frame_equal(first, second)


def test_pseudo_absences_reject_bad_n(climate_grid, bird_presences):
    grid = baseline_grid(climate_grid)
    with pytest.raises(ValueError):
        sample_pseudo_absences(grid, bird_presences, -1)
    with pytest.raises(ValueError):
        sample_pseudo_absences(grid, bird_presences, 1000)


def test_training_set_is_balanced(climate_grid, bird_presences):
    training = build_training_set(bird_presences, climate_grid, random_state=0)

    assert (training['presence'] == 1).sum() == 27
    assert (training['presence'] == 0).sum() == 27
    assert (training['decade'] == 1970).all()


def test_model_separates_cold_cells(climate_grid, bird_presences):
    training = build_training_set(bird_presences, climate_grid, random_state=0)
    result = fit_distribution_model(training, ['temperature', 'precipitation'], random_state=0)

    assert result['status'] == 'success'
    assert result['cv_auc'] > 0.9
    assert result['coefficients']['temperature'] < 0
    assert result['best_l1_ratio'] in BIRDS['l1_ratios']

    predictions = predict_occurrence(result['model'], climate_grid, ['temperature', 'precipitation'])
    assert predictions['probability'].between(0, 1).all()
    north = predictions[predictions['latitude'] >= 58]['probability'].mean()
    south = predictions[predictions['latitude'] <= 55.5]['probability'].mean()
    assert north > south


def test_model_needs_both_classes():
    training = pd.DataFrame({'temperature': [1.0, 2.0, 3.0], 'presence': [1, 1, 1]})
    assert fit_distribution_model(training, ['temperature'])['status'] == 'insufficient_data'


def test_report_tracks_periods(climate_grid, bird_presences):
    report = run_bird_report(bird_presences, climate_grid, random_state=0)

    assert report['training']['n_presences'] == 27
    predictions = report['predictions']
    assert predictions['status'] == 'success'
    assert set(predictions['by_period']) == {'1970', '2010'}
    # warming lowers suitability for a cold-climate species
    assert predictions['by_period']['2010'] < predictions['by_period']['1970']
    assert len(predictions['data']) == len(climate_grid)
    assert np.isfinite(predictions['trend_slope'])


def test_report_with_too_many_presences(climate_grid):
    everywhere = climate_grid[['longitude', 'latitude']].drop_duplicates()
    report = run_bird_report(everywhere, climate_grid)
    assert report['model']['status'] == 'error'


def test_report_is_reproducible_by_default(climate_grid, bird_presences):
    first = run_bird_report(bird_presences, climate_grid)
    second = run_bird_report(bird_presences, climate_grid)

    pd.testing.assert_frame_equal(first['training']['data'], second['training']['data'])
    assert first['model']['cv_auc'] == second['model']['cv_auc']
