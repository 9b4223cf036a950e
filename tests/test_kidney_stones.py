import pandas as pd

from src.analysis import (
    analyze_simpsons_paradox,
    chi_squared_size_vs_treatment,
    fit_success_model,
    run_kidney_stone_report,
    success_rates
)
from src.data import kidney_stone_data


def test_success_rates_by_treatment():
    rates = success_rates(kidney_stone_data(), ['treatment']).set_index('treatment')
    assert rates.loc['A', 'successes'] == 273
    assert rates.loc['B', 'successes'] == 289
    assert round(rates.loc['A', 'success_rate'], 3) == 0.780
    assert round(rates.loc['B', 'success_rate'], 3) == 0.826


def test_simpsons_paradox_detected():
    result = analyze_simpsons_paradox(kidney_stone_data())
    assert result['status'] == 'success'
    assert result['overall_winner'] == 'B'
    assert result['stratum_winners'] == {'large': 'A', 'small': 'A'}
    assert result['paradox_detected'] is True
    assert "Simpson's paradox" in result['interpretation']


def test_no_paradox_when_stratified_agrees():
    df = pd.DataFrame({
        'treatment': ['A'] * 4 + ['B'] * 4,
        'stone_size': ['small', 'small', 'large', 'large'] * 2,
        'success': [1, 1, 1, 0, 1, 0, 0, 0],
    })
    result = analyze_simpsons_paradox(df)
    assert result['overall_winner'] == 'A'
    assert result['paradox_detected'] is False


def test_single_treatment_is_insufficient():
    df = kidney_stone_data()
    result = analyze_simpsons_paradox(df[df['treatment'] == 'A'])
    assert result['status'] == 'insufficient_data'


def test_stone_size_depends_on_treatment():
    result = chi_squared_size_vs_treatment(kidney_stone_data())
    assert result['status'] == 'success'
    assert result['degrees_of_freedom'] == 1
    assert result['statistically_significant'] is True


def test_logistic_model_favours_treatment_a_given_size():
    result = fit_success_model(kidney_stone_data())
    assert result['status'] == 'success'
    terms = {row['term']: row for row in result['coefficients']}
    assert terms['treatment[T.B]']['odds_ratio'] < 1
    assert terms['stone_size[T.small]']['odds_ratio'] > 1
    assert result['n_observations'] == 700


def test_report_uses_built_in_data():
    report = run_kidney_stone_report()
    assert set(report) == {'success_by_treatment', 'simpsons_paradox', 'size_vs_treatment', 'success_model'}
    assert all(section['status'] == 'success' for section in report.values())
