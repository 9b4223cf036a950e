import pandas as pd

from src.analysis import compare_genders, run_breathalyzer_report, summarise_results
from src.analysis.breathalyzer import tests_by as count_tests_by


def test_tests_by_hour_sorted(breath_tests):
    result = count_tests_by(breath_tests, 'hour')

    assert result['status'] == 'success'
    assert list(result['counts']) == ['0', '1', '2', '22', '23']
    assert sum(result['counts'].values()) == len(breath_tests)


def test_tests_by_missing_column(breath_tests):
    assert count_tests_by(breath_tests, 'weather')['status'] == 'insufficient_data'


def test_share_over_limit():
    df = pd.DataFrame({'res1': [0.05, 0.10, 0.20, 0.0], 'res2': [0.05, 0.10, 0.20, 0.0]})
    result = summarise_results(df)

    assert result['share_over_limit'] == 0.5
    assert result['legal_limit'] == 0.08
    assert result['max_bac'] == 0.20
    assert result['res1_res2_correlation'] > 0.99


def test_results_without_values():
    df = pd.DataFrame({'res1': [None, None], 'res2': [None, None]})
    assert summarise_results(df)['status'] == 'insufficient_data'


def test_men_blow_higher(breath_tests):
    result = compare_genders(breath_tests)

    assert result['status'] == 'success'
    assert result['n_male'] == result['n_female'] == 60
    assert result['male_mean'] > result['female_mean']
    assert result['statistically_significant'] is True


def test_genders_need_both_groups(breath_tests):
    men = breath_tests[breath_tests['gender'] == 'M']
    assert compare_genders(men)['status'] == 'insufficient_data'


def test_report_sections(breath_tests):
    report = run_breathalyzer_report(breath_tests)
    assert {'results', 'tests_by_location', 'tests_by_hour', 'tests_by_year',
            'tests_by_month', 'tests_by_week_type', 'gender_comparison'} == set(report)
