import folium
import matplotlib.pyplot as plt
import pandas as pd
import pytest

from src.analysis import (
    run_bird_report,
    run_breathalyzer_report,
    run_gambling_report,
    run_kidney_stone_report,
    run_traffic_report,
    run_tweet_report
)
from src.reporting import REPORTS, render_markdown, save_report
from src.visualization import (
    create_occurrence_map,
    create_report_charts,
    get_map_html
)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


def test_kidney_stone_charts():
    charts = create_report_charts('kidney_stones', run_kidney_stone_report())
    assert set(charts) == {'success_rates', 'odds_ratios'}
    assert all(isinstance(fig, plt.Figure) for fig in charts.values())


def test_gambling_charts(bustabit_bets):
    charts = create_report_charts('gambling', run_gambling_report(bustabit_bets))
    assert set(charts) == {'parallel_coordinates', 'pca_clusters'}
    assert len(charts['parallel_coordinates'].axes[0].lines) == 5


def test_breathalyzer_charts_need_raw_data_for_histogram(breath_tests):
    report = run_breathalyzer_report(breath_tests)
    assert 'bac_distribution' not in create_report_charts('breathalyzer', report)
    assert 'bac_distribution' in create_report_charts('breathalyzer', report, breath_tests)


def test_tweet_and_traffic_charts(tweets, road_accidents):
    assert set(create_report_charts('tweets', run_tweet_report(tweets))) == {'log_odds', 'hour_profile'}
    traffic = create_report_charts('traffic', run_traffic_report(road_accidents))
    assert set(traffic) == {'elbow', 'feature_boxplots', 'pca_clusters'}


def test_failed_sections_produce_no_charts():
    assert create_report_charts('gambling', {'clusters': {'status': 'insufficient_data', 'message': 'x'}}) == {}
    assert create_report_charts('cleaning', {'status': 'success'}) == {}


def test_occurrence_map(climate_grid, bird_presences):
    report = run_bird_report(bird_presences, climate_grid, random_state=0)
    m = create_occurrence_map(report['training']['data'], report['predictions']['data'])

    assert isinstance(m, folium.Map)
    rendered = m.get_root().render()
    assert 'Presences' in rendered
    assert 'Pseudo-absences' in rendered
    assert get_map_html(m)


def test_occurrence_map_requires_coordinates():
    with pytest.raises(ValueError):
        create_occurrence_map(pd.DataFrame({'presence': [1]}))


def test_every_report_is_registered():
    assert set(REPORTS) == {
        'kidney_stones', 'food_prices', 'gambling', 'birds', 'college_majors',
        'breathalyzer', 'tweets', 'traffic', 'cleaning'
    }
    assert all({'title', 'question', 'dataset', 'method', 'expected_result'} <= set(info) for info in REPORTS.values())


def test_render_markdown():
    markdown = render_markdown('kidney_stones', run_kidney_stone_report())

    assert markdown.startswith('# Kidney Stone Treatments')
    assert "Simpson's paradox" in markdown
    assert '## Simpsons paradox' in markdown
    assert '- **paradox_detected**: yes' in markdown


def test_render_markdown_shows_failures():
    markdown = render_markdown('tweets', {'words': {'status': 'insufficient_data', 'message': 'Need tweets'}})
    assert '*insufficient_data*: Need tweets' in markdown


def test_render_markdown_unknown_report():
    with pytest.raises(ValueError):
        render_markdown('weather', {})


def test_save_report(tmp_path):
    report = run_kidney_stone_report()
    written = save_report('kidney_stones', report, create_report_charts('kidney_stones', report), tmp_path)

    assert written['markdown'] == tmp_path / 'kidney_stones.md'
    assert (tmp_path / 'kidney_stones_success_rates.png').exists()
    assert '![success_rates](kidney_stones_success_rates.png)' in written['markdown'].read_text(encoding='utf-8')
