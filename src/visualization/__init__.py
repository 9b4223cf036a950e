from .maps import (
    create_base_map,
    add_probability_layer,
    add_points_layer,
    create_occurrence_map,
    save_map,
    get_map_html
)
from .charts import (
    create_report_charts,
    create_success_rate_chart,
    create_coefficient_chart,
    create_price_forecast_chart,
    create_parallel_coordinates_chart,
    create_pca_cluster_chart,
    create_occurrence_trend_chart,
    create_k_selection_chart,
    create_earnings_chart,
    create_count_chart,
    create_bac_histogram,
    create_log_odds_chart,
    create_hour_profile_chart,
    create_elbow_chart,
    create_cluster_boxplots
)

__all__ = [
    'create_base_map',
    'add_probability_layer',
    'add_points_layer',
    'create_occurrence_map',
    'save_map',
    'get_map_html',
    'create_report_charts',
    'create_success_rate_chart',
    'create_coefficient_chart',
    'create_price_forecast_chart',
    'create_parallel_coordinates_chart',
    'create_pca_cluster_chart',
    'create_occurrence_trend_chart',
    'create_k_selection_chart',
    'create_earnings_chart',
    'create_count_chart',
    'create_bac_histogram',
    'create_log_odds_chart',
    'create_hour_profile_chart',
    'create_elbow_chart',
    'create_cluster_boxplots'
]
