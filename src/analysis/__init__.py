from .preprocessing import mean_sd_standard, min_max_standard, standardize_frame, remove_outliers_sd
from .clustering import (
    fit_kmeans,
    elbow_curve,
    elbow_k,
    silhouette_curve,
    best_silhouette_k,
    gap_statistic,
    choose_k,
    pca_projection
)
from .kidney_stones import (
    success_rates,
    analyze_simpsons_paradox,
    chi_squared_size_vs_treatment,
    fit_success_model,
    run_kidney_stone_report
)
from .food_prices import (
    prepare_prices,
    read_price_file,
    create_price_time_series,
    forecast_prices,
    run_food_price_report
)
from .gambling import (
    engineer_bet_features,
    summarise_players,
    cluster_players,
    cluster_profiles,
    name_clusters,
    run_gambling_report
)
from .birds import (
    sample_pseudo_absences,
    build_training_set,
    fit_distribution_model,
    predict_occurrence,
    run_bird_report
)
from .college_majors import select_earnings, cluster_majors, run_college_major_report
from .breathalyzer import tests_by, summarise_results, compare_genders, run_breathalyzer_report
from .tweets import (
    tokenize_tweets,
    log_odds_ratio,
    hour_profile,
    tweet_features_by_source,
    sentiment_by_source,
    run_tweet_report
)
from .traffic import (
    feature_correlations,
    fit_fatality_regression,
    cluster_states,
    estimate_fatalities_by_cluster,
    run_traffic_report
)

__all__ = [
    'mean_sd_standard',
    'min_max_standard',
    'standardize_frame',
    'remove_outliers_sd',
    'fit_kmeans',
    'elbow_curve',
    'elbow_k',
    'silhouette_curve',
    'best_silhouette_k',
    'gap_statistic',
    'choose_k',
    'pca_projection',
    'success_rates',
    'analyze_simpsons_paradox',
    'chi_squared_size_vs_treatment',
    'fit_success_model',
    'run_kidney_stone_report',
    'prepare_prices',
    'read_price_file',
    'create_price_time_series',
    'forecast_prices',
    'run_food_price_report',
    'engineer_bet_features',
    'summarise_players',
    'cluster_players',
    'cluster_profiles',
    'name_clusters',
    'run_gambling_report',
    'sample_pseudo_absences',
    'build_training_set',
    'fit_distribution_model',
    'predict_occurrence',
    'run_bird_report',
    'select_earnings',
    'cluster_majors',
    'run_college_major_report',
    'tests_by',
    'summarise_results',
    'compare_genders',
    'run_breathalyzer_report',
    'tokenize_tweets',
    'log_odds_ratio',
    'hour_profile',
    'tweet_features_by_source',
    'sentiment_by_source',
    'run_tweet_report',
    'feature_correlations',
    'fit_fatality_regression',
    'cluster_states',
    'estimate_fatalities_by_cluster',
    'run_traffic_report'
]
