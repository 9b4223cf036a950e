import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"
REPORTS_DIR = BASE_DIR / "reports"
LOGS_DIR = Path(os.environ.get("EXPLORATORY_REPORTS_LOG_DIR", BASE_DIR / "logs"))

SIGNIFICANCE_LEVEL = 0.05

DEFAULT_FILES = {
    'food_prices': "data/Potatoes (Irish).csv",
    'bustabit': "data/bustabit.csv",
    'bird_occurrences': "data/crossbill_occurrences.csv",
    'climate_grid': "data/climate_grid.csv",
    'college_majors': "data/recent-grads.csv",
    'breath_tests': "data/breath_alcohol_ames.csv",
    'tweets': "data/tweets.csv",
    'road_accidents': "data/road-accidents.csv",
    'miles_driven': "data/miles-driven.csv",
}

LOADING = {
    'encodings': ['utf-8', 'latin-1'],
    'comment_char': '#',
    'candidate_separators': [',', ';', '|', '\t'],
}

CLEANING = {
    'na_tokens': ['', 'na', 'n/a', 'nan', 'null', 'none', '-', '--', '?'],
    'numeric_threshold': 0.9,
    'date_threshold': 0.9,
}

CLUSTERING = {
    'random_state': 20190101,
    'n_init': 25,
    'gap_n_init': 5,
    'k_max': 10,
    'gap_references': 50,
}

GAMBLING = {
    'n_clusters': 5,
    'cashout_offset': 0.01,
    'features': [
        'AverageCashedOut', 'AverageBet', 'TotalProfit',
        'TotalLosses', 'GamesWon', 'GamesLost'
    ],
    'cluster_names': [
        'High Rollers', 'Strategic Addicts', 'Risk Takers',
        'Cautious Commoners', 'Risky Commoners'
    ],
}

FOOD_PRICES = {
    'forecast_horizon': 12,
    'seasonal_periods': 12,
    'column_aliases': {
        'adm0_name': 'country',
        'adm1_name': 'region',
        'mkt_name': 'market',
        'cm_name': 'commodity',
        'mp_month': 'month',
        'mp_year': 'year',
        'mp_price': 'price',
    },
}

BIRDS = {
    'grid_resolution': 0.5,
    'absence_ratio': 1.0,
    'cv_folds': 5,
    'l1_ratios': [0.0, 0.25, 0.5, 0.75, 1.0],
    'inverse_regularization': [0.01, 0.1, 1.0, 10.0],
    'max_iter': 5000,
    'coordinate_columns': ['longitude', 'latitude'],
    'period_column': 'decade',
    'random_state': 20190101,
}

COLLEGE_MAJORS = {
    'earnings_columns': ['p25th', 'median', 'p75th'],
    'column_aliases': {'p25': 'p25th', 'p75': 'p75th', 'median_earnings': 'median'},
}

BREATHALYZER = {
    'legal_limit': 0.08,
    'result_columns': ['res1', 'res2'],
}

TWEETS = {
    'min_word_count': 5,
    'top_words': 20,
    'positive_threshold': 0.05,
    'negative_threshold': -0.05,
    'timezone': None,
}

TRAFFIC = {
    'n_clusters': 3,
    'random_state': 8,
    'target': 'drvr_fatl_col_bmiles',
    'features': ['perc_fatl_speed', 'perc_fatl_alcohol', 'perc_fatl_1st_time'],
}

CHARTS = {
    'palette': ['steelblue', '#e67e22', '#2ecc71', '#9b59b6', '#e74c3c',
                '#1abc9c', '#34495e', '#f1c40f', '#95a5a6', '#d35400'],
    'figsize': (10, 6),
    'dpi': 100,
}

MAP = {
    'default_zoom': 6,
    'scotland_center': (56.8, -4.2),
    'tiles': 'CartoDB positron',
    'presence_color': '#2ecc71',
    'absence_color': '#95a5a6',
}
