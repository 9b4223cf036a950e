from .loader import (
    DataLoadError,
    read_flat_file,
    normalize_columns,
    require_columns,
    load_kidney_stones,
    load_food_prices,
    load_bustabit,
    load_bird_occurrences,
    load_climate_grid,
    load_college_majors,
    load_breath_tests,
    load_tweets,
    load_road_accidents,
    load_miles_driven
)
from .datasets import kidney_stone_data
from .cleaning import clean_dataframe, clean_csv_file, missing_value_summary

__all__ = [
    'DataLoadError',
    'read_flat_file',
    'normalize_columns',
    'require_columns',
    'load_kidney_stones',
    'load_food_prices',
    'load_bustabit',
    'load_bird_occurrences',
    'load_climate_grid',
    'load_college_majors',
    'load_breath_tests',
    'load_tweets',
    'load_road_accidents',
    'load_miles_driven',
    'kidney_stone_data',
    'clean_dataframe',
    'clean_csv_file',
    'missing_value_summary'
]
