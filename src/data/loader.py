import csv
import re
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

import pandas as pd

from config.settings import LOADING, FOOD_PRICES, COLLEGE_MAJORS
from logger_config import setup_logger

logger = setup_logger("exploratory_reports.loader")


class DataLoadError(Exception):
    """Raised when a flat file cannot be read into a DataFrame."""


def read_flat_file(file_path: Union[str, Path], sep: Optional[str] = None) -> pd.DataFrame:
    file_path = str(file_path)
    try:
        if file_path.endswith(('.xlsx', '.xls')):
            df = pd.read_excel(file_path)
        else:
            df = _read_delimited(file_path, sep)
    except (OSError, ValueError, pd.errors.ParserError) as e:
        raise DataLoadError(f"Error loading data from {file_path}: {e}") from e

    df.columns = df.columns.astype(str).str.strip()
    logger.info(f"Loaded {len(df)} rows x {len(df.columns)} columns from {file_path}")
    return df


def _read_delimited(file_path: str, sep: Optional[str]) -> pd.DataFrame:
    last_error = None
    for encoding in LOADING['encodings']:
        try:
            skip, sample = _scan_header(file_path, encoding)
            separator = sep or _sniff_separator(sample)
            return pd.read_csv(file_path, sep=separator, encoding=encoding, skiprows=skip)
        except UnicodeDecodeError as e:
            logger.debug(f"Could not decode {file_path} as {encoding}, trying next encoding")
            last_error = e
    raise DataLoadError(f"Could not decode {file_path}: {last_error}")


def _scan_header(file_path: str, encoding: str) -> Tuple[int, str]:
    """Count leading comment/blank lines and collect a sample of the data lines after them."""
    skip = 0
    sample_lines = []
    with open(file_path, 'r', encoding=encoding) as handle:
        for line in handle:
            if not sample_lines and (line.startswith(LOADING['comment_char']) or not line.strip()):
                skip += 1
                continue
            sample_lines.append(line)
            if len(sample_lines) >= 20:
                break
    return skip, ''.join(sample_lines)


def _sniff_separator(sample: str) -> str:
    if not sample:
        return ','
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=''.join(LOADING['candidate_separators']))
        return dialect.delimiter
    except csv.Error:
        return ','


def to_snake_case(name: str) -> str:
    name = re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', str(name).strip())
    name = re.sub(r'[^0-9a-zA-Z]+', '_', name)
    return name.strip('_').lower()


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = [to_snake_case(col) for col in df.columns]
    return df


def require_columns(df: pd.DataFrame, columns: Iterable[str], name: str = "dataset") -> None:
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise ValueError(f"{name} is missing required column(s): {', '.join(missing)}")


def _rename_aliases(df: pd.DataFrame, aliases: Dict[str, str]) -> pd.DataFrame:
    mapping = {col: aliases[col] for col in df.columns if col in aliases}
    return df.rename(columns=mapping)


def load_kidney_stones(file_path: Union[str, Path]) -> pd.DataFrame:
    df = normalize_columns(read_flat_file(file_path))
    require_columns(df, ['treatment', 'stone_size', 'success'], 'kidney stone data')
    df['treatment'] = df['treatment'].astype(str).str.strip()
    df['stone_size'] = df['stone_size'].astype(str).str.strip().str.lower()
    df['success'] = pd.to_numeric(df['success'], errors='coerce')
    return df.dropna(subset=['success']).reset_index(drop=True)


def load_food_prices(file_path: Union[str, Path]) -> pd.DataFrame:
    df = normalize_columns(read_flat_file(file_path))
    df = _rename_aliases(df, FOOD_PRICES['column_aliases'])
    require_columns(df, ['year', 'month', 'price'], 'food price data')
    return df


def load_bustabit(file_path: Union[str, Path]) -> pd.DataFrame:
    df = read_flat_file(file_path)
    require_columns(df, ['Username', 'Bet', 'CashedOut', 'Profit', 'BustedAt'], 'bustabit data')
    return df


def load_bird_occurrences(file_path: Union[str, Path]) -> pd.DataFrame:
    df = normalize_columns(read_flat_file(file_path))
    df = _rename_aliases(df, {
        'decimal_longitude': 'longitude',
        'decimal_latitude': 'latitude',
        'lon': 'longitude',
        'lat': 'latitude',
    })
    require_columns(df, ['longitude', 'latitude'], 'bird occurrence data')
    return df.dropna(subset=['longitude', 'latitude']).reset_index(drop=True)


def load_climate_grid(file_path: Union[str, Path]) -> pd.DataFrame:
    df = normalize_columns(read_flat_file(file_path))
    df = _rename_aliases(df, {'lon': 'longitude', 'lat': 'latitude', 'x': 'longitude', 'y': 'latitude'})
    require_columns(df, ['longitude', 'latitude'], 'climate grid')
    return df


def load_college_majors(file_path: Union[str, Path]) -> pd.DataFrame:
    df = normalize_columns(read_flat_file(file_path))
    df = _rename_aliases(df, COLLEGE_MAJORS['column_aliases'])
    require_columns(df, ['major'] + COLLEGE_MAJORS['earnings_columns'], 'college majors data')
    return df


def load_breath_tests(file_path: Union[str, Path]) -> pd.DataFrame:
    df = normalize_columns(read_flat_file(file_path))
    require_columns(df, ['res1', 'res2'], 'breath test data')
    return df


def load_tweets(file_path: Union[str, Path]) -> pd.DataFrame:
    df = normalize_columns(read_flat_file(file_path))
    require_columns(df, ['text', 'source'], 'tweet data')
    return df


def load_road_accidents(file_path: Union[str, Path]) -> pd.DataFrame:
    df = read_flat_file(file_path, sep='|')
    require_columns(df, ['state', 'drvr_fatl_col_bmiles'], 'road accident data')
    return df


def load_miles_driven(file_path: Union[str, Path]) -> pd.DataFrame:
    df = read_flat_file(file_path, sep='|')
    require_columns(df, ['state', 'million_miles_annually'], 'miles driven data')
    return df
