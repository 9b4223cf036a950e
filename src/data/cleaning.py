from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

import numpy as np
import pandas as pd

from config.settings import CLEANING
from logger_config import setup_logger
from .loader import read_flat_file, to_snake_case

logger = setup_logger("exploratory_reports.cleaning")


def missing_value_summary(df: pd.DataFrame) -> pd.DataFrame:
    if len(df.columns) == 0:
        return pd.DataFrame(columns=['column', 'null_count', 'null_percentage'])

    null_counts = df.isna().sum()
    summary = pd.DataFrame({
        'column': null_counts.index,
        'null_count': null_counts.values,
        'null_percentage': (null_counts.values / len(df) * 100) if len(df) > 0 else 0.0,
    })
    summary = summary[summary['null_count'] > 0]
    return summary.sort_values('null_count', ascending=False).reset_index(drop=True)


def clean_dataframe(
    df: pd.DataFrame,
    na_tokens: Optional[Iterable[str]] = None,
    drop_duplicates: bool = True
) -> Tuple[pd.DataFrame, Dict]:
    na_tokens = {token.lower() for token in (na_tokens or CLEANING['na_tokens'])}
    log = {
        'renamed_columns': {},
        'numeric_columns': [],
        'date_columns': [],
        'dropped_empty_columns': [],
        'dropped_empty_rows': 0,
        'dropped_duplicates': 0,
    }

    df = df.copy()
    new_columns = _dedupe_names([to_snake_case(col) or 'column' for col in df.columns])
    log['renamed_columns'] = {
        old: new for old, new in zip(df.columns, new_columns) if old != new
    }
    df.columns = new_columns

    for col in df.columns:
        if _is_text(df[col]):
            df[col] = _clean_text_column(df[col], na_tokens)

    for col in df.columns:
        if not _is_text(df[col]):
            continue
        converted = _coerce_numeric(df[col])
        if converted is not None:
            df[col] = converted
            log['numeric_columns'].append(col)
            continue
        parsed = _coerce_dates(df[col])
        if parsed is not None:
            df[col] = parsed
            log['date_columns'].append(col)

    empty_columns = [col for col in df.columns if df[col].isna().all()]
    if empty_columns:
        df = df.drop(columns=empty_columns)
        log['dropped_empty_columns'] = empty_columns

    rows_before = len(df)
    df = df.dropna(how='all')
    log['dropped_empty_rows'] = rows_before - len(df)

    if drop_duplicates:
        rows_before = len(df)
        df = df.drop_duplicates()
        log['dropped_duplicates'] = rows_before - len(df)

    df = df.reset_index(drop=True)
    logger.debug(f"Cleaning log: {log}")
    return df, log


def _is_text(series: pd.Series) -> bool:
    return pd.api.types.is_object_dtype(series) or pd.api.types.is_string_dtype(series)


def _dedupe_names(names):
    used = set()
    result = []
    for name in names:
        candidate, suffix = name, 0
        while candidate in used:
            suffix += 1
            candidate = f"{name}_{suffix}"
        used.add(candidate)
        result.append(candidate)
    return result


def _clean_text_column(series: pd.Series, na_tokens: set) -> pd.Series:
    cleaned = series.where(series.isna(), series.astype(str))
    cleaned = cleaned.str.replace(r'\s+', ' ', regex=True).str.strip()
    is_token = cleaned.str.lower().isin(na_tokens)
    return cleaned.mask(is_token, np.nan)


def _coerce_numeric(series: pd.Series) -> Optional[pd.Series]:
    present = series.dropna()
    if len(present) == 0:
        return None

    stripped = present.str.replace(r'^[\$€£]|[\$€£%]$', '', regex=True)
    stripped = stripped.str.replace(r'(?<=\d),(?=\d{3}\b)', '', regex=True)
    numbers = pd.to_numeric(stripped, errors='coerce')

    if numbers.notna().mean() < CLEANING['numeric_threshold']:
        return None

    result = pd.Series(np.nan, index=series.index, dtype=float)
    result.loc[numbers.index] = numbers
    return result


def _coerce_dates(series: pd.Series) -> Optional[pd.Series]:
    present = series.dropna()
    if len(present) == 0:
        return None
    if not present.str.contains(r'\d{1,4}[-/.]\d{1,2}([-/.]\d{1,4})?', regex=True).all():
        return None

    parsed = pd.to_datetime(present, errors='coerce')
    if parsed.notna().mean() < CLEANING['date_threshold']:
        return None

    result = pd.Series(pd.NaT, index=series.index, dtype='datetime64[ns]')
    result.loc[parsed.index] = parsed
    return result


def clean_csv_file(input_path: Union[str, Path], output_path: Union[str, Path]) -> Dict:
    raw = read_flat_file(input_path)
    missing_before = missing_value_summary(raw)
    cleaned, log = clean_dataframe(raw)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    cleaned.to_csv(output_path, index=False)
    logger.info(f"Wrote cleaned data ({len(cleaned)} rows) to {output_path}")

    missing_after = missing_value_summary(cleaned)
    return {
        'status': 'success',
        'rows_before': len(raw),
        'rows_after': len(cleaned),
        'columns_before': len(raw.columns),
        'columns_after': len(cleaned.columns),
        'cleaning_log': log,
        'missing_before': missing_before.to_dict('records'),
        'missing_after': missing_after.to_dict('records'),
        'output_path': str(output_path),
        'interpretation': f"Cleaned {len(raw)} rows down to {len(cleaned)} "
                         f"({log['dropped_duplicates']} duplicates and {log['dropped_empty_rows']} empty rows removed). "
                         f"{len(log['numeric_columns'])} text column(s) were converted to numbers and "
                         f"{len(log['date_columns'])} to dates; {len(missing_after)} column(s) still contain missing values."
    }
