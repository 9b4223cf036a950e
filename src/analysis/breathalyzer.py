import numpy as np
import pandas as pd
from scipy import stats
from typing import Dict, Optional

from config.settings import BREATHALYZER
from logger_config import setup_logger
from .interpretation import (
    insufficient_data, interpret_correlation_strength, is_significant, significance_phrase
)

logger = setup_logger("exploratory_reports.breathalyzer")


def add_mean_result(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    for column in BREATHALYZER['result_columns']:
        df[column] = pd.to_numeric(df[column], errors='coerce')
    df['mean_result'] = df[BREATHALYZER['result_columns']].mean(axis=1)
    return df


def tests_by(df: pd.DataFrame, column: str) -> Dict:
    if column not in df.columns:
        return insufficient_data(f"Column '{column}' not found")

    counts = df[column].value_counts(dropna=True)
    if len(counts) == 0:
        return insufficient_data(f"No values recorded for '{column}'")

    if pd.api.types.is_numeric_dtype(df[column]):
        counts = counts.sort_index()
    top_value = df[column].value_counts().idxmax()

    return {
        'status': 'success',
        'column': column,
        'counts': {str(k): int(v) for k, v in counts.items()},
        'most_common': str(top_value),
        'interpretation': f"Most tests were recorded for {column} = {top_value} "
                         f"({int(counts.max())} of {int(counts.sum())}, {counts.max() / counts.sum():.1%})."
    }


def summarise_results(df: pd.DataFrame, limit: Optional[float] = None) -> Dict:
    limit = limit or BREATHALYZER['legal_limit']
    df = add_mean_result(df)
    results = df['mean_result'].dropna()
    if len(results) == 0:
        return insufficient_data('No breath test results recorded')

    over_limit = float((results > limit).mean())
    result = {
        'status': 'success',
        'n_tests': int(len(results)),
        'mean_bac': float(results.mean()),
        'median_bac': float(results.median()),
        'max_bac': float(results.max()),
        'share_over_limit': over_limit,
        'legal_limit': limit,
    }

    paired = df[BREATHALYZER['result_columns']].dropna()
    story = (f"Across {len(results)} tests the mean blood alcohol content is {results.mean():.3f}; "
             f"{over_limit:.1%} of tests exceed the legal limit of {limit}.")
    if len(paired) >= 3 and paired.std().gt(0).all():
        r, p_value = stats.pearsonr(paired.iloc[:, 0], paired.iloc[:, 1])
        result['res1_res2_correlation'] = float(r)
        result['res1_res2_p_value'] = float(p_value)
        story += (f" The two breath samples agree with a {interpret_correlation_strength(abs(r))} "
                  f"correlation (r={r:.3f}).")

    result['interpretation'] = story
    return result


def compare_genders(df: pd.DataFrame) -> Dict:
    if 'gender' not in df.columns:
        return insufficient_data('No gender column recorded')

    df = add_mean_result(df)
    df = df[df['gender'].notna() & df['mean_result'].notna()]
    df = df[df['gender'].astype(str).str.lower().isin(['male', 'female', 'm', 'f'])]
    groups = {g: grp['mean_result'].values for g, grp in df.groupby(df['gender'].astype(str).str.lower().str[0])}

    if len(groups) < 2 or min(len(v) for v in groups.values()) < 2:
        return insufficient_data('Need at least two tests for each gender')

    t_statistic, p_value = stats.ttest_ind(groups['m'], groups['f'], equal_var=False)
    male_mean, female_mean = float(np.mean(groups['m'])), float(np.mean(groups['f']))

    return {
        'status': 'success',
        'male_mean': male_mean,
        'female_mean': female_mean,
        'n_male': int(len(groups['m'])),
        'n_female': int(len(groups['f'])),
        't_statistic': float(t_statistic),
        'p_value': float(p_value),
        'statistically_significant': is_significant(p_value),
        'interpretation': f"Mean BAC is {male_mean:.3f} for men and {female_mean:.3f} for women; "
                         f"the difference is {significance_phrase(p_value)} (Welch t={t_statistic:.2f}, p={p_value:.4f})."
    }


def run_breathalyzer_report(df: pd.DataFrame) -> Dict:
    logger.info(f"Exploring {len(df)} breath tests")
    report = {'results': summarise_results(df)}
    for column in ['location', 'hour', 'year', 'month', 'week_type']:
        if column in df.columns:
            report[f'tests_by_{column}'] = tests_by(df, column)
    report['gender_comparison'] = compare_genders(df)
    return report
