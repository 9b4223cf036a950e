import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf
from scipy import stats
from typing import Dict, List, Optional

from logger_config import setup_logger
from ..data.datasets import kidney_stone_data
from .interpretation import insufficient_data, analysis_error, is_significant, significance_phrase

logger = setup_logger("exploratory_reports.kidney_stones")


def success_rates(df: pd.DataFrame, by: List[str]) -> pd.DataFrame:
    grouped = df.groupby(by)['success'].agg(['sum', 'count']).reset_index()
    grouped = grouped.rename(columns={'sum': 'successes', 'count': 'patients'})
    grouped['successes'] = grouped['successes'].astype(int)
    grouped['success_rate'] = grouped['successes'] / grouped['patients']
    return grouped


def describe_success_rates(df: pd.DataFrame) -> Dict:
    if len(df) == 0:
        return insufficient_data('No patients in dataset')

    rates = success_rates(df, ['treatment'])
    parts = [f"treatment {row['treatment']}: {row['successes']}/{row['patients']} ({row['success_rate']:.1%})"
             for _, row in rates.iterrows()]
    return {
        'status': 'success',
        'rates': rates.to_dict('records'),
        'interpretation': 'Overall success rates are ' + '; '.join(parts) + '.'
    }


def analyze_simpsons_paradox(df: pd.DataFrame) -> Dict:
    treatments = sorted(df['treatment'].unique())
    if len(treatments) != 2:
        return insufficient_data('Need exactly two treatments to compare')

    overall = success_rates(df, ['treatment']).set_index('treatment')['success_rate']
    overall_winner = overall.idxmax()

    stratified = success_rates(df, ['stone_size', 'treatment'])
    stratum_winners = {}
    for stone_size, group in stratified.groupby('stone_size'):
        rates = group.set_index('treatment')['success_rate']
        if len(rates) == 2:
            stratum_winners[stone_size] = rates.idxmax()

    if not stratum_winners:
        return insufficient_data('No stone-size group contains both treatments')

    reversed_everywhere = all(winner != overall_winner for winner in stratum_winners.values())

    if reversed_everywhere:
        story = (f"Treatment {overall_winner} looks better overall, but the other treatment wins within every stone size. "
                 f"Stone size confounds the comparison: this is Simpson's paradox.")
    else:
        story = f"Treatment {overall_winner} looks better overall and the stratified comparison does not reverse this."

    return {
        'status': 'success',
        'overall_rates': {k: float(v) for k, v in overall.items()},
        'overall_winner': overall_winner,
        'stratified_rates': stratified.to_dict('records'),
        'stratum_winners': stratum_winners,
        'paradox_detected': reversed_everywhere,
        'interpretation': story
    }


def chi_squared_size_vs_treatment(df: pd.DataFrame) -> Dict:
    table = pd.crosstab(df['stone_size'], df['treatment'])
    if table.shape[0] < 2 or table.shape[1] < 2:
        return insufficient_data('Need at least two stone sizes and two treatments')

    chi2, p_value, dof, expected = stats.chi2_contingency(table.values, correction=True)
    significant = is_significant(p_value)

    return {
        'status': 'success',
        'chi_squared': float(chi2),
        'p_value': float(p_value),
        'degrees_of_freedom': int(dof),
        'statistically_significant': significant,
        'contingency_table': table.to_dict(),
        'interpretation': f"Stone size and treatment are {'not independent' if significant else 'independent'} "
                         f"(X²={chi2:.2f}, df={dof}, p={p_value:.4g}): the association is {significance_phrase(p_value)}. "
                         f"{'Doctors assigned treatments differently depending on stone size.' if significant else ''}".strip()
    }


def fit_success_model(df: pd.DataFrame) -> Dict:
    if df['success'].nunique() < 2:
        return insufficient_data('Success outcome has no variation')

    try:
        model = smf.glm('success ~ stone_size + treatment', data=df, family=sm.families.Binomial()).fit()
    except (ValueError, np.linalg.LinAlgError) as e:
        logger.warning(f"Logistic model failed: {e}")
        return analysis_error(e)

    conf_int = model.conf_int()
    coefficients = pd.DataFrame({
        'term': model.params.index,
        'estimate': model.params.values,
        'std_error': model.bse.values,
        'p_value': model.pvalues.values,
        'conf_low': conf_int[0].values,
        'conf_high': conf_int[1].values,
    })
    coefficients['odds_ratio'] = np.exp(coefficients['estimate'])

    treatment_terms = coefficients[coefficients['term'].str.startswith('treatment')]
    if len(treatment_terms):
        row = treatment_terms.iloc[0]
        treatment_story = (f"Holding stone size fixed, {row['term']} changes the odds of success by a factor of "
                           f"{row['odds_ratio']:.2f} (p={row['p_value']:.4g}, {significance_phrase(row['p_value'])}).")
    else:
        treatment_story = "The model has no treatment term to interpret."

    return {
        'status': 'success',
        'coefficients': coefficients.to_dict('records'),
        'aic': float(model.aic),
        'deviance': float(model.deviance),
        'n_observations': int(model.nobs),
        'interpretation': treatment_story
    }


def run_kidney_stone_report(df: Optional[pd.DataFrame] = None) -> Dict:
    df = kidney_stone_data() if df is None else df
    logger.info(f"Running kidney stone report on {len(df)} patients")
    return {
        'success_by_treatment': describe_success_rates(df),
        'simpsons_paradox': analyze_simpsons_paradox(df),
        'size_vs_treatment': chi_squared_size_vs_treatment(df),
        'success_model': fit_success_model(df),
    }
