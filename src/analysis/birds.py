"""
Species distribution modelling
==============================

Presence records are matched to cells of a climate grid, background cells
without any record are sampled as pseudo-absences, and an elastic-net
logistic regression (tuned by cross-validated grid search) predicts the
probability of occurrence for every cell and period of the grid.
"""
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.linear_model import LogisticRegression
from sklearn.model_selection import GridSearchCV, StratifiedKFold
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from config.settings import BIRDS
from logger_config import setup_logger
from .interpretation import insufficient_data, analysis_error, interpret_auc, significance_phrase

logger = setup_logger("exploratory_reports.birds")

COORDINATES = BIRDS['coordinate_columns']
PERIOD = BIRDS['period_column']


def _cell_keys(df: pd.DataFrame, resolution: float) -> pd.Series:
    lon = np.floor(pd.to_numeric(df['longitude'], errors='coerce') / resolution).astype('Int64')
    lat = np.floor(pd.to_numeric(df['latitude'], errors='coerce') / resolution).astype('Int64')
    return lon.astype(str) + '_' + lat.astype(str)


def climate_features(grid: pd.DataFrame) -> List[str]:
    excluded = set(COORDINATES) | {PERIOD, 'presence', 'cell'}
    return [col for col in grid.select_dtypes(include=[np.number]).columns if col not in excluded]


def baseline_grid(grid: pd.DataFrame, period=None) -> pd.DataFrame:
    if PERIOD not in grid.columns:
        return grid
    period = grid[PERIOD].min() if period is None else period
    return grid[grid[PERIOD] == period]


def sample_pseudo_absences(
    grid: pd.DataFrame,
    presences: pd.DataFrame,
    n: int,
    random_state: Optional[int] = None,
    resolution: Optional[float] = None
) -> pd.DataFrame:
    if n < 0:
        raise ValueError("Number of pseudo-absences must be non-negative")
    resolution = resolution or BIRDS['grid_resolution']
    random_state = BIRDS['random_state'] if random_state is None else random_state

    cells = grid.drop_duplicates(subset=COORDINATES).copy()
    cells['cell'] = _cell_keys(cells, resolution)
    occupied = set(_cell_keys(presences, resolution))
    candidates = cells[~cells['cell'].isin(occupied)].drop_duplicates(subset='cell')

    if n > len(candidates):
        raise ValueError(f"Requested {n} pseudo-absences but only {len(candidates)} unoccupied cells exist")

    sampled = candidates.sample(n=n, random_state=random_state)
    return sampled.drop(columns='cell').reset_index(drop=True)


def build_training_set(
    presences: pd.DataFrame,
    grid: pd.DataFrame,
    n_absences: Optional[int] = None,
    random_state: Optional[int] = None,
    resolution: Optional[float] = None
) -> pd.DataFrame:
    resolution = resolution or BIRDS['grid_resolution']
    baseline = baseline_grid(grid).copy()
    baseline['cell'] = _cell_keys(baseline, resolution)
    baseline = baseline.drop_duplicates(subset='cell')

    presence_cells = pd.DataFrame({'cell': _cell_keys(presences, resolution).unique()})
    present = baseline.merge(presence_cells, on='cell', how='inner')
    present['presence'] = 1

    if n_absences is None:
        n_absences = int(round(len(present) * BIRDS['absence_ratio']))
    absent = sample_pseudo_absences(baseline.drop(columns='cell'), presences, n_absences, random_state, resolution)
    absent['presence'] = 0

    training = pd.concat([present.drop(columns='cell'), absent], ignore_index=True)
    logger.info(f"Training set: {len(present)} presence cells, {len(absent)} pseudo-absences")
    return training


def fit_distribution_model(training: pd.DataFrame, features: List[str], random_state: Optional[int] = None) -> Dict:
    random_state = BIRDS['random_state'] if random_state is None else random_state
    counts = training['presence'].value_counts()
    if len(counts) < 2 or counts.min() < 2:
        return insufficient_data('Need at least two presences and two pseudo-absences')

    folds = int(min(BIRDS['cv_folds'], counts.min()))
    pipeline = Pipeline([
        ('scale', StandardScaler()),
        ('model', LogisticRegression(solver='saga', max_iter=BIRDS['max_iter'], random_state=random_state)),
    ])
    search = GridSearchCV(
        pipeline,
        param_grid={
            'model__l1_ratio': BIRDS['l1_ratios'],
            'model__C': BIRDS['inverse_regularization'],
        },
        cv=StratifiedKFold(n_splits=folds, shuffle=True, random_state=random_state),
        scoring='roc_auc',
    )

    try:
        search.fit(training[features].values, training['presence'].values)
    except ValueError as e:
        logger.warning(f"Distribution model failed: {e}")
        return analysis_error(e)

    best = search.best_estimator_
    coefficients = dict(zip(features, best.named_steps['model'].coef_[0].tolist()))
    auc = float(search.best_score_)

    return {
        'status': 'success',
        'model': best,
        'features': features,
        'cv_auc': auc,
        'cv_folds': folds,
        'best_l1_ratio': float(search.best_params_['model__l1_ratio']),
        'best_C': float(search.best_params_['model__C']),
        'coefficients': coefficients,
        'interpretation': f"The elastic-net model separates presences from pseudo-absences with a cross-validated "
                         f"AUC of {auc:.3f} ({interpret_auc(auc)}). Strongest climate driver: "
                         f"{max(coefficients, key=lambda f: abs(coefficients[f]))}."
    }


def predict_occurrence(model, grid: pd.DataFrame, features: List[str]) -> pd.DataFrame:
    predictions = grid.copy()
    complete = predictions[features].notna().all(axis=1)
    predictions['probability'] = np.nan
    if complete.any():
        predictions.loc[complete, 'probability'] = model.predict_proba(predictions.loc[complete, features].values)[:, 1]
    return predictions


def summarise_by_period(predictions: pd.DataFrame) -> Dict:
    if PERIOD not in predictions.columns:
        mean_probability = float(predictions['probability'].mean())
        return {
            'status': 'success',
            'by_period': {},
            'mean_probability': mean_probability,
            'interpretation': f"Mean predicted probability of occurrence across the grid is {mean_probability:.2f}."
        }

    by_period = predictions.groupby(PERIOD)['probability'].mean()
    result = {
        'status': 'success',
        'by_period': {str(k): float(v) for k, v in by_period.items()},
    }
    if len(by_period) < 2:
        result['interpretation'] = f"Mean predicted probability of occurrence is {by_period.iloc[0]:.2f}."
        return result

    periods = pd.to_numeric(pd.Series(by_period.index), errors='coerce')
    if periods.isna().any():
        periods = pd.Series(np.arange(len(by_period)))
    slope, intercept, r_value, p_value, std_err = stats.linregress(periods.values.astype(float), by_period.values)
    direction = "increases" if slope > 0 else "decreases"
    result.update({
        'trend_slope': float(slope),
        'trend_p_value': float(p_value),
        'interpretation': f"Mean predicted occurrence {direction} from {by_period.iloc[0]:.2f} in {by_period.index[0]} "
                         f"to {by_period.iloc[-1]:.2f} in {by_period.index[-1]} (trend {significance_phrase(p_value)}, "
                         f"p={p_value:.4f})."
    })
    return result


def run_bird_report(
    presences: pd.DataFrame,
    grid: pd.DataFrame,
    features: Optional[List[str]] = None,
    random_state: Optional[int] = None
) -> Dict:
    features = features or climate_features(grid)
    random_state = BIRDS['random_state'] if random_state is None else random_state
    if not features:
        return {'model': insufficient_data('Climate grid has no numeric feature columns')}

    try:
        training = build_training_set(presences, grid, random_state=random_state)
    except ValueError as e:
        return {'model': analysis_error(e)}

    fitted = fit_distribution_model(training, features, random_state)
    report = {
        'training': {
            'status': 'success',
            'n_presences': int((training['presence'] == 1).sum()),
            'n_absences': int((training['presence'] == 0).sum()),
            'features': features,
            'data': training,
            'interpretation': f"{int((training['presence'] == 1).sum())} occupied grid cells were contrasted with "
                             f"{int((training['presence'] == 0).sum())} pseudo-absence cells using "
                             f"{len(features)} climate variables."
        },
        'model': fitted,
    }
    if fitted['status'] != 'success':
        return report

    predictions = predict_occurrence(fitted['model'], grid, features)
    report['predictions'] = summarise_by_period(predictions)
    report['predictions']['data'] = predictions
    return report
