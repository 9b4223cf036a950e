import warnings
from pathlib import Path
from typing import Dict, Optional, Union

import numpy as np
import pandas as pd
from statsmodels.tsa.exponential_smoothing.ets import ETSModel

from config.settings import FOOD_PRICES
from logger_config import setup_logger
from ..data.loader import load_food_prices
from .interpretation import insufficient_data, analysis_error

logger = setup_logger("exploratory_reports.food_prices")

MIN_OBSERVATIONS = 6


def prepare_prices(df: pd.DataFrame, commodity: Optional[str] = None) -> pd.DataFrame:
    df = df.rename(columns={k: v for k, v in FOOD_PRICES['column_aliases'].items() if k in df.columns}).copy()

    if commodity and 'commodity' in df.columns:
        df = df[df['commodity'].astype(str).str.contains(commodity, case=False, na=False, regex=False)].copy()

    df['year'] = pd.to_numeric(df['year'], errors='coerce')
    df['month'] = pd.to_numeric(df['month'], errors='coerce')
    df['price'] = pd.to_numeric(df['price'], errors='coerce')
    df = df.dropna(subset=['year', 'month', 'price'])
    df = df[(df['month'] >= 1) & (df['month'] <= 12)].copy()
    if len(df) == 0:
        df['date'] = pd.Series(dtype='datetime64[ns]')
        return df.reset_index(drop=True)

    df['date'] = pd.to_datetime(pd.DataFrame({
        'year': df['year'].astype(int),
        'month': df['month'].astype(int),
        'day': 1,
    }))
    return df.sort_values('date').reset_index(drop=True)


def read_price_file(file_path: Union[str, Path], commodity: Optional[str] = None) -> pd.DataFrame:
    prices = prepare_prices(load_food_prices(file_path), commodity)
    logger.info(f"Read {len(prices)} price records from {file_path}")
    return prices


def create_price_time_series(prices: pd.DataFrame) -> pd.Series:
    """Monthly median price across markets, on a regular month-start index."""
    if len(prices) == 0:
        raise ValueError("No price records to convert into a time series")

    monthly = prices.groupby('date')['price'].median().sort_index()
    series = monthly.asfreq('MS')
    missing = int(series.isna().sum())
    if missing:
        logger.debug(f"Interpolating {missing} missing months")
        series = series.interpolate(method='linear')
    series.name = 'median_price'
    return series


def _candidate_models(series: pd.Series):
    seasonal_periods = FOOD_PRICES['seasonal_periods']
    trends = [None, 'add'] if len(series) >= 10 else [None]
    seasonals = [None, 'add'] if len(series) >= 2 * seasonal_periods + 2 else [None]

    for trend in trends:
        for damped in ([False, True] if trend else [False]):
            for seasonal in seasonals:
                yield ETSModel(
                    series,
                    error='add',
                    trend=trend,
                    damped_trend=damped,
                    seasonal=seasonal,
                    seasonal_periods=seasonal_periods if seasonal else None,
                )


def forecast_prices(series: pd.Series, horizon: Optional[int] = None) -> Dict:
    horizon = horizon or FOOD_PRICES['forecast_horizon']
    if series.notna().sum() < MIN_OBSERVATIONS:
        return insufficient_data(f'Need at least {MIN_OBSERVATIONS} monthly observations to forecast')
    series = series.interpolate(limit_direction='both')

    best_fit, best_aic = None, np.inf
    with warnings.catch_warnings():
        warnings.simplefilter('ignore')
        for model in _candidate_models(series):
            try:
                fit = model.fit(disp=False)
            except (ValueError, np.linalg.LinAlgError) as e:
                logger.debug(f"Skipping ETS candidate: {e}")
                continue
            if np.isfinite(fit.aic) and fit.aic < best_aic:
                best_fit, best_aic = fit, fit.aic

        if best_fit is None:
            return analysis_error(ValueError('No exponential smoothing model could be fitted'))

        prediction = best_fit.get_prediction(start=len(series), end=len(series) + horizon - 1)
        interval_95 = prediction.summary_frame(alpha=0.05)
        interval_80 = prediction.summary_frame(alpha=0.20)

    forecast = pd.DataFrame({
        'date': interval_95.index,
        'forecast': interval_95['mean'].values,
        'lower_80': interval_80['pi_lower'].values,
        'upper_80': interval_80['pi_upper'].values,
        'lower_95': interval_95['pi_lower'].values,
        'upper_95': interval_95['pi_upper'].values,
    })

    model_spec = _describe_model(best_fit.model)
    last_price = float(series.iloc[-1])
    final_forecast = float(forecast['forecast'].iloc[-1])
    change = (final_forecast - last_price) / last_price if last_price else 0.0
    direction = "rise" if change > 0.02 else "fall" if change < -0.02 else "stay roughly flat"

    return {
        'status': 'success',
        'model': model_spec,
        'aic': float(best_aic),
        'horizon': horizon,
        'last_observed_price': last_price,
        'final_forecast': final_forecast,
        'forecast': forecast,
        'interpretation': f"An {model_spec} model expects the median price to {direction} "
                         f"over the next {horizon} months ({last_price:.2f} now, {final_forecast:.2f} forecast, "
                         f"{change:+.1%}). The 95% interval at the horizon is "
                         f"{forecast['lower_95'].iloc[-1]:.2f} to {forecast['upper_95'].iloc[-1]:.2f}."
    }


def _describe_model(model: ETSModel) -> str:
    trend = {None: 'N', 'add': 'A'}[model.trend]
    if model.damped_trend:
        trend += 'd'
    seasonal = {None: 'N', 'add': 'A'}[model.seasonal]
    return f"ETS(A,{trend},{seasonal})"


def run_food_price_report(
    prices: pd.DataFrame,
    commodity: Optional[str] = None,
    horizon: Optional[int] = None
) -> Dict:
    try:
        prices = prepare_prices(prices, commodity)
    except KeyError as e:
        return {'forecast': analysis_error(e)}

    if len(prices) == 0:
        return {'forecast': insufficient_data('No price records match the requested commodity')}

    series = create_price_time_series(prices)
    if commodity:
        label = commodity
    elif 'commodity' in prices.columns:
        label = ', '.join(sorted(prices['commodity'].astype(str).unique())[:3])
    else:
        label = 'all commodities'
    logger.info(f"Forecasting {label}: {len(series)} months of data")

    summary = {
        'status': 'success',
        'commodity': label,
        'n_records': len(prices),
        'n_markets': int(prices['market'].nunique()) if 'market' in prices.columns else None,
        'start': series.index.min(),
        'end': series.index.max(),
        'series': series,
        'interpretation': f"{len(prices)} price records for {label} cover "
                         f"{series.index.min():%b %Y} to {series.index.max():%b %Y}; the median price moved from "
                         f"{series.iloc[0]:.2f} to {series.iloc[-1]:.2f}."
    }
    return {
        'price_history': summary,
        'forecast': forecast_prices(series, horizon),
    }
