import pandas as pd
from sklearn.linear_model import LinearRegression
from typing import Dict, Optional

from config.settings import TRAFFIC
from logger_config import setup_logger
from .clustering import elbow_curve, elbow_k, fit_kmeans, pca_projection
from .interpretation import insufficient_data, interpret_correlation_strength, interpret_r_squared
from .preprocessing import standardize_frame

logger = setup_logger("exploratory_reports.traffic")

TARGET = TRAFFIC['target']
FEATURES = TRAFFIC['features']


def _numeric(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    for column in [TARGET] + FEATURES:
        if column in df.columns:
            df[column] = pd.to_numeric(df[column], errors='coerce')
    return df.dropna(subset=[c for c in [TARGET] + FEATURES if c in df.columns])


def feature_correlations(df: pd.DataFrame) -> Dict:
    df = _numeric(df)
    columns = [c for c in [TARGET] + FEATURES if c in df.columns]
    if len(df) < 3 or len(columns) < 2:
        return insufficient_data('Need at least 3 states and 2 numeric columns')

    corr = df[columns].corr()
    with_target = corr[TARGET].drop(TARGET)
    strongest = with_target.abs().idxmax()
    r = with_target[strongest]

    return {
        'status': 'success',
        'matrix': corr,
        'with_target': with_target.to_dict(),
        'interpretation': f"The feature most correlated with fatal collisions per billion miles is {strongest} "
                         f"({interpret_correlation_strength(abs(r))}, r={r:.3f})."
    }


def fit_fatality_regression(df: pd.DataFrame) -> Dict:
    df = _numeric(df)
    if len(df) < len(FEATURES) + 2:
        return insufficient_data(f'Need at least {len(FEATURES) + 2} states for the regression')

    X, y = df[FEATURES].values, df[TARGET].values
    model = LinearRegression().fit(X, y)
    r_squared = float(model.score(X, y))
    coefficients = dict(zip(FEATURES, model.coef_.tolist()))
    largest = max(coefficients, key=lambda f: abs(coefficients[f]))

    return {
        'status': 'success',
        'intercept': float(model.intercept_),
        'coefficients': coefficients,
        'r_squared': r_squared,
        'fit_quality': interpret_r_squared(r_squared),
        'interpretation': f"A linear model on the three percentage features explains {r_squared:.1%} of the variation "
                         f"in fatal collision rates ({interpret_r_squared(r_squared)} fit). Largest coefficient: "
                         f"{largest} ({coefficients[largest]:+.3f} per percentage point)."
    }


def cluster_states(df: pd.DataFrame, k: Optional[int] = None, random_state: Optional[int] = None) -> Dict:
    k = k or TRAFFIC['n_clusters']
    random_state = TRAFFIC['random_state'] if random_state is None else random_state
    df = _numeric(df).reset_index(drop=True)
    if len(df) <= k:
        return insufficient_data(f'Need more than {k} states to form {k} clusters')

    scaled = standardize_frame(df, FEATURES, method='zscore')[FEATURES].values
    projection = pca_projection(scaled, n_components=2)
    wss = elbow_curve(scaled, k_max=min(9, len(df) - 1), random_state=random_state)
    model = fit_kmeans(scaled, k, random_state)

    states = df.copy()
    states['cluster'] = model.labels_
    states['pc1'] = projection['scores'][:, 0]
    if projection['scores'].shape[1] > 1:
        states['pc2'] = projection['scores'][:, 1]

    return {
        'status': 'success',
        'k': k,
        'states': states,
        'wss': wss,
        'elbow_k': elbow_k(wss),
        'explained_variance_ratio': projection['explained_variance_ratio'],
        'interpretation': f"The first two principal components explain {sum(projection['explained_variance_ratio'][:2]):.1%} "
                         f"of the variance of the standardised features. The elbow curve suggests k={elbow_k(wss)}; "
                         f"{k} clusters were fitted."
    }


def estimate_fatalities_by_cluster(states: pd.DataFrame, miles: pd.DataFrame) -> Dict:
    merged = states.merge(miles[['state', 'million_miles_annually']], on='state', how='inner')
    merged['million_miles_annually'] = pd.to_numeric(merged['million_miles_annually'], errors='coerce')
    merged = merged.dropna(subset=['million_miles_annually'])
    if len(merged) == 0:
        return insufficient_data('No states matched the miles-driven data')

    merged['num_drvr_fatl_col'] = merged[TARGET] * merged['million_miles_annually'] / 1000
    by_cluster = merged.groupby('cluster')['num_drvr_fatl_col'].agg(['count', 'mean', 'sum']).reset_index()
    target_row = by_cluster.sort_values('sum', ascending=False).iloc[0]
    target_cluster = int(target_row['cluster'])

    return {
        'status': 'success',
        'states': merged,
        'by_cluster': by_cluster,
        'target_cluster': target_cluster,
        'target_states': merged.loc[merged['cluster'] == target_cluster, 'state'].tolist(),
        'interpretation': f"Cluster {target_cluster} accounts for the most estimated fatal collisions "
                         f"({target_row['sum']:,.0f} across {int(target_row['count'])} states) and is the natural "
                         f"target for prevention policy."
    }


def run_traffic_report(accidents: pd.DataFrame, miles: Optional[pd.DataFrame] = None, k: Optional[int] = None) -> Dict:
    logger.info(f"Analysing traffic mortality for {len(accidents)} states")
    report = {
        'correlations': feature_correlations(accidents),
        'regression': fit_fatality_regression(accidents),
        'clusters': cluster_states(accidents, k),
    }
    if miles is not None and report['clusters']['status'] == 'success':
        report['fatalities'] = estimate_fatalities_by_cluster(report['clusters']['states'], miles)
    return report
