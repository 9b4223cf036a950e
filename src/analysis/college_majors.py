import pandas as pd
from typing import Dict, Optional

from config.settings import COLLEGE_MAJORS, CLUSTERING
from logger_config import setup_logger
from .clustering import choose_k, fit_kmeans
from .interpretation import insufficient_data
from .preprocessing import standardize_frame

logger = setup_logger("exploratory_reports.college_majors")

EARNINGS = COLLEGE_MAJORS['earnings_columns']


def select_earnings(df: pd.DataFrame) -> pd.DataFrame:
    columns = ['major'] + (['major_category'] if 'major_category' in df.columns else []) + EARNINGS
    selected = df[columns].copy()
    for column in EARNINGS:
        selected[column] = pd.to_numeric(selected[column], errors='coerce')
    return selected.dropna(subset=EARNINGS).reset_index(drop=True)


def cluster_majors(
    df: pd.DataFrame,
    k: Optional[int] = None,
    k_max: Optional[int] = None,
    n_refs: Optional[int] = None
) -> Dict:
    majors = select_earnings(df)
    if len(majors) < 3:
        return insufficient_data('Need at least 3 majors with earnings data')

    scaled = standardize_frame(majors, EARNINGS, method='zscore')[EARNINGS].values
    selection = choose_k(scaled, k_max, n_refs)
    if k is None:
        k = selection['gap_k']
    k = min(k, len(majors))

    model = fit_kmeans(scaled, k, CLUSTERING['random_state'])
    majors['cluster'] = model.labels_ + 1

    # order clusters by earnings so cluster 1 is always the lowest-paid group
    order = majors.groupby('cluster')['median'].mean().sort_values().index
    relabel = {old: new for new, old in enumerate(order, start=1)}
    majors['cluster'] = majors['cluster'].map(relabel)

    summary = majors.groupby('cluster').agg(
        n_majors=('major', 'count'),
        p25th=('p25th', 'mean'),
        median=('median', 'mean'),
        p75th=('p75th', 'mean'),
    ).reset_index()

    top = majors.sort_values('median', ascending=False).groupby('cluster').head(3)
    top_majors = {int(c): group['major'].tolist() for c, group in top.groupby('cluster')}
    best = summary.iloc[-1]

    return {
        'status': 'success',
        'k': int(k),
        'elbow_k': selection['elbow_k'],
        'silhouette_k': selection['silhouette_k'],
        'gap_k': selection['gap_k'],
        'wss': selection['wss'],
        'silhouette': selection['silhouette'],
        'gap': selection['gap'],
        'majors': majors,
        'summary': summary,
        'top_majors': top_majors,
        'interpretation': f"The elbow method suggests k={selection['elbow_k']}, the average silhouette width "
                         f"k={selection['silhouette_k']} and the gap statistic k={selection['gap_k']}; "
                         f"{k} clusters were used. The highest-earning cluster ({int(best['n_majors'])} majors) has a "
                         f"mean median salary of {best['median']:,.0f}, led by {', '.join(top_majors[int(best['cluster'])])}."
    }


def run_college_major_report(df: pd.DataFrame, k: Optional[int] = None) -> Dict:
    logger.info(f"Clustering {len(df)} majors by earnings")
    return {'clusters': cluster_majors(df, k)}
