import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from typing import Dict, Optional

from config.settings import CHARTS, BREATHALYZER, TRAFFIC

PALETTE = CHARTS['palette']


def _empty_figure(message: str = 'No data available') -> plt.Figure:
    fig, ax = plt.subplots(figsize=CHARTS['figsize'])
    ax.text(0.5, 0.5, message, ha='center', va='center', transform=ax.transAxes)
    ax.set_axis_off()
    return fig


def _ok(section: Optional[Dict]) -> bool:
    return bool(section) and section.get('status') == 'success'


def create_report_charts(report_key: str, report: Dict, data: Optional[pd.DataFrame] = None) -> Dict[str, plt.Figure]:
    builders = {
        'kidney_stones': _kidney_stone_charts,
        'food_prices': _food_price_charts,
        'gambling': _gambling_charts,
        'birds': _bird_charts,
        'college_majors': _college_major_charts,
        'breathalyzer': _breathalyzer_charts,
        'tweets': _tweet_charts,
        'traffic': _traffic_charts,
    }
    builder = builders.get(report_key)
    if builder is None:
        return {}
    return builder(report, data)


# Kidney stones

def _kidney_stone_charts(report: Dict, data: Optional[pd.DataFrame]) -> Dict[str, plt.Figure]:
    charts = {}
    paradox = report.get('simpsons_paradox')
    if _ok(paradox):
        charts['success_rates'] = create_success_rate_chart(paradox)
    model = report.get('success_model')
    if _ok(model):
        charts['odds_ratios'] = create_coefficient_chart(model)
    return charts


def create_success_rate_chart(paradox: Dict) -> plt.Figure:
    fig, ax = plt.subplots(figsize=CHARTS['figsize'])

    stratified = pd.DataFrame(paradox['stratified_rates'])
    overall = pd.DataFrame({
        'stone_size': 'overall',
        'treatment': list(paradox['overall_rates'].keys()),
        'success_rate': list(paradox['overall_rates'].values()),
    })
    plot_df = pd.concat([stratified, overall], ignore_index=True)
    pivot = plot_df.pivot(index='stone_size', columns='treatment', values='success_rate')

    x = np.arange(len(pivot.index))
    width = 0.8 / max(len(pivot.columns), 1)
    for i, treatment in enumerate(pivot.columns):
        ax.bar(x + i * width, pivot[treatment], width=width, label=f'Treatment {treatment}',
               color=PALETTE[i % len(PALETTE)], alpha=0.8)

    ax.set_xticks(x + width * (len(pivot.columns) - 1) / 2)
    ax.set_xticklabels(pivot.index)
    ax.set_ylim(0, 1)
    ax.set_ylabel('Success rate')
    ax.set_title("Success Rate by Treatment and Stone Size")
    ax.legend()

    plt.tight_layout()
    return fig


def create_coefficient_chart(model: Dict) -> plt.Figure:
    fig, ax = plt.subplots(figsize=(8, 4))

    coefs = pd.DataFrame(model['coefficients'])
    coefs = coefs[coefs['term'] != 'Intercept']
    if len(coefs) == 0:
        plt.close(fig)
        return _empty_figure('No coefficients to plot')

    y = np.arange(len(coefs))
    ax.errorbar(
        np.exp(coefs['estimate']), y,
        xerr=[np.exp(coefs['estimate']) - np.exp(coefs['conf_low']),
              np.exp(coefs['conf_high']) - np.exp(coefs['estimate'])],
        fmt='o', color='steelblue', capsize=5
    )
    ax.axvline(1, color='red', linestyle='--', alpha=0.7)
    ax.set_yticks(y)
    ax.set_yticklabels(coefs['term'])
    ax.set_xlabel('Odds ratio (95% CI)')
    ax.set_title('Logistic Regression: Odds of Success')

    plt.tight_layout()
    return fig


# Food prices

def _food_price_charts(report: Dict, data: Optional[pd.DataFrame]) -> Dict[str, plt.Figure]:
    history = report.get('price_history')
    if not _ok(history):
        return {}
    forecast = report.get('forecast')
    return {'price_forecast': create_price_forecast_chart(history, forecast if _ok(forecast) else None)}


def create_price_forecast_chart(history: Dict, forecast: Optional[Dict] = None) -> plt.Figure:
    fig, ax = plt.subplots(figsize=CHARTS['figsize'])

    series = history['series']
    ax.plot(series.index, series.values, color='steelblue', label='Median price')

    if forecast is not None:
        fc = forecast['forecast']
        ax.plot(fc['date'], fc['forecast'], color='#e67e22', label=f"Forecast ({forecast['model']})")
        ax.fill_between(fc['date'], fc['lower_95'], fc['upper_95'], color='#e67e22', alpha=0.15, label='95% interval')
        ax.fill_between(fc['date'], fc['lower_80'], fc['upper_80'], color='#e67e22', alpha=0.3, label='80% interval')

    ax.set_xlabel('Date')
    ax.set_ylabel('Median price')
    ax.set_title(f"Price History and Forecast: {history['commodity']}")
    ax.legend()

    plt.tight_layout()
    return fig


# Gambling

def _gambling_charts(report: Dict, data: Optional[pd.DataFrame]) -> Dict[str, plt.Figure]:
    clusters = report.get('clusters')
    if not _ok(clusters):
        return {}
    return {
        'parallel_coordinates': create_parallel_coordinates_chart(clusters['scaled_profiles'], clusters['cluster_names']),
        'pca_clusters': create_pca_cluster_chart(
            clusters['pca_scores'], clusters['players']['cluster_name'],
            'Bustabit Players: First Two Principal Components'
        ),
    }


def create_parallel_coordinates_chart(scaled: pd.DataFrame, names: Optional[Dict[int, str]] = None) -> plt.Figure:
    fig, ax = plt.subplots(figsize=CHARTS['figsize'])

    features = [c for c in scaled.columns if c != 'cluster']
    x = np.arange(len(features))
    for i, (_, row) in enumerate(scaled.iterrows()):
        cluster = int(row['cluster'])
        label = (names or {}).get(cluster, f'Cluster {cluster}')
        ax.plot(x, row[features].values.astype(float), marker='o', color=PALETTE[i % len(PALETTE)], label=label)

    ax.set_xticks(x)
    ax.set_xticklabels(features, rotation=30, ha='right')
    ax.set_ylabel('Min-max scaled cluster average')
    ax.set_title('Cluster Profiles (Parallel Coordinates)')
    ax.legend(fontsize=8)

    plt.tight_layout()
    return fig


def create_pca_cluster_chart(scores: np.ndarray, labels: pd.Series, title: str) -> plt.Figure:
    fig, ax = plt.subplots(figsize=CHARTS['figsize'])

    scores = np.asarray(scores)
    labels = pd.Series(labels).reset_index(drop=True)
    y = scores[:, 1] if scores.shape[1] > 1 else np.zeros(len(scores))
    for i, label in enumerate(sorted(labels.unique(), key=str)):
        mask = (labels == label).values
        ax.scatter(scores[mask, 0], y[mask], s=30, alpha=0.7, color=PALETTE[i % len(PALETTE)], label=str(label))

    ax.set_xlabel('PC1')
    ax.set_ylabel('PC2')
    ax.set_title(title)
    ax.legend(fontsize=8)

    plt.tight_layout()
    return fig


# Birds

def _bird_charts(report: Dict, data: Optional[pd.DataFrame]) -> Dict[str, plt.Figure]:
    predictions = report.get('predictions')
    if not _ok(predictions) or not predictions.get('by_period'):
        return {}
    return {'occurrence_by_period': create_occurrence_trend_chart(predictions['by_period'])}


def create_occurrence_trend_chart(by_period: Dict[str, float]) -> plt.Figure:
    fig, ax = plt.subplots(figsize=(8, 5))

    periods = list(by_period.keys())
    ax.plot(periods, list(by_period.values()), marker='o', color='#2ecc71')
    ax.set_ylim(0, 1)
    ax.set_xlabel('Period')
    ax.set_ylabel('Mean probability of occurrence')
    ax.set_title('Predicted Occurrence by Period')

    plt.tight_layout()
    return fig


# College majors

def _college_major_charts(report: Dict, data: Optional[pd.DataFrame]) -> Dict[str, plt.Figure]:
    clusters = report.get('clusters')
    if not _ok(clusters):
        return {}
    return {
        'k_selection': create_k_selection_chart(clusters['wss'], clusters['silhouette'], clusters['gap']),
        'earnings_by_cluster': create_earnings_chart(clusters['majors']),
    }


def create_k_selection_chart(wss: Dict[int, float], silhouette: Dict[int, float], gap: Dict) -> plt.Figure:
    fig, axes = plt.subplots(1, 3, figsize=(15, 4.5))

    axes[0].plot(list(wss.keys()), list(wss.values()), marker='o', color='steelblue')
    axes[0].set_title('Elbow method')
    axes[0].set_xlabel('k')
    axes[0].set_ylabel('Total within-cluster SS')

    if silhouette:
        axes[1].plot(list(silhouette.keys()), list(silhouette.values()), marker='o', color='#e67e22')
    axes[1].set_title('Average silhouette width')
    axes[1].set_xlabel('k')

    axes[2].errorbar(gap['k'], gap['gap'], yerr=gap['se'], marker='o', color='#2ecc71', capsize=4)
    axes[2].axvline(gap['best_k'], color='red', linestyle='--', alpha=0.7)
    axes[2].set_title('Gap statistic')
    axes[2].set_xlabel('k')

    plt.tight_layout()
    return fig


def create_earnings_chart(majors: pd.DataFrame) -> plt.Figure:
    fig, ax = plt.subplots(figsize=CHARTS['figsize'])

    for i, (cluster, group) in enumerate(majors.groupby('cluster')):
        ax.scatter(group['median'], group['p75th'] - group['p25th'], s=30, alpha=0.7,
                   color=PALETTE[i % len(PALETTE)], label=f'Cluster {cluster}')

    ax.set_xlabel('Median earnings')
    ax.set_ylabel('Interquartile range (p75th - p25th)')
    ax.set_title('College Majors Clustered by Earnings')
    ax.legend()

    plt.tight_layout()
    return fig


# Breathalyzer

def _breathalyzer_charts(report: Dict, data: Optional[pd.DataFrame]) -> Dict[str, plt.Figure]:
    charts = {}
    by_hour = report.get('tests_by_hour')
    if _ok(by_hour):
        charts['tests_by_hour'] = create_count_chart(by_hour['counts'], 'Hour of day', 'Breath Tests by Hour')
    by_location = report.get('tests_by_location')
    if _ok(by_location):
        charts['tests_by_location'] = create_count_chart(by_location['counts'], 'Location', 'Breath Tests by Location')
    if data is not None and _ok(report.get('results')):
        charts['bac_distribution'] = create_bac_histogram(data)
    return charts


def create_count_chart(counts: Dict[str, int], xlabel: str, title: str) -> plt.Figure:
    fig, ax = plt.subplots(figsize=CHARTS['figsize'])

    ax.bar(list(counts.keys()), list(counts.values()), color='steelblue', alpha=0.8)
    ax.set_xlabel(xlabel)
    ax.set_ylabel('Number of tests')
    ax.set_title(title)
    plt.setp(ax.get_xticklabels(), rotation=45, ha='right')

    plt.tight_layout()
    return fig


def create_bac_histogram(df: pd.DataFrame, limit: Optional[float] = None) -> plt.Figure:
    limit = limit or BREATHALYZER['legal_limit']
    fig, ax = plt.subplots(figsize=(8, 5))

    columns = BREATHALYZER['result_columns']
    values = df[columns].apply(pd.to_numeric, errors='coerce').mean(axis=1).dropna()
    ax.hist(values, bins=30, color='steelblue', edgecolor='black', alpha=0.7)
    ax.axvline(limit, color='red', linestyle='--', label=f'Legal limit: {limit}')
    ax.set_xlabel('Mean blood alcohol content')
    ax.set_ylabel('Number of tests')
    ax.set_title('Distribution of Breath Test Results')
    ax.legend()

    plt.tight_layout()
    return fig


# Tweets

def _tweet_charts(report: Dict, data: Optional[pd.DataFrame]) -> Dict[str, plt.Figure]:
    charts = {}
    words = report.get('words')
    if _ok(words):
        charts['log_odds'] = create_log_odds_chart(words['log_odds'], words['source_a'], words['source_b'])
    hours = report.get('hours')
    if _ok(hours):
        charts['hour_profile'] = create_hour_profile_chart(hours['profile'])
    return charts


def create_log_odds_chart(ratios: pd.DataFrame, source_a: str, source_b: str, n: int = 10) -> plt.Figure:
    fig, ax = plt.subplots(figsize=(10, 8))

    top = pd.concat([ratios.head(n), ratios.tail(n)]).drop_duplicates(subset='word')
    top = top.sort_values('log_ratio')
    colors = ['#e67e22' if v < 0 else 'steelblue' for v in top['log_ratio']]
    ax.barh(top['word'], top['log_ratio'], color=colors)
    ax.axvline(0, color='black', linewidth=0.8)
    ax.set_xlabel(f'log2 ratio ({source_a} / {source_b})')
    ax.set_title(f'Words Most Characteristic of {source_a} vs {source_b}')

    plt.tight_layout()
    return fig


def create_hour_profile_chart(profile: pd.DataFrame) -> plt.Figure:
    fig, ax = plt.subplots(figsize=CHARTS['figsize'])

    for i, source in enumerate(profile.columns):
        ax.plot(profile.index, profile[source] * 100, marker='o', color=PALETTE[i % len(PALETTE)], label=str(source))

    ax.set_xticks(range(0, 24, 2))
    ax.set_xlabel('Hour of day')
    ax.set_ylabel('% of tweets')
    ax.set_title('Tweets by Hour of Day')
    ax.legend()

    plt.tight_layout()
    return fig


# Traffic

def _traffic_charts(report: Dict, data: Optional[pd.DataFrame]) -> Dict[str, plt.Figure]:
    clusters = report.get('clusters')
    if not _ok(clusters):
        return {}
    states = clusters['states']
    charts = {
        'elbow': create_elbow_chart(clusters['wss']),
        'feature_boxplots': create_cluster_boxplots(states, TRAFFIC['features']),
    }
    if 'pc2' in states.columns:
        charts['pca_clusters'] = create_pca_cluster_chart(
            states[['pc1', 'pc2']].values, states['cluster'], 'States: First Two Principal Components'
        )
    return charts


def create_elbow_chart(wss: Dict[int, float]) -> plt.Figure:
    fig, ax = plt.subplots(figsize=(8, 5))

    ax.plot(list(wss.keys()), list(wss.values()), marker='o', color='steelblue')
    ax.set_xlabel('Number of clusters')
    ax.set_ylabel('Within-cluster sum of squares')
    ax.set_title('Elbow Method for Optimal k')

    plt.tight_layout()
    return fig


def create_cluster_boxplots(df: pd.DataFrame, features) -> plt.Figure:
    fig, axes = plt.subplots(1, len(features), figsize=(5 * len(features), 5), squeeze=False)

    clusters = sorted(df['cluster'].unique())
    for ax, feature in zip(axes[0], features):
        ax.boxplot([df.loc[df['cluster'] == c, feature].values for c in clusters])
        ax.set_xticks(range(1, len(clusters) + 1))
        ax.set_xticklabels([str(c) for c in clusters])
        ax.set_xlabel('Cluster')
        ax.set_title(feature)

    plt.tight_layout()
    return fig
