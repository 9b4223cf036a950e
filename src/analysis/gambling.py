import numpy as np
import pandas as pd
from typing import Dict, Optional

from config.settings import GAMBLING
from logger_config import setup_logger
from .clustering import fit_kmeans, pca_projection
from .interpretation import insufficient_data
from .preprocessing import mean_sd_standard, min_max_standard

logger = setup_logger("exploratory_reports.gambling")


def engineer_bet_features(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    for column in ['Bet', 'CashedOut', 'Profit', 'BustedAt']:
        df[column] = pd.to_numeric(df[column], errors='coerce')

    # a player who never cashed out would have needed to leave just above the bust point
    df['CashedOut'] = df['CashedOut'].fillna(df['BustedAt'] + GAMBLING['cashout_offset'])
    df['Profit'] = df['Profit'].fillna(0)
    df['Losses'] = np.where(df['Profit'] == 0, -1 * df['Bet'], 0)
    df['GameWon'] = (df['Profit'] != 0).astype(int)
    df['GameLost'] = (df['Profit'] == 0).astype(int)
    return df


def summarise_players(df: pd.DataFrame) -> pd.DataFrame:
    players = df.groupby('Username').agg(
        AverageCashedOut=('CashedOut', 'mean'),
        AverageBet=('Bet', 'mean'),
        TotalProfit=('Profit', 'sum'),
        TotalLosses=('Losses', 'sum'),
        GamesWon=('GameWon', 'sum'),
        GamesLost=('GameLost', 'sum'),
    ).reset_index()
    return players.dropna(subset=GAMBLING['features']).reset_index(drop=True)


def cluster_players(players: pd.DataFrame, k: Optional[int] = None, random_state: Optional[int] = None) -> pd.DataFrame:
    k = k or GAMBLING['n_clusters']
    if len(players) < k:
        raise ValueError(f"Need at least {k} players to form {k} clusters, got {len(players)}")

    standardized = players[GAMBLING['features']].apply(mean_sd_standard)
    model = fit_kmeans(standardized.values, k, random_state)

    players = players.copy()
    players['cluster'] = model.labels_ + 1
    return players


def cluster_profiles(players: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    features = GAMBLING['features']
    averages = players.groupby('cluster')[features].mean()
    averages['size'] = players.groupby('cluster').size()

    scaled = averages[features].apply(min_max_standard)
    return {
        'averages': averages.reset_index(),
        'scaled': scaled.reset_index(),
    }


def name_clusters(averages: pd.DataFrame) -> Dict[int, str]:
    """
    Label clusters by their most extreme profile, in this order:
    highest average bet, most games played, highest average cash-out,
    lowest average cash-out; the last one standing is the risky commoner.
    """
    remaining = averages.set_index('cluster').copy()
    remaining['GamesPlayed'] = remaining['GamesWon'] + remaining['GamesLost']
    rules = [
        ('AverageBet', 'max'),
        ('GamesPlayed', 'max'),
        ('AverageCashedOut', 'max'),
        ('AverageCashedOut', 'min'),
        ('AverageCashedOut', 'max'),
    ]

    names = {}
    for name, (column, how) in zip(GAMBLING['cluster_names'], rules):
        if len(remaining) == 0:
            break
        cluster = remaining[column].idxmax() if how == 'max' else remaining[column].idxmin()
        names[int(cluster)] = name
        remaining = remaining.drop(index=cluster)

    for cluster in remaining.index:
        names[int(cluster)] = f"Cluster {cluster}"
    return names


def run_gambling_report(df: pd.DataFrame, k: Optional[int] = None) -> Dict:
    k = k or GAMBLING['n_clusters']
    bets = engineer_bet_features(df)
    players = summarise_players(bets)
    logger.info(f"Summarised {len(bets)} bets into {len(players)} players")

    if len(players) < k:
        return {'clusters': insufficient_data(f'Need at least {k} players to form {k} clusters')}

    players = cluster_players(players, k)
    profiles = cluster_profiles(players)
    names = name_clusters(profiles['averages'])
    players['cluster_name'] = players['cluster'].map(names)
    averages = profiles['averages'].copy()
    averages['cluster_name'] = averages['cluster'].map(names)

    standardized = players[GAMBLING['features']].apply(mean_sd_standard)
    projection = pca_projection(standardized.values, n_components=2)

    largest = averages.sort_values('size', ascending=False).iloc[0]
    profitable = averages.sort_values('TotalProfit', ascending=False).iloc[0]

    return {
        'bets': {
            'status': 'success',
            'n_bets': len(bets),
            'n_players': len(players),
            'win_rate': float(bets['GameWon'].mean()),
            'interpretation': f"{len(bets)} bets from {len(players)} players; "
                             f"{bets['GameWon'].mean():.1%} of bets were cashed out before the game busted."
        },
        'clusters': {
            'status': 'success',
            'k': k,
            'players': players,
            'averages': averages,
            'scaled_profiles': profiles['scaled'],
            'cluster_names': names,
            'pca_scores': projection['scores'],
            'pca_explained_variance': projection['explained_variance_ratio'],
            'interpretation': f"K-means on standardised player features finds {k} groups. "
                             f"The largest group is '{largest['cluster_name']}' ({int(largest['size'])} players); "
                             f"'{profitable['cluster_name']}' has the highest average total profit "
                             f"({profitable['TotalProfit']:.2f}). The first two principal components explain "
                             f"{sum(projection['explained_variance_ratio']):.1%} of the variance."
        }
    }
