import re
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.feature_extraction.text import CountVectorizer
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from config.settings import TWEETS
from logger_config import setup_logger
from .interpretation import insufficient_data, is_significant, significance_phrase

logger = setup_logger("exploratory_reports.tweets")

URL_PATTERN = re.compile(r'https?://\S+')
MENTION_PATTERN = re.compile(r'@\w+')
TOKEN_PATTERN = r"(?u)#?\b[a-z][a-z0-9']+\b"

_analyzer = None


def _sentiment_analyzer() -> SentimentIntensityAnalyzer:
    global _analyzer
    if _analyzer is None:
        _analyzer = SentimentIntensityAnalyzer()
    return _analyzer


def clean_text(text: str) -> str:
    text = URL_PATTERN.sub(' ', str(text))
    text = MENTION_PATTERN.sub(' ', text)
    return text.replace('&amp;', '&')


def two_sources(df: pd.DataFrame, source_a: Optional[str] = None, source_b: Optional[str] = None) -> Tuple[str, str]:
    if source_a and source_b:
        return source_a, source_b
    common = df['source'].value_counts().index.tolist()
    common = [s for s in common if s not in (source_a, source_b)]
    if source_a:
        return source_a, common[0]
    if source_b:
        return common[0], source_b
    if len(common) < 2:
        raise ValueError("Need tweets from at least two sources")
    return common[0], common[1]


def tokenize_tweets(df: pd.DataFrame) -> pd.DataFrame:
    """One row per (tweet, word), stop words removed."""
    analyze = CountVectorizer(token_pattern=TOKEN_PATTERN, stop_words='english', lowercase=True).build_analyzer()
    rows = []
    for tweet_id, (text, source) in enumerate(zip(df['text'], df['source'])):
        if pd.isna(text):
            continue
        # quoted retweets start with a literal quote mark and are not the author's words
        if str(text).startswith('"'):
            continue
        for word in analyze(clean_text(text)):
            rows.append((tweet_id, source, word))
    return pd.DataFrame(rows, columns=['tweet_id', 'source', 'word'])


def log_odds_ratio(
    tokens: pd.DataFrame,
    source_a: str,
    source_b: str,
    min_count: Optional[int] = None
) -> pd.DataFrame:
    """
    Laplace-smoothed log2 ratio of a word's share in source_a vs source_b.
    Positive values lean towards source_a.
    """
    min_count = TWEETS['min_word_count'] if min_count is None else min_count
    counts = (
        tokens[tokens['source'].isin([source_a, source_b])]
        .groupby(['word', 'source']).size()
        .unstack(fill_value=0)
        .reindex(columns=[source_a, source_b], fill_value=0)
    )
    counts = counts[counts.sum(axis=1) >= min_count]
    if len(counts) == 0:
        return pd.DataFrame(columns=['word', 'count_a', 'count_b', 'log_ratio'])

    share_a = (counts[source_a] + 1) / (counts[source_a].sum() + 1)
    share_b = (counts[source_b] + 1) / (counts[source_b].sum() + 1)
    result = pd.DataFrame({
        'word': counts.index,
        'count_a': counts[source_a].values,
        'count_b': counts[source_b].values,
        'log_ratio': np.log2(share_a / share_b).values,
    })
    return result.sort_values('log_ratio', ascending=False).reset_index(drop=True)


def hour_profile(df: pd.DataFrame) -> Dict:
    if 'created_at' not in df.columns:
        return insufficient_data('No created_at timestamps recorded')

    times = pd.to_datetime(df['created_at'], errors='coerce', utc=True)
    if TWEETS['timezone']:
        times = times.dt.tz_convert(TWEETS['timezone'])
    valid = times.notna()
    if not valid.any():
        return insufficient_data('No parseable timestamps')

    profile = pd.crosstab(times[valid].dt.hour, df.loc[valid, 'source'], normalize='columns')
    profile = profile.reindex(range(24), fill_value=0.0)
    peaks = {str(source): int(profile[source].idxmax()) for source in profile.columns}

    return {
        'status': 'success',
        'profile': profile,
        'peak_hours': peaks,
        'interpretation': 'Tweeting peaks at ' + '; '.join(f"{h}:00 for {s}" for s, h in peaks.items()) + '.'
    }


def tweet_features_by_source(df: pd.DataFrame) -> Dict:
    text = df['text'].fillna('').astype(str)
    features = pd.DataFrame({
        'source': df['source'],
        'quoted': text.str.startswith('"'),
        'link_or_picture': text.str.contains(r't\.co|https?://|pic\.twitter', regex=True),
    })
    shares = features.groupby('source')[['quoted', 'link_or_picture']].mean()
    if len(shares) == 0:
        return insufficient_data('No tweets to describe')

    parts = [f"{source}: {row['quoted']:.0%} quoted, {row['link_or_picture']:.0%} with links or pictures"
             for source, row in shares.iterrows()]
    return {
        'status': 'success',
        'shares': shares.reset_index().to_dict('records'),
        'interpretation': 'By source, ' + '; '.join(parts) + '.'
    }


def score_sentiment(texts) -> List[float]:
    analyzer = _sentiment_analyzer()
    return [analyzer.polarity_scores(clean_text(t))['compound'] if pd.notna(t) else np.nan for t in texts]


def sentiment_by_source(df: pd.DataFrame, source_a: str, source_b: str) -> Dict:
    scored = df[df['source'].isin([source_a, source_b])].copy()
    scored['sentiment'] = score_sentiment(scored['text'])
    scored = scored.dropna(subset=['sentiment'])

    a = scored.loc[scored['source'] == source_a, 'sentiment']
    b = scored.loc[scored['source'] == source_b, 'sentiment']
    if len(a) < 2 or len(b) < 2:
        return insufficient_data('Need at least two scored tweets per source')

    def shares(values):
        return {
            'mean': float(values.mean()),
            'positive': float((values > TWEETS['positive_threshold']).mean()),
            'negative': float((values < TWEETS['negative_threshold']).mean()),
            'n': int(len(values)),
        }

    u_statistic, p_value = stats.mannwhitneyu(a, b, alternative='two-sided')
    more_negative = source_a if a.mean() < b.mean() else source_b

    return {
        'status': 'success',
        'by_source': {source_a: shares(a), source_b: shares(b)},
        'u_statistic': float(u_statistic),
        'p_value': float(p_value),
        'statistically_significant': is_significant(p_value),
        'interpretation': f"Mean VADER sentiment is {a.mean():+.3f} for {source_a} and {b.mean():+.3f} for {source_b}. "
                         f"{more_negative} is more negative; the difference is {significance_phrase(p_value)} "
                         f"(Mann-Whitney U={u_statistic:.0f}, p={p_value:.4f})."
    }


def run_tweet_report(df: pd.DataFrame, source_a: Optional[str] = None, source_b: Optional[str] = None) -> Dict:
    try:
        source_a, source_b = two_sources(df, source_a, source_b)
    except (ValueError, IndexError):
        return {'words': insufficient_data('Need tweets from at least two sources')}

    logger.info(f"Comparing {source_a} and {source_b} across {len(df)} tweets")
    tokens = tokenize_tweets(df)
    ratios = log_odds_ratio(tokens, source_a, source_b)
    top_n = TWEETS['top_words']

    if len(ratios):
        words = {
            'status': 'success',
            'source_a': source_a,
            'source_b': source_b,
            'n_tokens': len(tokens),
            'log_odds': ratios,
            'top_a': ratios.head(top_n)['word'].tolist(),
            'top_b': ratios.tail(top_n)['word'].iloc[::-1].tolist(),
            'interpretation': f"Words most characteristic of {source_a}: {', '.join(ratios.head(5)['word'])}. "
                             f"Most characteristic of {source_b}: {', '.join(ratios.tail(5)['word'].iloc[::-1])}."
        }
    else:
        words = insufficient_data('No word reaches the minimum count in either source')

    return {
        'words': words,
        'features': tweet_features_by_source(df),
        'hours': hour_profile(df),
        'sentiment': sentiment_by_source(df, source_a, source_b),
    }
