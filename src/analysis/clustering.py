"""
Cluster-count selection and projection helpers
==============================================

Wraps scikit-learn KMeans/PCA with the three usual ways of choosing k:
- Elbow: within-cluster sum of squares for k = 1..k_max
- Silhouette: average silhouette width for k = 2..k_max
- Gap statistic: comparison against uniform reference data (Tibshirani et al. 2001)
"""
from typing import Dict, Optional

import numpy as np
from sklearn.cluster import KMeans
from sklearn.decomposition import PCA
from sklearn.metrics import silhouette_score

from config.settings import CLUSTERING


def _as_matrix(X) -> np.ndarray:
    X = np.asarray(X, dtype=float)
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    if len(X) == 0:
        raise ValueError("Cannot cluster an empty dataset")
    return X


def _max_k(X: np.ndarray, k_max: Optional[int]) -> int:
    k_max = k_max or CLUSTERING['k_max']
    return max(1, min(k_max, len(X) - 1))


def fit_kmeans(X, k: int, random_state: Optional[int] = None, n_init: Optional[int] = None) -> KMeans:
    X = _as_matrix(X)
    if k < 1 or k > len(X):
        raise ValueError(f"k must be between 1 and {len(X)}, got {k}")

    random_state = CLUSTERING['random_state'] if random_state is None else random_state
    model = KMeans(n_clusters=k, n_init=n_init or CLUSTERING['n_init'], random_state=random_state)
    model.fit(X)
    return model


def elbow_curve(X, k_max: Optional[int] = None, random_state: Optional[int] = None) -> Dict[int, float]:
    X = _as_matrix(X)
    return {
        k: float(fit_kmeans(X, k, random_state).inertia_)
        for k in range(1, _max_k(X, k_max) + 1)
    }


def elbow_k(wss: Dict[int, float]) -> int:
    """k whose point lies furthest from the straight line joining the first and last points."""
    ks = np.array(sorted(wss))
    if len(ks) < 3:
        return int(ks[-1])
    values = np.array([wss[k] for k in ks])

    x = (ks - ks.min()) / (ks.max() - ks.min())
    value_range = values.max() - values.min()
    if value_range == 0:
        return int(ks[0])
    y = (values - values.min()) / value_range

    # distance to the chord from (x0, y0) to (x1, y1)
    x0, y0, x1, y1 = x[0], y[0], x[-1], y[-1]
    distances = np.abs((y1 - y0) * x - (x1 - x0) * y + x1 * y0 - y1 * x0) / np.hypot(y1 - y0, x1 - x0)
    return int(ks[np.argmax(distances)])


def silhouette_curve(X, k_max: Optional[int] = None, random_state: Optional[int] = None) -> Dict[int, float]:
    X = _as_matrix(X)
    scores = {}
    for k in range(2, _max_k(X, k_max) + 1):
        labels = fit_kmeans(X, k, random_state).labels_
        if len(np.unique(labels)) < 2:
            continue
        scores[k] = float(silhouette_score(X, labels))
    return scores


def best_silhouette_k(scores: Dict[int, float]) -> Optional[int]:
    if not scores:
        return None
    return int(max(scores, key=scores.get))


def gap_statistic(
    X,
    k_max: Optional[int] = None,
    n_refs: Optional[int] = None,
    random_state: Optional[int] = None
) -> Dict:
    X = _as_matrix(X)
    k_max = _max_k(X, k_max)
    n_refs = n_refs or CLUSTERING['gap_references']
    if n_refs < 2:
        raise ValueError("Gap statistic needs at least two reference data sets")
    random_state = CLUSTERING['random_state'] if random_state is None else random_state
    rng = np.random.default_rng(random_state)

    mins, maxs = X.min(axis=0), X.max(axis=0)
    references = [rng.uniform(mins, maxs, size=X.shape) for _ in range(n_refs)]

    ks = list(range(1, k_max + 1))
    gaps, standard_errors, log_wks = [], [], []
    for k in ks:
        log_wk = np.log(_pooled_dispersion(X, k, random_state))
        ref_log_wks = np.array([
            np.log(_pooled_dispersion(ref, k, random_state)) for ref in references
        ])
        gaps.append(float(ref_log_wks.mean() - log_wk))
        standard_errors.append(float(ref_log_wks.std(ddof=1) * np.sqrt(1 + 1 / n_refs)))
        log_wks.append(float(log_wk))

    return {
        'k': ks,
        'gap': gaps,
        'se': standard_errors,
        'log_wk': log_wks,
        'best_k': _first_se_max(gaps, standard_errors),
    }


def _pooled_dispersion(X: np.ndarray, k: int, random_state: int) -> float:
    # inertia is W_k; floored so log() stays finite
    inertia = fit_kmeans(X, k, random_state, n_init=CLUSTERING['gap_n_init']).inertia_
    return max(float(inertia), np.finfo(float).tiny)


def _first_se_max(gaps, standard_errors) -> int:
    """Smallest k with gap(k) >= gap(k+1) - se(k+1), falling back to the largest gap."""
    for i in range(len(gaps) - 1):
        if gaps[i] >= gaps[i + 1] - standard_errors[i + 1]:
            return i + 1
    return int(np.argmax(gaps)) + 1


def choose_k(X, k_max: Optional[int] = None, n_refs: Optional[int] = None) -> Dict:
    X = _as_matrix(X)
    wss = elbow_curve(X, k_max)
    silhouettes = silhouette_curve(X, k_max)
    gap = gap_statistic(X, k_max, n_refs)
    return {
        'wss': wss,
        'silhouette': silhouettes,
        'gap': gap,
        'elbow_k': elbow_k(wss),
        'silhouette_k': best_silhouette_k(silhouettes),
        'gap_k': gap['best_k'],
    }


def pca_projection(X, n_components: int = 2) -> Dict:
    X = _as_matrix(X)
    n_components = min(n_components, X.shape[1], len(X))
    pca = PCA(n_components=n_components)
    scores = pca.fit_transform(X)
    return {
        'scores': scores,
        'explained_variance_ratio': pca.explained_variance_ratio_.tolist(),
        'cumulative_variance': np.cumsum(pca.explained_variance_ratio_).tolist(),
        'components': pca.components_,
    }
