"""Built-in datasets that ship with the reports."""

import pandas as pd

# Charig et al. (1986): successes / patients per treatment and stone size
KIDNEY_STONE_COUNTS = {
    ('A', 'small'): (81, 87),
    ('A', 'large'): (192, 263),
    ('B', 'small'): (234, 270),
    ('B', 'large'): (55, 80),
}


def kidney_stone_data() -> pd.DataFrame:
    """One row per patient: treatment, stone_size and success (1/0)."""
    rows = []
    for (treatment, stone_size), (successes, patients) in KIDNEY_STONE_COUNTS.items():
        rows.extend([(treatment, stone_size, 1)] * successes)
        rows.extend([(treatment, stone_size, 0)] * (patients - successes))
    return pd.DataFrame(rows, columns=['treatment', 'stone_size', 'success'])
