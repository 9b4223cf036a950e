import os
import tempfile

os.environ.setdefault("EXPLORATORY_REPORTS_LOG_DIR", tempfile.mkdtemp(prefix="exploratory_reports_logs_"))

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def blobs(rng):
    """Three tight, well separated 2-D blobs of 30 points each."""
    centers = np.array([[0.0, 0.0], [10.0, 0.0], [5.0, 8.66]])
    return np.vstack([center + rng.normal(0, 0.3, size=(30, 2)) for center in centers])


@pytest.fixture
def bustabit_bets(rng):
    rows = []
    for player in range(60):
        style = player % 3
        for game in range(12):
            bet = float(rng.choice([10, 50, 100, 1000]) * (10 if style == 0 else 1))
            busted_at = round(1 + rng.exponential(1.5), 2)
            target = [1.2, 2.0, 5.0][style]
            if target < busted_at:
                cashed_out, profit = target, round(bet * (target - 1), 2)
            else:
                cashed_out, profit = np.nan, np.nan
            rows.append({
                'Id': len(rows),
                'GameID': game,
                'Username': f"player_{player}",
                'Bet': bet,
                'CashedOut': cashed_out,
                'Bonus': 0.0,
                'Profit': profit,
                'BustedAt': busted_at,
            })
    return pd.DataFrame(rows)


@pytest.fixture
def climate_grid(rng):
    rows = []
    for decade, warming in [(1970, 0.0), (2010, 1.5)]:
        for lon in np.arange(-6.0, -1.5, 0.5):
            for lat in np.arange(55.0, 59.0, 0.5):
                rows.append({
                    'longitude': lon,
                    'latitude': lat,
                    'decade': decade,
                    'temperature': 15 - 2 * (lat - 55) + warming + rng.normal(0, 0.2),
                    'precipitation': 1000 - 40 * lon + rng.normal(0, 20),
                })
    return pd.DataFrame(rows)


@pytest.fixture
def bird_presences():
    # cold northern cells are occupied
    rows = []
    for lon in np.arange(-6.0, -1.5, 0.5):
        for lat in np.arange(57.5, 59.0, 0.5):
            rows.append({'longitude': lon + 0.1, 'latitude': lat + 0.1, 'decade': 1970})
    return pd.DataFrame(rows)


@pytest.fixture
def college_majors(rng):
    rows = []
    for group, median in enumerate([30000, 45000, 70000]):
        for i in range(10):
            m = median + rng.normal(0, 1500)
            rows.append({
                'major': f"MAJOR {group}-{i}",
                'major_category': ['Arts', 'Business', 'Engineering'][group],
                'p25th': m - 8000 + rng.normal(0, 500),
                'median': m,
                'p75th': m + 12000 + rng.normal(0, 500),
            })
    return pd.DataFrame(rows)


@pytest.fixture
def breath_tests(rng):
    n = 120
    gender = np.where(np.arange(n) % 2 == 0, 'M', 'F')
    res1 = np.where(gender == 'M', rng.normal(0.12, 0.03, n), rng.normal(0.07, 0.03, n)).clip(0)
    return pd.DataFrame({
        'year': rng.choice([2013, 2014, 2015], n),
        'month': rng.integers(1, 13, n),
        'hour': rng.choice([0, 1, 2, 22, 23], n, p=[0.1, 0.4, 0.2, 0.1, 0.2]),
        'week_type': rng.choice(['weekday', 'weekend'], n),
        'location': rng.choice(['ISU PD', 'Ames PD'], n, p=[0.3, 0.7]),
        'gender': gender,
        'res1': res1.round(3),
        'res2': (res1 + rng.normal(0, 0.005, n)).clip(0).round(3),
    })


@pytest.fixture
def tweets():
    android = [
        "Crooked media is failing and sad. Terrible, dishonest crooked media!",
        "The failing crooked media is a total disgrace. Sad and terrible.",
    ]
    iphone = [
        "Thank you Ohio! Join us tomorrow for a great rally https://t.co/abc",
        "Thank you for a wonderful night. Join us tomorrow! https://t.co/xyz",
    ]
    rows = []
    for i in range(40):
        rows.append({'source': 'Android', 'text': android[i % 2],
                     'created_at': f"2016-08-{1 + i % 28:02d} 06:{i % 60:02d}:00"})
        rows.append({'source': 'iPhone', 'text': iphone[i % 2],
                     'created_at': f"2016-08-{1 + i % 28:02d} 20:{i % 60:02d}:00"})
    rows.append({'source': 'Android', 'text': '"@someone: quoted words never count" ',
                 'created_at': "2016-08-02 06:30:00"})
    return pd.DataFrame(rows)


@pytest.fixture
def road_accidents(rng):
    n = 51
    speed = rng.uniform(10, 50, n)
    alcohol = rng.uniform(15, 45, n)
    first_time = rng.uniform(75, 95, n)
    return pd.DataFrame({
        'state': [f"State {i}" for i in range(n)],
        'drvr_fatl_col_bmiles': 5 + 0.2 * alcohol + 0.05 * speed + rng.normal(0, 1, n),
        'perc_fatl_speed': speed,
        'perc_fatl_alcohol': alcohol,
        'perc_fatl_1st_time': first_time,
    })


@pytest.fixture
def miles_driven(road_accidents, rng):
    return pd.DataFrame({
        'state': road_accidents['state'],
        'million_miles_annually': rng.uniform(5000, 300000, len(road_accidents)).round(),
    })


@pytest.fixture
def food_prices(rng):
    rows = []
    months = pd.date_range("2008-01-01", periods=60, freq="MS")
    for market in ['Kabul', 'Herat']:
        for i, date in enumerate(months):
            price = 20 + 0.1 * i + 2 * np.sin(2 * np.pi * date.month / 12) + rng.normal(0, 0.3)
            rows.append({
                'adm0_name': 'Afghanistan',
                'mkt_name': market,
                'cm_name': 'Potatoes (Irish) - Retail',
                'mp_month': date.month,
                'mp_year': date.year,
                'mp_price': round(price, 2),
            })
    return pd.DataFrame(rows)
