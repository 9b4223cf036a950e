import numpy as np
import pandas as pd
import pytest

from src.data import (
    DataLoadError,
    clean_csv_file,
    clean_dataframe,
    kidney_stone_data,
    load_bustabit,
    load_food_prices,
    load_road_accidents,
    missing_value_summary,
    read_flat_file,
    require_columns
)
from src.data.loader import to_snake_case


def test_read_flat_file_sniffs_semicolons(tmp_path):
    path = tmp_path / "semi.csv"
    path.write_text("a;b;c\n1;2;3\n4;5;6\n")

    df = read_flat_file(path)
    assert list(df.columns) == ['a', 'b', 'c']
    assert df['c'].tolist() == [3, 6]


def test_read_flat_file_missing_file_raises(tmp_path):
    with pytest.raises(DataLoadError):
        read_flat_file(tmp_path / "nope.csv")


def test_leading_comments_skipped_but_hashes_in_values_kept(tmp_path):
    path = tmp_path / "road.csv"
    path.write_text(
        "##### LICENSE #####\n"
        "# fivethirtyeight data\n"
        "\n"
        "state|drvr_fatl_col_bmiles|note\n"
        "Alabama|18.8|#1 for speed\n"
        "Alaska|18.1|ok\n"
    )

    df = load_road_accidents(path)
    assert len(df) == 2
    assert df.loc[0, 'note'] == '#1 for speed'


def test_require_columns():
    df = pd.DataFrame({'a': [1]})
    require_columns(df, ['a'])
    with pytest.raises(ValueError, match="missing required column"):
        require_columns(df, ['a', 'b'], 'test data')


def test_to_snake_case():
    assert to_snake_case('Major Category') == 'major_category'
    assert to_snake_case('CashedOut') == 'cashed_out'
    assert to_snake_case(' P25th ') == 'p25th'


def test_food_price_loader_renames_wfp_columns(tmp_path, food_prices):
    path = tmp_path / "prices.csv"
    food_prices.to_csv(path, index=False)

    df = load_food_prices(path)
    assert {'commodity', 'market', 'month', 'year', 'price'}.issubset(df.columns)


def test_bustabit_loader_requires_columns(tmp_path):
    path = tmp_path / "bets.csv"
    pd.DataFrame({'Username': ['a'], 'Bet': [1]}).to_csv(path, index=False)
    with pytest.raises(ValueError):
        load_bustabit(path)


def test_kidney_stone_data_counts():
    df = kidney_stone_data()
    assert len(df) == 700
    assert df.groupby('treatment').size().to_dict() == {'A': 350, 'B': 350}
    assert int(df['success'].sum()) == 81 + 192 + 234 + 55


def test_clean_dataframe():
    raw = pd.DataFrame({
        'First Name': ['Alice', ' Bob ', 'Alice', None],
        'Salary': ['$1,200', '$950', '$1,200', None],
        'Joined': ['2020-01-05', '2021-03-10', '2020-01-05', None],
        'Notes': ['n/a', 'ok', 'n/a', None],
        'Empty': [None, None, None, None],
    })

    cleaned, log = clean_dataframe(raw)

    assert list(cleaned.columns) == ['first_name', 'salary', 'joined', 'notes']
    assert log['renamed_columns']['First Name'] == 'first_name'
    assert log['numeric_columns'] == ['salary']
    assert log['date_columns'] == ['joined']
    assert log['dropped_empty_columns'] == ['empty']
    assert log['dropped_empty_rows'] == 1
    assert log['dropped_duplicates'] == 1
    assert cleaned['salary'].tolist() == [1200.0, 950.0]
    assert cleaned.loc[1, 'first_name'] == 'Bob'
    assert pd.isna(cleaned.loc[0, 'notes'])
    assert pd.api.types.is_datetime64_any_dtype(cleaned['joined'])


def test_clean_dataframe_dedupes_column_names():
    raw = pd.DataFrame([[1, 2]], columns=['Total Sales', 'total-sales'])
    cleaned, _ = clean_dataframe(raw)
    assert list(cleaned.columns) == ['total_sales', 'total_sales_1']

    raw = pd.DataFrame([[1, 2, 3]], columns=['a', 'a_1', 'a'])
    cleaned, _ = clean_dataframe(raw)
    assert list(cleaned.columns) == ['a', 'a_1', 'a_2']


def test_missing_value_summary():
    df = pd.DataFrame({'a': [1, np.nan, np.nan, 4], 'b': [1, 2, 3, 4]})
    summary = missing_value_summary(df)
    assert summary['column'].tolist() == ['a']
    assert summary.loc[0, 'null_percentage'] == 50.0


def test_clean_csv_file(tmp_path):
    source = tmp_path / "raw.csv"
    source.write_text(
        "Name,Amount\n"
        "x,\"1,000\"\n"
        "y,20\n"
        "y,20\n"
    )

    result = clean_csv_file(source, tmp_path / "out" / "clean.csv")

    assert result['status'] == 'success'
    assert result['rows_before'] == 3
    assert result['rows_after'] == 2
    written = pd.read_csv(tmp_path / "out" / "clean.csv")
    assert written['amount'].tolist() == [1000, 20]
