"""
Exploratory Reports - Streamlit App
===================================

Browse a set of short exploratory data-analysis reports:
- Kidney stone treatments (Simpson's paradox)
- Food price forecasting
- Bustabit gambling behaviour clusters
- Bird species distribution
- College majors by earnings
- Breathalyzer tests
- Tweets by source
- Traffic mortality by state
- CSV data cleaning

Each report loads a flat file (or built-in data), runs its analysis and
shows the narrated result next to its charts.
"""

import tempfile
from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd
import streamlit as st
import streamlit.components.v1 as components

from config.settings import REPORTS_DIR
from logger_config import setup_logger
from src.analysis import (
    run_kidney_stone_report,
    run_food_price_report,
    run_gambling_report,
    run_bird_report,
    run_college_major_report,
    run_breathalyzer_report,
    run_tweet_report,
    run_traffic_report
)
from src.data import (
    DataLoadError,
    clean_csv_file,
    kidney_stone_data,
    load_kidney_stones,
    load_food_prices,
    load_bustabit,
    load_bird_occurrences,
    load_climate_grid,
    load_college_majors,
    load_breath_tests,
    load_tweets,
    load_road_accidents,
    load_miles_driven
)
from src.reporting import REPORTS, save_report
from src.visualization import create_report_charts, create_occurrence_map, get_map_html

logger = setup_logger("app")

st.set_page_config(
    page_title="Exploratory Reports",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded"
)


def _save_upload(uploaded_file) -> Path:
    suffix = Path(uploaded_file.name).suffix or '.csv'
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as f:
        f.write(uploaded_file.getbuffer())
        return Path(f.name)


def _load_upload(uploaded_file, loader):
    if uploaded_file is None:
        return None
    path = _save_upload(uploaded_file)
    try:
        return loader(path)
    finally:
        path.unlink(missing_ok=True)


def _uploader(label: str, key: str):
    return st.sidebar.file_uploader(label, type=['csv', 'tsv', 'txt', 'xlsx', 'xls'], key=key)


def collect_inputs(report_key: str) -> dict:
    """Sidebar widgets for the chosen report; returns loaded frames and options."""
    inputs = {}
    if report_key == 'kidney_stones':
        upload = _uploader("Kidney stone data (optional)", 'kidney')
        inputs['df'] = _load_upload(upload, load_kidney_stones)
        if inputs['df'] is None:
            st.sidebar.caption("Using the built-in 700-patient dataset")
            inputs['df'] = kidney_stone_data()
    elif report_key == 'food_prices':
        inputs['df'] = _load_upload(_uploader("Food price records", 'food'), load_food_prices)
        inputs['commodity'] = st.sidebar.text_input("Commodity filter", value="") or None
        inputs['horizon'] = st.sidebar.slider("Forecast horizon (months)", 3, 36, 12)
    elif report_key == 'gambling':
        inputs['df'] = _load_upload(_uploader("Bustabit bets", 'bustabit'), load_bustabit)
        inputs['k'] = st.sidebar.slider("Number of clusters", 2, 8, 5)
    elif report_key == 'birds':
        inputs['df'] = _load_upload(_uploader("Occurrence records", 'birds'), load_bird_occurrences)
        inputs['grid'] = _load_upload(_uploader("Climate grid", 'climate'), load_climate_grid)
    elif report_key == 'college_majors':
        inputs['df'] = _load_upload(_uploader("Recent graduates", 'majors'), load_college_majors)
        use_gap = st.sidebar.checkbox("Choose k by gap statistic", value=True)
        inputs['k'] = None if use_gap else st.sidebar.slider("Number of clusters", 2, 10, 3)
    elif report_key == 'breathalyzer':
        inputs['df'] = _load_upload(_uploader("Breath tests", 'breath'), load_breath_tests)
    elif report_key == 'tweets':
        inputs['df'] = _load_upload(_uploader("Tweets", 'tweets'), load_tweets)
    elif report_key == 'traffic':
        inputs['df'] = _load_upload(_uploader("Road accidents (pipe separated)", 'accidents'), load_road_accidents)
        inputs['miles'] = _load_upload(_uploader("Miles driven (optional)", 'miles'), load_miles_driven)
        inputs['k'] = st.sidebar.slider("Number of clusters", 2, 8, 3)
    elif report_key == 'cleaning':
        inputs['upload'] = _uploader("Raw CSV", 'cleaning')
    return inputs


def run_report(report_key: str, inputs: dict) -> dict:
    df = inputs.get('df')
    if report_key == 'kidney_stones':
        return run_kidney_stone_report(df)
    if report_key == 'food_prices':
        return run_food_price_report(df, inputs['commodity'], inputs['horizon'])
    if report_key == 'gambling':
        return run_gambling_report(df, inputs['k'])
    if report_key == 'birds':
        return run_bird_report(df, inputs['grid'])
    if report_key == 'college_majors':
        return run_college_major_report(df, inputs['k'])
    if report_key == 'breathalyzer':
        return run_breathalyzer_report(df)
    if report_key == 'tweets':
        return run_tweet_report(df)
    if report_key == 'traffic':
        return run_traffic_report(df, inputs['miles'], inputs['k'])
    raise ValueError(f"Unknown report '{report_key}'")


def inputs_ready(report_key: str, inputs: dict) -> bool:
    if report_key == 'cleaning':
        return inputs.get('upload') is not None
    if report_key == 'birds':
        return inputs.get('df') is not None and inputs.get('grid') is not None
    return inputs.get('df') is not None


def show_section(name: str, section: dict):
    st.subheader(name.replace('_', ' ').capitalize())
    status = section.get('status')
    if status == 'success':
        st.info(section.get('interpretation', ''))
        numbers = {k: v for k, v in section.items()
                   if isinstance(v, (int, float)) and not isinstance(v, bool)}
        if numbers:
            columns = st.columns(min(len(numbers), 4))
            for i, (key, value) in enumerate(list(numbers.items())[:8]):
                columns[i % len(columns)].metric(key.replace('_', ' '), f"{value:,.4g}")
    elif status == 'insufficient_data':
        st.warning(section.get('message', 'Not enough data'))
    else:
        st.error(section.get('message', 'Analysis failed'))


def show_cleaning(upload):
    input_path = _save_upload(upload)
    output_path = Path(tempfile.gettempdir()) / f"cleaned_{Path(upload.name).stem}.csv"
    try:
        result = clean_csv_file(input_path, output_path)
    finally:
        input_path.unlink(missing_ok=True)

    show_section('cleaning', result)
    st.dataframe(pd.DataFrame(result['missing_after']), use_container_width=True)
    st.download_button(
        "Download cleaned CSV",
        data=output_path.read_bytes(),
        file_name=output_path.name,
        mime="text/csv"
    )
    return result


def main():
    """Main application function"""
    st.title("📊 Exploratory Reports")

    st.sidebar.header("Report")
    report_key = st.sidebar.selectbox(
        "Choose a report",
        options=list(REPORTS.keys()),
        format_func=lambda key: REPORTS[key]['title']
    )
    info = REPORTS[report_key]
    st.markdown(f"**{info['question']}**")
    st.caption(f"Method: {info['method']}")

    try:
        inputs = collect_inputs(report_key)
    except (DataLoadError, ValueError) as e:
        logger.warning(f"Could not load input for {report_key}: {e}")
        st.error(f"Error loading file: {str(e)}")
        return

    if not inputs_ready(report_key, inputs):
        st.info(f"Upload data in the sidebar. Expected: {info['dataset']}")
        return

    if report_key == 'cleaning':
        show_cleaning(inputs['upload'])
        return

    with st.spinner("Running analysis..."):
        result = run_report(report_key, inputs)
        figures = create_report_charts(report_key, result, inputs.get('df'))

    for name, section in result.items():
        if isinstance(section, dict) and 'status' in section:
            show_section(name, section)

    st.markdown("---")
    for name, fig in figures.items():
        st.pyplot(fig)

    if report_key == 'birds' and result.get('predictions', {}).get('status') == 'success':
        st.subheader("🗺️ Predicted occurrence")
        m = create_occurrence_map(result['training']['data'], result['predictions']['data'])
        components.html(get_map_html(m), height=600, scrolling=True)

    if st.sidebar.button("Save report"):
        written = save_report(report_key, result, figures, REPORTS_DIR)
        st.sidebar.success(f"Saved to {written['markdown']}")
    else:
        for fig in figures.values():
            plt.close(fig)


if __name__ == "__main__":
    main()
