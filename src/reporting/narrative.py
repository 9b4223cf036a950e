from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np
import matplotlib.pyplot as plt

from config.settings import CHARTS, REPORTS_DIR
from logger_config import setup_logger

logger = setup_logger("exploratory_reports.narrative")

REPORTS = {
    "kidney_stones": {
        "title": "Kidney Stone Treatments",
        "question": "Which treatment is more successful, and does the answer survive stratifying by stone size?",
        "dataset": "Built-in 700-patient kidney stone table (treatment, stone_size, success)",
        "method": "Success rates by group, chi-squared test of size vs treatment, logistic regression",
        "expected_result": "Treatment B wins overall while treatment A wins within each stone size (Simpson's paradox)"
    },
    "food_prices": {
        "title": "Food Price Forecasting",
        "question": "How will the median market price of a commodity develop over the next year?",
        "dataset": "WFP market price records (adm0_name, cm_name, mp_month, mp_year, mp_price)",
        "method": "Monthly median price series, exponential smoothing model selected by AIC",
        "expected_result": "Point forecast with 80% and 95% prediction intervals"
    },
    "gambling": {
        "title": "Bustabit Gambling Behaviour",
        "question": "What kinds of players bet on Bustabit?",
        "dataset": "Bustabit bet log (Username, Bet, CashedOut, Profit, BustedAt)",
        "method": "Per-player features, z-score standardisation, k-means, min-max cluster profiles, PCA",
        "expected_result": "Five named player groups with distinct betting profiles"
    },
    "birds": {
        "title": "Bird Species Distribution",
        "question": "Where is the species likely to occur, and how does that change over time?",
        "dataset": "Occurrence records (longitude, latitude) and a gridded climate table",
        "method": "Pseudo-absence sampling, elastic-net logistic regression tuned by cross-validated ROC AUC",
        "expected_result": "Probability of occurrence per grid cell and mean probability per period"
    },
    "college_majors": {
        "title": "College Majors by Earnings",
        "question": "Which groups of majors share similar earnings profiles?",
        "dataset": "Recent graduates table (major, p25th, median, p75th)",
        "method": "Standardised k-means with k chosen by elbow, silhouette and gap statistic",
        "expected_result": "Clusters ordered from lowest- to highest-paid majors"
    },
    "breathalyzer": {
        "title": "Breathalyzer Tests",
        "question": "When and where are breath tests given, and how often are drivers over the limit?",
        "dataset": "Ames breath alcohol tests (location, hour, gender, res1, res2)",
        "method": "Counts by group, share over the legal limit, Res1/Res2 correlation, Welch t-test by gender",
        "expected_result": "Test distribution by time and place, with the share of tests above 0.08"
    },
    "tweets": {
        "title": "Tweets by Source",
        "question": "Do tweets sent from two different devices read like two different authors?",
        "dataset": "Tweets (text, source, created_at)",
        "method": "Tokenisation, Laplace-smoothed log2 odds ratios, hour profile, VADER sentiment with Mann-Whitney U",
        "expected_result": "Distinct vocabulary, timing and tone per source"
    },
    "traffic": {
        "title": "Traffic Mortality by State",
        "question": "Which group of states should be targeted to reduce fatal road collisions?",
        "dataset": "Pipe-delimited road-accidents and miles-driven tables",
        "method": "Correlations, multiple linear regression, PCA, k-means with elbow curve",
        "expected_result": "State clusters with estimated fatal collisions per cluster"
    },
    "cleaning": {
        "title": "CSV Data Cleaning",
        "question": "What does it take to turn a raw CSV into an analysis-ready table?",
        "dataset": "Any delimited text file",
        "method": "Column normalisation, type coercion, empty row/column and duplicate removal",
        "expected_result": "Cleaned CSV plus a log of every change"
    }
}


def _sections(result: Dict) -> Dict[str, Dict]:
    # a single analysis dict (e.g. cleaning) is rendered as one section
    if 'status' in result:
        return {'result': result}
    return {name: section for name, section in result.items() if isinstance(section, dict)}


def _key_figures(section: Dict) -> List[str]:
    lines = []
    for key, value in section.items():
        if key in ('status', 'interpretation', 'message'):
            continue
        if isinstance(value, (bool, np.bool_)):
            lines.append(f"- **{key}**: {'yes' if value else 'no'}")
        elif isinstance(value, (int, np.integer)):
            lines.append(f"- **{key}**: {int(value)}")
        elif isinstance(value, (float, np.floating)):
            lines.append(f"- **{key}**: {float(value):.4g}")
        elif isinstance(value, str):
            lines.append(f"- **{key}**: {value}")
    return lines


def render_markdown(report_key: str, result: Dict, figure_paths: Optional[Dict[str, str]] = None) -> str:
    if report_key not in REPORTS:
        raise ValueError(f"Unknown report '{report_key}'. Choose from: {', '.join(REPORTS)}")

    info = REPORTS[report_key]
    lines = [
        f"# {info['title']}",
        "",
        f"**Question:** {info['question']}",
        "",
        f"**Data:** {info['dataset']}",
        "",
        f"**Method:** {info['method']}",
        "",
    ]

    for name, section in _sections(result).items():
        lines.append(f"## {name.replace('_', ' ').capitalize()}")
        lines.append("")
        status = section.get('status', 'unknown')
        if status == 'success':
            lines.append(section.get('interpretation', ''))
        else:
            lines.append(f"*{status}*: {section.get('message', 'no details')}")
        figures = _key_figures(section)
        if figures:
            lines.append("")
            lines.extend(figures)
        lines.append("")

    for name, path in (figure_paths or {}).items():
        lines.append(f"![{name}]({path})")
        lines.append("")

    return "\n".join(lines)


def save_report(
    report_key: str,
    result: Dict,
    figures: Optional[Dict[str, plt.Figure]] = None,
    output_dir: Union[str, Path, None] = None
) -> Dict[str, Path]:
    """
    Write `<report_key>.md` and one PNG per figure into output_dir.

    Returns the written paths keyed by 'markdown' and by figure name.
    """
    output_dir = Path(output_dir or REPORTS_DIR)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = {}
    figure_paths = {}
    for name, fig in (figures or {}).items():
        path = output_dir / f"{report_key}_{name}.png"
        fig.savefig(path, dpi=CHARTS['dpi'], bbox_inches='tight')
        plt.close(fig)
        written[name] = path
        figure_paths[name] = path.name

    markdown_path = output_dir / f"{report_key}.md"
    markdown_path.write_text(render_markdown(report_key, result, figure_paths), encoding='utf-8')
    written['markdown'] = markdown_path
    logger.info(f"Saved {report_key} report with {len(figure_paths)} figure(s) to {output_dir}")
    return written
