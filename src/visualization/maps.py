import html
from typing import Optional, Tuple

import folium
import pandas as pd

from config.settings import MAP, BIRDS
from logger_config import setup_logger

logger = setup_logger("exploratory_reports.maps")

LONGITUDE, LATITUDE = BIRDS['coordinate_columns']


def create_base_map(center: Optional[Tuple[float, float]] = None, zoom_start: int = None) -> folium.Map:
    center = center or MAP['scotland_center']
    zoom_start = zoom_start or MAP['default_zoom']

    m = folium.Map(location=center, zoom_start=zoom_start, tiles='OpenStreetMap')
    folium.TileLayer(MAP['tiles'], name='CartoDB Positron', overlay=False).add_to(m)
    return m


def _valid_coordinates(df: pd.DataFrame) -> pd.DataFrame:
    if LATITUDE not in df.columns or LONGITUDE not in df.columns:
        raise ValueError(f"DataFrame must have '{LATITUDE}' and '{LONGITUDE}' columns")
    return df[df[LATITUDE].notna() & df[LONGITUDE].notna()]


def add_probability_layer(m: folium.Map, predictions: pd.DataFrame, name: str = 'Probability of occurrence') -> folium.Map:
    valid = _valid_coordinates(predictions)
    valid = valid[valid['probability'].notna()]
    if len(valid) == 0:
        logger.warning("No grid cells with predicted probabilities to display on map")
        return m

    colormap = folium.LinearColormap(
        colors=['#f7fbff', '#6baed6', '#08306b'],
        vmin=0.0,
        vmax=1.0,
        caption=name
    )
    layer = folium.FeatureGroup(name=name)
    for _, row in valid.iterrows():
        folium.CircleMarker(
            location=[row[LATITUDE], row[LONGITUDE]],
            radius=5,
            tooltip=f"p = {row['probability']:.2f}",
            stroke=False,
            fill=True,
            fillColor=colormap(row['probability']),
            fillOpacity=0.7
        ).add_to(layer)
    layer.add_to(m)
    colormap.add_to(m)
    return m


def add_points_layer(m: folium.Map, points: pd.DataFrame, name: str, color: str) -> folium.Map:
    valid = _valid_coordinates(points)
    layer = folium.FeatureGroup(name=name)
    for _, row in valid.iterrows():
        label = name
        if BIRDS['period_column'] in row.index and pd.notna(row[BIRDS['period_column']]):
            label = f"{name} ({row[BIRDS['period_column']]})"
        folium.CircleMarker(
            location=[row[LATITUDE], row[LONGITUDE]],
            radius=3,
            tooltip=html.escape(label),
            color=color,
            fill=True,
            fillColor=color,
            fillOpacity=0.9
        ).add_to(layer)
    layer.add_to(m)
    logger.debug(f"Added {len(valid)} points to layer '{name}'")
    return m


def create_occurrence_map(
    training: pd.DataFrame,
    predictions: Optional[pd.DataFrame] = None,
    period=None
) -> folium.Map:
    """
    Map of presences, pseudo-absences and (optionally) predicted probabilities.

    When the data has several periods only `period` is drawn; it defaults to
    the latest one.
    """
    period_column = BIRDS['period_column']
    if predictions is not None and period_column in predictions.columns:
        period = predictions[period_column].max() if period is None else period
        predictions = predictions[predictions[period_column] == period]

    valid = _valid_coordinates(training)
    center = (valid[LATITUDE].mean(), valid[LONGITUDE].mean()) if len(valid) else None
    m = create_base_map(center)

    if predictions is not None:
        add_probability_layer(m, predictions)
    add_points_layer(m, training[training['presence'] == 0], 'Pseudo-absences', MAP['absence_color'])
    add_points_layer(m, training[training['presence'] == 1], 'Presences', MAP['presence_color'])
    folium.LayerControl(collapsed=False).add_to(m)
    return m


def save_map(m: folium.Map, filepath: str) -> None:
    m.save(filepath)


def get_map_html(m: folium.Map) -> str:
    return m._repr_html_()
