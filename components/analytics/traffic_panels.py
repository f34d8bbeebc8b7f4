"""
Traffic statistics panels for the Visual Data page.

Vehicle count cards, vehicle mix donut, route share metric and the monthly
comparison chart.
"""

import streamlit as st
import pandas as pd
import plotly.graph_objects as go
from typing import Callable, Dict, List, Optional
import logging

from .models import VehicleTypeShare, VEHICLE_TYPES

logger = logging.getLogger(__name__)

VEHICLE_LABELS = {'car': 'Car', 'bus': 'Bus', 'truck': 'Truck'}
VEHICLE_ICONS = {'car': '🚗', 'bus': '🚌', 'truck': '🚚'}
VEHICLE_COLORS = {'car': '#1f77b4', 'bus': '#ff7f0e', 'truck': '#2ca02c'}

COMPARISON_COLORS = ['#1f4e9c', '#f2a900', '#2ca02c', '#d62728', '#9467bd', '#8c564b']


def build_vehicle_donut(shares: Dict[str, VehicleTypeShare], height: int = 300) -> go.Figure:
    """Donut chart of the vehicle mix."""
    labels = [VEHICLE_LABELS[vt] for vt in VEHICLE_TYPES]
    values = [shares[vt].count for vt in VEHICLE_TYPES]

    fig = go.Figure(go.Pie(
        labels=labels,
        values=values,
        hole=0.55,
        marker=dict(colors=[VEHICLE_COLORS[vt] for vt in VEHICLE_TYPES]),
        sort=False,
        hovertemplate='<b>%{label}</b><br>%{value:,} vehicles<br>%{percent}<extra></extra>'
    ))
    fig.update_layout(height=height, margin=dict(t=20, b=20, l=20, r=20), showlegend=True)
    return fig


def build_monthly_comparison(monthly: pd.DataFrame, route_ids: List[str],
                             display_name: Optional[Callable[[str], str]] = None,
                             height: int = 380) -> go.Figure:
    """
    Grouped bar chart of monthly volumes per route.

    Args:
        monthly: DataFrame with a 'month' column and one column per route
        route_ids: Routes to plot; routes missing from the frame are skipped
        display_name: Optional route label formatter
        height: Chart height in pixels
    """
    display_name = display_name or (lambda name: name)
    fig = go.Figure()

    for i, route_id in enumerate(r for r in route_ids if r in monthly.columns):
        fig.add_trace(go.Bar(
            x=monthly['month'],
            y=monthly[route_id],
            name=display_name(route_id),
            marker_color=COMPARISON_COLORS[i % len(COMPARISON_COLORS)],
            hovertemplate='<b>%{x}</b><br>%{y:,} vehicles<extra></extra>'
        ))

    fig.update_layout(
        barmode='group',
        xaxis_title="Month",
        yaxis_title="Vehicles",
        height=height,
        hovermode='x unified',
        legend=dict(orientation='h', yanchor='bottom', y=1.02, xanchor='right', x=1)
    )
    return fig


class TrafficPanels:
    """Streamlit panels for vehicle and route statistics."""

    def __init__(self, chart_height: int = 300):
        self.chart_height = chart_height

    def render_vehicle_cards(self, shares: Dict[str, VehicleTypeShare]) -> None:
        columns = st.columns(len(VEHICLE_TYPES))
        for col, vt in zip(columns, VEHICLE_TYPES):
            share = shares[vt]
            with col:
                st.metric(
                    label=f"{VEHICLE_ICONS[vt]} {VEHICLE_LABELS[vt]}",
                    value=f"{share.count:,}",
                    delta=f"{share.percentage:.1f}% of total",
                    delta_color="off"
                )

    def render_vehicle_mix(self, shares: Dict[str, VehicleTypeShare]) -> None:
        if sum(share.count for share in shares.values()) == 0:
            st.info("No vehicles counted for the selected filters")
            return
        st.plotly_chart(build_vehicle_donut(shares, self.chart_height), use_container_width=True)

    def render_route_share(self, route_label: str, total: int, percentage: float) -> None:
        st.metric(
            label=f"🛣️ {route_label}",
            value=f"{total:,} vehicles",
            delta=f"{percentage:.1f}% of all routes",
            delta_color="off"
        )

    def render_monthly_comparison(self, monthly: pd.DataFrame, route_ids: List[str],
                                  display_name: Optional[Callable[[str], str]] = None) -> None:
        if not route_ids:
            st.info("Select at least one route to compare")
            return
        fig = build_monthly_comparison(monthly, route_ids, display_name)
        st.plotly_chart(fig, use_container_width=True)
