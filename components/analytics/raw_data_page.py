"""
Raw Data page: searchable hourly traffic table with CSV download.
"""

import streamlit as st
import pandas as pd
from typing import List, Sequence
import logging

from .aggregator import TrafficAggregator
from .export import export_records_csv
from .models import HourlyTrafficRecord

logger = logging.getLogger(__name__)

VEHICLE_FILTERS = ['All', 'Car', 'Bus', 'Truck']


def build_display_frame(records: Sequence[HourlyTrafficRecord], vehicle_filter: str = 'All') -> pd.DataFrame:
    """
    Table shown on the Raw Data page.

    With a vehicle filter only that vehicle's count column is kept and the
    total reflects it.
    """
    df = pd.DataFrame(
        [
            {
                'Date': r.date,
                'Time Slot': r.time_range,
                'Route': r.route_id,
                'Car': r.car_count,
                'Bus': r.bus_count,
                'Truck': r.truck_count,
            }
            for r in records
        ],
        columns=['Date', 'Time Slot', 'Route', 'Car', 'Bus', 'Truck']
    )

    if vehicle_filter != 'All':
        df = df[['Date', 'Time Slot', 'Route', vehicle_filter]].copy()
        df['Total'] = df[vehicle_filter]
    else:
        df['Total'] = df['Car'] + df['Bus'] + df['Truck']

    return df


def filter_records(records: Sequence[HourlyTrafficRecord], search_text: str,
                   vehicle_filter: str = 'All') -> List[HourlyTrafficRecord]:
    """Search records; a vehicle filter drops rows with no vehicles of that type."""
    matched = TrafficAggregator.search(records, search_text)
    if vehicle_filter != 'All':
        vehicle_type = vehicle_filter.lower()
        matched = [r for r in matched if r.count_for(vehicle_type) > 0]
    return matched


def render_raw_data_page(records: Sequence[HourlyTrafficRecord]) -> None:
    """Render the Raw Data page."""
    st.title("📋 Raw Data")
    st.markdown("---")

    try:
        col1, col2 = st.columns([3, 1])
        with col1:
            search_text = st.text_input(
                "Search",
                placeholder="Search routes, dates or time slots...",
                key="raw_data_search"
            )
        with col2:
            vehicle_filter = st.selectbox("Filter", VEHICLE_FILTERS, key="raw_data_vehicle_filter")

        filtered = filter_records(records, search_text, vehicle_filter)
        display_df = build_display_frame(filtered, vehicle_filter)

        m1, m2, m3 = st.columns(3)
        m1.metric("Records", f"{len(filtered):,}")
        m2.metric("Total Vehicles", f"{int(display_df['Total'].sum()):,}")
        m3.metric("Routes", f"{len({r.route_id for r in filtered}):,}")

        if display_df.empty:
            st.info("No records match the current search")
        else:
            st.dataframe(display_df, use_container_width=True, hide_index=True)

        st.download_button(
            label="📥 Export CSV",
            data=export_records_csv(filtered).encode('utf-8'),
            file_name="traffic_data.csv",
            mime="text/csv",
            key="raw_data_export",
            disabled=not filtered
        )
    except Exception as e:
        logger.error(f"Raw Data page failed: {e}", exc_info=True)
        st.error(f"❌ Error rendering Raw Data page: {e}")
