"""
Route Traffic Dashboard - Streamlit GUI Application

This module provides the Streamlit-based web interface for the route heatmap,
traffic statistics and raw hourly data.
"""

import logging

import streamlit as st
from streamlit_option_menu import option_menu

from components.analytics import load_records_csv, load_sample_records, render_raw_data_page
from components.maps import render_heatmap_page

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Configure Streamlit page
st.set_page_config(
    page_title="Route Traffic Dashboard",
    page_icon="🗺️",
    layout="wide",
    initial_sidebar_state="expanded"
)


def load_traffic_records():
    """Get the session's hourly records, loading the sample table on first use."""
    if 'traffic_records' not in st.session_state:
        st.session_state.traffic_records = load_sample_records()
        st.session_state.traffic_source = "Sample data"
    return st.session_state.traffic_records


def render_data_source_section() -> None:
    """Sidebar upload of an hourly CSV replacing the sample table."""
    st.markdown("### Data Source")
    st.caption(f"Current: {st.session_state.get('traffic_source', 'Sample data')}")

    uploaded_file = st.file_uploader(
        "Upload hourly traffic CSV",
        type=['csv'],
        help="Columns: Date, TimeSlot, Route, Car, Bus, Truck",
        key="traffic_csv_upload"
    )

    if uploaded_file is not None and st.session_state.get('traffic_source') != uploaded_file.name:
        try:
            records = load_records_csv(uploaded_file.getvalue())
        except ValueError as e:
            logger.warning(f"Rejected uploaded dataset {uploaded_file.name}: {e}")
            st.error(f"❌ {e}")
            return
        st.session_state.traffic_records = records
        st.session_state.traffic_source = uploaded_file.name
        st.success(f"✅ Loaded {len(records):,} records")

    if st.session_state.get('traffic_source') != "Sample data":
        if st.button("Use sample data", key="use_sample_data"):
            st.session_state.traffic_records = load_sample_records()
            st.session_state.traffic_source = "Sample data"


def main():
    """Main Streamlit application entry point"""

    page_configs = [
        ("Visual Data", "map"),
        ("Raw Data", "table"),
    ]

    with st.sidebar:
        st.markdown("### Navigation")

        selected_page = option_menu(
            menu_title=None,
            options=[config[0] for config in page_configs],
            icons=[config[1] for config in page_configs],
            menu_icon="cast",
            default_index=0,
            orientation="vertical",
            key="nav_menu",
            styles={
                "container": {"padding": "0!important", "background-color": "#f0f2f6"},
                "icon": {"color": "#0068c9", "font-size": "16px"},
                "nav-link": {
                    "font-size": "14px",
                    "text-align": "left",
                    "margin": "0px",
                    "color": "#262730",
                    "background-color": "#f0f2f6",
                    "--hover-color": "#e8f4f8"
                },
                "nav-link-selected": {
                    "background-color": "#e8f4f8",
                    "color": "#000000 !important",
                    "font-weight": "bold"
                },
            }
        )

        st.markdown("---")
        load_traffic_records()
        render_data_source_section()

    records = load_traffic_records()

    if selected_page == "Raw Data":
        render_raw_data_page(records)
    else:
        render_heatmap_page(records)


if __name__ == "__main__":
    main()
