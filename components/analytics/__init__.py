"""
Analytics Component - Hourly traffic statistics.

This component aggregates the hourly vehicle count table into vehicle type
shares, route shares, heatmap route weights and monthly totals, and provides
the Raw Data page with CSV export.
"""

from .aggregator import TrafficAggregator
from .dataset import load_sample_records, load_records_csv
from .export import export_records_csv
from .models import HourlyTrafficRecord, VehicleTypeShare
from .raw_data_page import render_raw_data_page

__all__ = [
    'TrafficAggregator',
    'load_sample_records',
    'load_records_csv',
    'export_records_csv',
    'HourlyTrafficRecord',
    'VehicleTypeShare',
    'render_raw_data_page'
]
