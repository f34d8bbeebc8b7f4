"""
CSV export of hourly traffic records.
"""

from pathlib import Path
from typing import Optional, Sequence, Union

import pandas as pd
import logging

from .dataset import CSV_COLUMNS, TOTAL_ROW_LABEL
from .models import HourlyTrafficRecord

logger = logging.getLogger(__name__)


def records_to_export_frame(records: Sequence[HourlyTrafficRecord]) -> pd.DataFrame:
    """Build the export table, including the trailing total row."""
    rows = [
        {
            'Date': r.date,
            'TimeSlot': r.time_range,
            'Route': r.route_id,
            'Car': r.car_count,
            'Bus': r.bus_count,
            'Truck': r.truck_count,
        }
        for r in records
    ]
    rows.append({
        'Date': TOTAL_ROW_LABEL,
        'TimeSlot': '',
        'Route': '',
        'Car': sum(r.car_count for r in records),
        'Bus': sum(r.bus_count for r in records),
        'Truck': sum(r.truck_count for r in records),
    })
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def export_records_csv(records: Sequence[HourlyTrafficRecord],
                       path: Optional[Union[str, Path]] = None) -> str:
    """
    Export records as CSV text.

    Values containing a comma are quoted.

    Args:
        records: Records to export, in display order
        path: Optional file to write the CSV to

    Returns:
        The CSV text
    """
    csv_text = records_to_export_frame(records).to_csv(index=False, lineterminator='\n')

    if path is not None:
        Path(path).write_text(csv_text, encoding='utf-8')
        logger.info(f"Exported {len(records)} records to {path}")

    return csv_text
