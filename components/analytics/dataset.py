"""
Hourly traffic dataset loading.

Provides the bundled sample table (one day, two hourly slots, every route) and
a CSV loader for exported or externally prepared tables.
"""

import io
from pathlib import Path
from typing import List, Union

import chardet
import pandas as pd
import logging

from .models import HourlyTrafficRecord, parse_record_date

logger = logging.getLogger(__name__)

CSV_COLUMNS = ['Date', 'TimeSlot', 'Route', 'Car', 'Bus', 'Truck']
TOTAL_ROW_LABEL = 'Total'

SAMPLE_DATE = "1 July 2025"

# (time slot, route, car, bus, truck)
_SAMPLE_ROWS = [
    ("00.00 - 01.00", "jakarta-pagedangan", 1590, 590, 1020),
    ("00.00 - 01.00", "pagedangan-jakarta", 2130, 1005, 1335),
    ("00.00 - 01.00", "bintaro-out", 1600, 840, 990),
    ("00.00 - 01.00", "bintaro-in", 1180, 1160, 410),
    ("00.00 - 01.00", "jakarta-pamulang", 3600, 1740, 720),
    ("00.00 - 01.00", "jakarta-alam-sutera", 1650, 1550, 320),
    ("00.00 - 01.00", "pagedangan-alam-sutera", 1050, 370, 1070),
    ("00.00 - 01.00", "pagedangan-pamulang", 2040, 960, 640),
    ("00.00 - 01.00", "pamulang-pagedangan", 2205, 2010, 705),
    ("00.00 - 01.00", "pamulang-jakarta", 1245, 735, 615),
    ("00.00 - 01.00", "alam-sutera-jakarta", 2130, 1950, 600),
    ("00.00 - 01.00", "alam-sutera-pagedangan", 1260, 1200, 495),
    ("01.00 - 02.00", "jakarta-pagedangan", 1230, 720, 705),
    ("01.00 - 02.00", "pagedangan-jakarta", 1425, 780, 915),
    ("01.00 - 02.00", "bintaro-out", 2550, 1680, 705),
    ("01.00 - 02.00", "bintaro-in", 1770, 735, 690),
    ("01.00 - 02.00", "jakarta-pamulang", 2670, 2205, 495),
    ("01.00 - 02.00", "jakarta-alam-sutera", 2505, 885, 525),
    ("01.00 - 02.00", "pagedangan-alam-sutera", 1485, 480, 495),
    ("01.00 - 02.00", "pagedangan-pamulang", 2325, 645, 1785),
    ("01.00 - 02.00", "pamulang-pagedangan", 2655, 1845, 750),
    ("01.00 - 02.00", "pamulang-jakarta", 2505, 1080, 720),
    ("01.00 - 02.00", "alam-sutera-jakarta", 1245, 750, 735),
    ("01.00 - 02.00", "alam-sutera-pagedangan", 1470, 1245, 525),
]

# Monthly volumes shown by the comparison chart when the loaded table covers a single month
SAMPLE_MONTHLY_COMPARISON = {
    'month': ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec'],
    'bintaro-out': [4200, 4400, 7800, 7200, 12500, 5500, 6000, 10500, 3500, 2500, 7500, 11000],
    'jakarta-alam-sutera': [4500, 4300, 6200, 5800, 6000, 5200, 4800, 8500, 3200, 2800, 6200, 4200],
}


def load_sample_records() -> List[HourlyTrafficRecord]:
    """Get the bundled sample hourly table."""
    return [
        HourlyTrafficRecord(SAMPLE_DATE, slot, route, car, bus, truck)
        for slot, route, car, bus, truck in _SAMPLE_ROWS
    ]


def load_sample_monthly_comparison() -> pd.DataFrame:
    return pd.DataFrame(SAMPLE_MONTHLY_COMPARISON)


def detect_encoding(raw_data: bytes) -> str:
    """
    Detect the text encoding of CSV bytes.

    Falls back to utf-8 when chardet is unsure, and to latin1 when the bytes
    are not valid utf-8 either.
    """
    detected = chardet.detect(raw_data) if raw_data else {}
    encoding = detected.get('encoding')
    confidence = detected.get('confidence') or 0.0

    if encoding and confidence > 0.7:
        logger.debug(f"Detected encoding: {encoding} (confidence: {confidence:.2f})")
        return encoding

    try:
        raw_data.decode('utf-8')
        return 'utf-8'
    except UnicodeDecodeError:
        logger.warning("Could not detect encoding reliably, using latin1 as fallback")
        return 'latin1'


def records_from_frame(df: pd.DataFrame) -> List[HourlyTrafficRecord]:
    """
    Convert a Date/TimeSlot/Route/Car/Bus/Truck frame to records.

    Export total rows are skipped.

    Raises:
        ValueError: If required columns are missing or a date is unparseable
    """
    df = df.rename(columns=lambda c: str(c).strip())
    missing = [col for col in CSV_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {', '.join(missing)}")

    df = df[df['Date'].astype(str).str.strip() != TOTAL_ROW_LABEL]
    df = df.dropna(subset=['Date', 'TimeSlot', 'Route'])

    counts = df[['Car', 'Bus', 'Truck']].apply(pd.to_numeric, errors='coerce').fillna(0).astype(int)

    records = []
    for idx, row in df.iterrows():
        date_text = str(row['Date']).strip()
        parse_record_date(date_text)
        records.append(HourlyTrafficRecord(
            date=date_text,
            time_range=str(row['TimeSlot']).strip(),
            route_id=str(row['Route']).strip(),
            car_count=int(counts.at[idx, 'Car']),
            bus_count=int(counts.at[idx, 'Bus']),
            truck_count=int(counts.at[idx, 'Truck']),
        ))
    return records


def load_records_csv(source: Union[str, Path, bytes]) -> List[HourlyTrafficRecord]:
    """
    Load hourly records from a CSV file.

    Args:
        source: File path, or raw CSV bytes (e.g. from an upload widget)

    Returns:
        Parsed records in file order
    """
    if isinstance(source, bytes):
        raw_data = source
        label = '<upload>'
    else:
        raw_data = Path(source).read_bytes()
        label = str(source)

    encoding = detect_encoding(raw_data)
    df = pd.read_csv(io.StringIO(raw_data.decode(encoding, errors='replace')), dtype={'Date': str})

    records = records_from_frame(df)
    logger.info(f"Loaded {len(records)} hourly records from {label} ({encoding})")
    return records
