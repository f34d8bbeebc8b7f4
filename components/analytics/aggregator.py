"""
Traffic aggregation engine.

Pure reductions over the session's immutable hourly record table: filtering by
route/date/time slot, vehicle type shares, route shares of the window total,
route weights for the heatmap and monthly totals for the comparison chart.
"""

import calendar
import pandas as pd
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from .models import HourlyTrafficRecord, VehicleTypeShare, VEHICLE_TYPES, parse_record_date, time_slot_sort_key

logger = logging.getLogger(__name__)

ALL_ROUTE_FILTERS = ('all', 'all-routes')
ALL_TIME_FILTERS = (None, 'all')

FRAME_COLUMNS = ['date', 'day', 'time_range', 'route_id', 'car_count', 'bus_count', 'truck_count', 'total']


def records_to_frame(records: Iterable[HourlyTrafficRecord]) -> pd.DataFrame:
    """
    Build a DataFrame view of records.

    The 'day' column holds the parsed date as datetime64 and 'total' the
    derived vehicle total. Records themselves are not modified.
    """
    rows = [
        {
            'date': r.date,
            'day': r.record_date,
            'time_range': r.time_range,
            'route_id': r.route_id,
            'car_count': r.car_count,
            'bus_count': r.bus_count,
            'truck_count': r.truck_count,
            'total': r.total_vehicles,
        }
        for r in records
    ]
    frame = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    frame['day'] = pd.to_datetime(frame['day'])
    return frame


class TrafficAggregator:
    """Per-vehicle-type and per-route statistics for a date/time window."""

    def __init__(self, records: Sequence[HourlyTrafficRecord]):
        self._records: Tuple[HourlyTrafficRecord, ...] = tuple(records)
        self._frame = records_to_frame(self._records)
        logger.info(f"Traffic aggregator loaded {len(self._records)} hourly records")

    @property
    def records(self) -> Tuple[HourlyTrafficRecord, ...]:
        return self._records

    def records_for(self, route_filter: str = 'all',
                    date_range: Optional[Tuple[date, date]] = None,
                    time_range: Optional[str] = None) -> List[HourlyTrafficRecord]:
        """
        Filter records by route, inclusive date range and time slot.

        Args:
            route_filter: Route name, or 'all' / 'all-routes' for every route
            date_range: Optional (start_date, end_date), both inclusive
            time_range: Optional time slot label; None or 'all' matches every slot

        Returns:
            Matching records in table order
        """
        frame = self._frame
        if frame.empty:
            return []

        mask = pd.Series(True, index=frame.index)

        if route_filter not in ALL_ROUTE_FILTERS:
            mask &= frame['route_id'] == route_filter

        if date_range is not None:
            start_date, end_date = date_range
            mask &= (frame['day'] >= pd.Timestamp(start_date)) & (frame['day'] <= pd.Timestamp(end_date))

        if time_range not in ALL_TIME_FILTERS:
            mask &= frame['time_range'] == time_range

        matched = [self._records[i] for i in frame.index[mask]]
        logger.debug(f"Filter route={route_filter} dates={date_range} slot={time_range}: {len(matched)} records")
        return matched

    @staticmethod
    def vehicle_shares(records: Sequence[HourlyTrafficRecord]) -> Dict[str, VehicleTypeShare]:
        """
        Vehicle counts and their share of the grand total.

        Percentages are 0 for every type when the grand total is 0.
        """
        frame = records_to_frame(records)
        counts = {vt: int(frame[f"{vt}_count"].sum()) for vt in VEHICLE_TYPES}
        grand_total = sum(counts.values())

        return {
            vt: VehicleTypeShare(
                vehicle_type=vt,
                count=count,
                percentage=(count / grand_total * 100) if grand_total > 0 else 0.0
            )
            for vt, count in counts.items()
        }

    @staticmethod
    def route_share(route_id: str, records: Sequence[HourlyTrafficRecord]) -> Tuple[int, float]:
        """
        Total vehicles for a route and its share of the window's grand total.

        Args:
            route_id: Route name; 'all-routes' gives the summed grand total
            records: Records of one window across all routes

        Returns:
            Tuple of (total, percentage_of_grand_total)
        """
        frame = records_to_frame(records)
        grand_total = int(frame['total'].sum())

        if route_id in ALL_ROUTE_FILTERS:
            route_total = grand_total
        else:
            route_total = int(frame.loc[frame['route_id'] == route_id, 'total'].sum())

        percentage = (route_total / grand_total * 100) if grand_total > 0 else 0.0
        return route_total, percentage

    @staticmethod
    def route_weights(records: Sequence[HourlyTrafficRecord]) -> Dict[str, float]:
        """Mean hourly vehicle total per route, used as heatmap weight."""
        frame = records_to_frame(records)
        if frame.empty:
            return {}
        return {route: float(mean) for route, mean in frame.groupby('route_id')['total'].mean().items()}

    def monthly_totals(self, route_ids: Sequence[str], year: Optional[int] = None) -> pd.DataFrame:
        """
        Monthly vehicle totals per route for the comparison chart.

        Args:
            route_ids: Routes to include (one column each)
            year: Optional year filter

        Returns:
            DataFrame with a 'month' column (Jan..Dec) and one column per route;
            months without data are 0
        """
        frame = self._frame
        if year is not None:
            frame = frame[frame['day'].dt.year == year]
        frame = frame[frame['route_id'].isin(list(route_ids))]

        totals = frame.groupby([frame['day'].dt.month, 'route_id'])['total'].sum().to_dict()

        months = range(1, 13)
        monthly = pd.DataFrame({'month': [calendar.month_abbr[m] for m in months]})
        for route_id in route_ids:
            monthly[route_id] = [int(totals.get((m, route_id), 0)) for m in months]
        return monthly

    def time_slots(self) -> List[str]:
        if self._frame.empty:
            return []
        return sorted(self._frame['time_range'].unique().tolist(), key=time_slot_sort_key)

    def date_bounds(self) -> Optional[Tuple[date, date]]:
        if self._frame.empty:
            return None
        return (self._frame['day'].min().date(), self._frame['day'].max().date())

    @staticmethod
    def search(records: Sequence[HourlyTrafficRecord], text: str) -> List[HourlyTrafficRecord]:
        """Case-insensitive match on route name, date or time slot."""
        needle = text.strip().lower()
        if not needle:
            return list(records)
        return [
            r for r in records
            if needle in r.route_id.lower() or needle in r.date.lower() or needle in r.time_range.lower()
        ]


def validate_date_range(start: str, end: str) -> Tuple[date, date]:
    """Parse and order a (start, end) pair of record date strings."""
    start_date, end_date = parse_record_date(start), parse_record_date(end)
    if start_date > end_date:
        raise ValueError(f"Start date {start_date} is after end date {end_date}")
    return start_date, end_date
