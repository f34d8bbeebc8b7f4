"""
Traffic record models for the analytics component.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Tuple

RECORD_DATE_FORMATS = ('%d %B %Y', '%Y-%m-%d', '%d/%m/%Y')

VEHICLE_TYPES = ('car', 'bus', 'truck')


def parse_record_date(value: str) -> date:
    """
    Parse a record date such as '1 July 2025' or '2025-07-01'.

    Raises:
        ValueError: If the value matches none of the supported formats
    """
    text = str(value).strip()
    for fmt in RECORD_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognized record date: {value!r}")


def time_slot_sort_key(label: str) -> Tuple[int, int, str]:
    """
    Order time slot labels by their start time.

    '9.00 - 10.00' sorts before '10.00 - 11.00'. Labels without a readable
    start time sort last, by text.
    """
    start = str(label).split('-', 1)[0].strip().replace(':', '.')
    hour, _, minute = start.partition('.')
    try:
        return (int(hour), int(minute or 0), label)
    except ValueError:
        return (24 * 60, 0, label)


@dataclass(frozen=True)
class HourlyTrafficRecord:
    """
    Vehicle counts for one route and one hourly time slot.

    Attributes:
        date: Display date, e.g. '1 July 2025'
        time_range: Time slot label, e.g. '00.00 - 01.00'
        route_id: Route name, e.g. 'jakarta-pagedangan'
        car_count: Cars counted in the slot
        bus_count: Buses counted in the slot
        truck_count: Trucks counted in the slot
    """
    date: str
    time_range: str
    route_id: str
    car_count: int
    bus_count: int
    truck_count: int

    @property
    def total_vehicles(self) -> int:
        return self.car_count + self.bus_count + self.truck_count

    @property
    def record_date(self) -> date:
        return parse_record_date(self.date)

    def count_for(self, vehicle_type: str) -> int:
        if vehicle_type not in VEHICLE_TYPES:
            raise ValueError(f"Unknown vehicle type: {vehicle_type}")
        return getattr(self, f"{vehicle_type}_count")


@dataclass(frozen=True)
class VehicleTypeShare:
    """Count and share of the grand total for one vehicle type."""
    vehicle_type: str
    count: int
    percentage: float
