from datetime import date
from decimal import Decimal

import pytest

from drivigo.repositories.instructor_repository import haversine_meters
from drivigo.services.earnings_service import period_start, split_platform_fee
from drivigo.services.instructor_service import day_name


def test_haversine_zero_distance():
    assert haversine_meters(12.97, 77.59, 12.97, 77.59) == 0


def test_haversine_one_degree_of_latitude():
    assert haversine_meters(0.0, 0.0, 1.0, 0.0) == pytest.approx(111_195, rel=1e-3)


def test_haversine_is_symmetric():
    forward = haversine_meters(12.9716, 77.5946, 13.0827, 80.2707)
    backward = haversine_meters(13.0827, 80.2707, 12.9716, 77.5946)
    assert forward == pytest.approx(backward)


def test_split_platform_fee_default_rate():
    fee, net = split_platform_fee(500)
    assert fee == Decimal("50.00")
    assert net == Decimal("450.00")


def test_split_platform_fee_rounds_to_paise():
    fee, net = split_platform_fee("333.33", rate=0.1)
    assert fee == Decimal("33.33")
    assert fee + net == Decimal("333.33")


def test_period_start():
    today = date(2030, 3, 31)
    assert period_start("week", today) == date(2030, 3, 24)
    assert period_start("month", today) == date(2030, 3, 1)
    assert period_start("all", today) is None


def test_day_name_maps_weekday():
    assert day_name(date(2030, 1, 7)) == "Monday"
    assert day_name(date(2030, 1, 13)) == "Sunday"
