from __future__ import annotations

import pytest
from pydantic import ValidationError

from pymonza.exceptions import MonzaInvalidDestinationError
from pymonza.floors import Floor
from pymonza.models import Car, CarChange, ChangeKind, MoveCarRequest, OrderedCar, ReceiveOrderedCarRequest


def test_car_parses_backend_row_and_keeps_raw() -> None:
    row = {
        "id": 42,
        "vin_number": "lvvdb11b5rd000123",
        "model": "Voyah Free",
        "brand": "Voyah",
        "year": "2024",
        "color": "",
        "current_floor": "showroom_1",
        "client_name": None,
        "custom_duty": "paid",
        "pdi_completed": "yes",
        "updated_at": "2024-05-01T10:00:00+00:00",
    }

    car = Car.model_validate(row)

    assert car.id == "42"
    assert car.vin == "LVVDB11B5RD000123"
    assert car.year == 2024
    assert car.color is None
    assert car.current_floor is Floor.SHOWROOM_1
    assert car.customs == "paid"
    assert car.pdi_completed is True
    assert car.updated_at is not None
    assert car.raw == row
    assert car.label == "Voyah Voyah Free (LVVDB11B5RD000123)"


def test_car_requires_a_known_floor() -> None:
    with pytest.raises(ValidationError):
        Car.model_validate({"id": "1", "model": "Model X"})
    with pytest.raises(ValidationError):
        Car.model_validate({"id": "1", "model": "Model X", "current_floor": "ROOFTOP"})


def test_car_accepts_legacy_location_alias() -> None:
    car = Car.model_validate({"id": "1", "location": "FLOOR_2"})
    assert car.current_floor is Floor.SHOWROOM_2


def test_ordered_car_aliases() -> None:
    order = OrderedCar.model_validate(
        {"id": 7, "vin": "abc", "vehicle_type": "EV", "order_notes": "blue interior", "order_date": "2024-03-01T09:00:00Z"}
    )
    assert order.id == "7"
    assert order.vin == "ABC"
    assert order.category == "EV"
    assert order.notes == "blue interior"


def test_move_request_normalizes_input() -> None:
    request = MoveCarRequest.build(" 12 ", "garage", current_floor="floor_1", notes="")
    assert request.car_id == "12"
    assert request.destination is Floor.GARAGE_INVENTORY
    assert request.current_floor is Floor.SHOWROOM_1
    assert request.notes is None


def test_move_request_rejects_same_floor_and_new_arrivals() -> None:
    with pytest.raises(MonzaInvalidDestinationError) as excinfo:
        MoveCarRequest.build("1", Floor.SHOWROOM_1, current_floor=Floor.SHOWROOM_1)
    assert excinfo.value.destination == "SHOWROOM_1"
    assert "SHOWROOM_1" not in excinfo.value.allowed

    with pytest.raises(MonzaInvalidDestinationError):
        MoveCarRequest.build("1", Floor.NEW_ARRIVALS)


def test_move_request_rejects_unknown_floor_and_blank_id() -> None:
    with pytest.raises(MonzaInvalidDestinationError):
        MoveCarRequest.build("1", "ROOFTOP")
    with pytest.raises(ValidationError):
        MoveCarRequest.build("  ", Floor.SCHEDULE)


def test_invalid_destination_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        MoveCarRequest.build("1", "ROOFTOP")


def test_receive_request_uses_ordered_car_whitelist() -> None:
    assert ReceiveOrderedCarRequest.build("9", "schedule").destination is Floor.SCHEDULE
    with pytest.raises(MonzaInvalidDestinationError):
        ReceiveOrderedCarRequest.build("9", Floor.NEW_ARRIVALS)


def test_car_change_affects_its_floors_only() -> None:
    change = CarChange(
        kind=ChangeKind.UPDATE,
        affected_floor=Floor.GARAGE_INVENTORY,
        previous_floor=Floor.SHOWROOM_2,
        record={"id": 5},
    )
    assert change.car_id == "5"
    assert change.affects(Floor.GARAGE_INVENTORY)
    assert change.affects(Floor.SHOWROOM_2)
    assert not change.affects(Floor.SHOWROOM_1)


def test_car_change_without_floor_affects_every_floor() -> None:
    change = CarChange(kind="DELETE", old_record={"id": "5"})
    assert change.kind is ChangeKind.DELETE
    assert change.car_id == "5"
    assert all(change.affects(floor) for floor in Floor)
