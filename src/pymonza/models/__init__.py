"""Data models for backend records and local events."""

from pymonza.models._base import MonzaBaseModel
from pymonza.models.car import Car
from pymonza.models.change import CarChange, ChangeKind
from pymonza.models.ordered_car import OrderedCar
from pymonza.models.requests import MoveCarRequest, ReceiveOrderedCarRequest

__all__ = [
    "Car",
    "CarChange",
    "ChangeKind",
    "MonzaBaseModel",
    "MoveCarRequest",
    "OrderedCar",
    "ReceiveOrderedCarRequest",
]
