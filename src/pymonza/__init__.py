"""pymonza - Async Python client for the Monza dealership car inventory."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pymonza")
except PackageNotFoundError:
    __version__ = "0+local"
from pymonza.client import MonzaClient
from pymonza.config import MonzaConfig
from pymonza.exceptions import (
    MonzaApiError,
    MonzaConfigError,
    MonzaError,
    MonzaInvalidDestinationError,
    MonzaRealtimeError,
    MonzaRecordNotFoundError,
    MonzaTransportError,
)
from pymonza.filtering import CarFilter, SortDirection, SortState, filter_cars, sort_cars
from pymonza.floor_view import FetchState, FloorCarsView
from pymonza.floors import (
    FLOOR_LABELS,
    MOVABLE_FLOORS,
    ORDERED_CAR_DESTINATIONS,
    Floor,
    destinations_for,
    is_allowed_destination,
)
from pymonza.models import Car, CarChange, ChangeKind, OrderedCar
from pymonza.realtime import LocalEventBus, RealtimeChangeFeed, RealtimeFanout

__all__ = [
    "__version__",
    "FLOOR_LABELS",
    "MOVABLE_FLOORS",
    "ORDERED_CAR_DESTINATIONS",
    "Car",
    "CarChange",
    "CarFilter",
    "ChangeKind",
    "FetchState",
    "Floor",
    "FloorCarsView",
    "LocalEventBus",
    "MonzaApiError",
    "MonzaClient",
    "MonzaConfig",
    "MonzaConfigError",
    "MonzaError",
    "MonzaInvalidDestinationError",
    "MonzaRealtimeError",
    "MonzaRecordNotFoundError",
    "MonzaTransportError",
    "OrderedCar",
    "RealtimeChangeFeed",
    "RealtimeFanout",
    "SortDirection",
    "SortState",
    "destinations_for",
    "filter_cars",
    "is_allowed_destination",
    "sort_cars",
]
