"""Floor moves.

Endpoints:
  - POST /rest/v1/rpc/move_car (existing car)
  - POST /rest/v1/rpc/move_car_manual (existing car, with notes)
  - POST /rest/v1/rpc/move_ordered_car (ordered car arrival)

Each move is validated locally first and then sent as exactly one RPC. The
backend owns the transition; the returned ``Car`` is always the record it
hands back. Moves are not idempotent on the backend and are never retried.
"""

from __future__ import annotations

import logging

from pymonza._api._common import parse_single_record, rpc_path
from pymonza._constants import RPC_MOVE_CAR, RPC_MOVE_CAR_MANUAL, RPC_MOVE_ORDERED_CAR
from pymonza._transport import Transport
from pymonza.config import MonzaConfig
from pymonza.floors import Floor
from pymonza.models.car import Car
from pymonza.models.requests import MoveCarRequest, ReceiveOrderedCarRequest

_logger = logging.getLogger(__name__)


async def move_car(
    config: MonzaConfig,
    transport: Transport,
    car_id: str,
    destination: Floor | str,
    *,
    current_floor: Floor | str | None = None,
    notes: str | None = None,
) -> Car:
    """Move an existing car and return its post-move record.

    Raises
    ------
    MonzaInvalidDestinationError
        If *destination* is not reachable; nothing is sent.
    MonzaApiError
        If the backend rejects the move or answers without a record.
    MonzaTransportError
        On network failures.
    """
    request = MoveCarRequest.build(car_id, destination, current_floor=current_floor, notes=notes)

    if request.notes:
        function = RPC_MOVE_CAR_MANUAL
        body = {"p_car_id": request.car_id, "p_to": request.destination.value, "p_notes": request.notes}
    else:
        function = RPC_MOVE_CAR
        body = {"p_car_id": request.car_id, "p_to": request.destination.value}

    path = rpc_path(function)
    _logger.debug("Moving car %s to %s via %s", request.car_id, request.destination.value, function)
    payload = await transport.post_json(path, body)
    car = parse_single_record(Car, payload, endpoint=path)
    _logger.info("Car %s moved to %s", car.id, car.current_floor.value)
    return car


async def receive_ordered_car(
    config: MonzaConfig,
    transport: Transport,
    ordered_car_id: str,
    destination: Floor | str,
) -> Car:
    """Receive an ordered car onto *destination* and return the new car record."""
    request = ReceiveOrderedCarRequest.build(ordered_car_id, destination)
    path = rpc_path(RPC_MOVE_ORDERED_CAR)
    payload = await transport.post_json(
        path,
        {"p_ordered_car_id": request.ordered_car_id, "p_to": request.destination.value},
    )
    car = parse_single_record(Car, payload, endpoint=path)
    _logger.info("Ordered car %s received as car %s on %s", request.ordered_car_id, car.id, car.current_floor.value)
    return car
