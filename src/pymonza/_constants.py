"""Internal constants shared across the library."""

USER_AGENT = "pymonza"

REST_PATH = "/rest/v1"
REALTIME_PATH = "/realtime/v1/websocket"
REALTIME_VSN = "1.0.0"

DEFAULT_SCHEMA = "public"
CARS_TABLE = "car_inventory"
ORDERED_CARS_TABLE = "ordered_cars"

# ------------------------------------------------------------------
# Remote procedures (write path)
# ------------------------------------------------------------------

RPC_MOVE_CAR = "move_car"
RPC_MOVE_CAR_MANUAL = "move_car_manual"
RPC_MOVE_ORDERED_CAR = "move_ordered_car"

# PostgREST: ``.single()`` / ``object`` responses that matched zero rows.
NOT_FOUND_CODES: frozenset[str] = frozenset({"PGRST116"})

# ------------------------------------------------------------------
# Realtime (Phoenix channel) protocol
# ------------------------------------------------------------------

PHX_JOIN = "phx_join"
PHX_REPLY = "phx_reply"
PHX_ERROR = "phx_error"
PHX_CLOSE = "phx_close"
PHX_HEARTBEAT = "heartbeat"
PHX_TOPIC = "phoenix"
POSTGRES_CHANGES = "postgres_changes"
