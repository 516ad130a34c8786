"""Internal constants shared across the package."""

DEFAULT_TOTAL_SLOTS = 5
DEFAULT_PORT = 3000

# Log history: once the list grows past the trigger it is flushed down to the
# retained length, not kept as a sliding window of exactly trigger size.
LOG_TRIM_TRIGGER = 200
LOG_RETAIN = 100

UPDATE_TOPIC = "update"

DEFAULT_ALLOWED_ORIGINS: tuple[str, ...] = (
    "https://smart-parking-dashboard-delta.vercel.app",
    "https://smart-parking-dashboard.vercel.app",
    "http://localhost:3000",
    "http://localhost:3001",
)
DEFAULT_ALLOWED_ORIGIN_SUFFIXES: tuple[str, ...] = (".vercel.app",)

DEFAULT_READERS: tuple[str, ...] = (
    "entry gate RFID reader",
    "exit gate RFID reader",
    "per-slot occupancy sensors",
)
DEFAULT_PRICING = "Fee computed by the exit reader; reported in thousand VND"
