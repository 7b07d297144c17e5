HEX_ALPHABET = "0123456789ABCDEF"

# Past this position the trailing digits of a window lose accuracy to double rounding.
ACCURACY_CEILING = 10_000_000
DEFAULT_POSITION = ACCURACY_CEILING

DEFAULT_WINDOW = 9
MAX_WINDOW = 12

CPU_CHUNK_SIZE = 100_000

GRID_BLOCKS = 80
GRID_THREADS_PER_BLOCK = 60
GRID_LANE_TERMS = 2_000

TAIL_THRESHOLD = 1e-17
TAIL_EXTRA = 100

ORDERS = ("forward", "backward")
SUBSTRATES = ("cpu", "grid", "serial")
POOL_KINDS = ("thread", "process")


def normalize_choice(value: str, choices, what: str) -> str:
    v = (value or "").lower().strip()
    if v not in choices:
        raise ValueError(f"unsupported {what}: {value!r}")
    return v
