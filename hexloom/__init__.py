__all__ = [
    "Chunk",
    "DispatchError",
    "EngineConfig",
    "GridDispatcher",
    "HexDigits",
    "PoolDispatcher",
    "PowerTable",
    "SerialDispatcher",
    "evaluate_chunk",
    "expo_mod",
    "pi_fraction",
    "pi_hex_digit",
    "pi_hex_digits",
    "pi_hex_window",
    "render_hex",
    "series_sum",
]

from .bbp import HexDigits, pi_fraction, pi_hex_digit, pi_hex_digits, pi_hex_window, render_hex
from .chunks import Chunk, evaluate_chunk
from .config import EngineConfig
from .dispatch import DispatchError, GridDispatcher, PoolDispatcher, SerialDispatcher
from .modpow import PowerTable, expo_mod
from .series import series_sum
