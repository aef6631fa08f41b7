"""Sample-level arithmetic for FLAC subframes: sign extension, Rice mapping and prediction."""

from __future__ import annotations

from typing import MutableSequence, Sequence

_FIXED_COEFFICIENTS: tuple[tuple[int, ...], ...] = (
    (),
    (1,),
    (-1, 2),
    (1, -3, 3),
    (-1, 4, -6, 4),
)

_LOW_ORDER_LIMIT = 12


def _wrap_i32(value: int) -> int:
    """Reduce an integer to a signed 32-bit two's complement value."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def extend_sign(value: int, bits: int) -> int:
    """Interpret the ``bits`` least significant bits of ``value`` as a signed integer."""
    if not 1 <= bits <= 32:
        raise ValueError("bit width must be between 1 and 32")
    value &= (1 << bits) - 1
    if value >> (bits - 1):
        return value - (1 << bits)
    return value


def rice_to_signed(value: int) -> int:
    """Map a Rice-coded unsigned value to a signed one: 0, 1, 2, 3 -> 0, -1, 1, -2."""
    half = value >> 1
    return -half - 1 if value & 1 else half


def predict_fixed(order: int, buffer: MutableSequence[int]) -> None:
    """Apply a fixed polynomial predictor of the given order in place.

    The first ``order`` entries are warm-up samples; the rest hold residuals
    and are replaced by reconstructed samples. Arithmetic wraps at 32 bits.
    """
    if not 0 <= order < len(_FIXED_COEFFICIENTS):
        raise ValueError("fixed predictor order must be between 0 and 4")
    if len(buffer) < order:
        raise ValueError("buffer is shorter than the predictor order")
    coefficients = _FIXED_COEFFICIENTS[order]
    for i in range(order, len(buffer)):
        window = buffer[i - order:i]
        prediction = sum(c * s for c, s in zip(coefficients, window))
        buffer[i] = _wrap_i32(prediction + buffer[i])


def _predict_lpc(coefficients: Sequence[int], qlp_shift: int, buffer: MutableSequence[int]) -> None:
    order = len(coefficients)
    if qlp_shift < 0:
        raise ValueError("quantized linear predictor shift must not be negative")
    if qlp_shift >= 64:
        raise ValueError("quantized linear predictor shift is too large")
    if len(buffer) < order:
        raise ValueError("buffer is shorter than the predictor order")
    for i in range(order, len(buffer)):
        window = buffer[i - order:i]
        prediction = sum(c * s for c, s in zip(coefficients, window)) >> qlp_shift
        buffer[i] = _wrap_i32(prediction + buffer[i])


def predict_lpc_low_order(
    coefficients: Sequence[int], qlp_shift: int, buffer: MutableSequence[int]
) -> None:
    """Apply LPC prediction in place for an order of at most 12.

    ``coefficients`` are ordered so that the first multiplies the oldest sample.
    """
    if len(coefficients) > _LOW_ORDER_LIMIT:
        raise ValueError("low-order LPC prediction supports at most 12 coefficients")
    _predict_lpc(coefficients, qlp_shift, buffer)


def predict_lpc_high_order(
    coefficients: Sequence[int], qlp_shift: int, buffer: MutableSequence[int]
) -> None:
    """Apply LPC prediction in place for an order above 12 (non-subset streams)."""
    if len(coefficients) <= _LOW_ORDER_LIMIT:
        raise ValueError("high-order LPC prediction requires more than 12 coefficients")
    _predict_lpc(coefficients, qlp_shift, buffer)