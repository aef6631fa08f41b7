"""Decoding of the subframes that hold one channel's samples within a FLAC frame."""

from __future__ import annotations

import enum
import io
from typing import BinaryIO, List, Tuple, Union

from flacscan.metadata import FormatError, UnsupportedError
from flacscan.prediction import (
    extend_sign,
    predict_fixed,
    predict_lpc_high_order,
    predict_lpc_low_order,
    rice_to_signed,
)

_LOW_ORDER_LIMIT = 12


class BitReader:
    """Reads big-endian bit fields from a binary stream or a bytes object.

    Bytes are pulled from the stream one at a time, so the stream is never
    read past the byte that holds the last bit consumed.
    """

    def __init__(self, source: Union[BinaryIO, bytes, bytearray, memoryview]) -> None:
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self._stream = source
        self._acc = 0
        self._nbits = 0

    def _load_byte(self) -> None:
        byte = self._stream.read(1)
        if not byte:
            raise EOFError("unexpected end of stream")
        self._acc = (self._acc << 8) | byte[0]
        self._nbits += 8

    def read_bit(self) -> bool:
        """Read a single bit."""
        return self.read_bits(1) == 1

    def read_bits(self, count: int) -> int:
        """Read ``count`` bits as an unsigned integer, most significant bit first."""
        if count < 0:
            raise ValueError("bit count must not be negative")
        while self._nbits < count:
            self._load_byte()
        self._nbits -= count
        value = self._acc >> self._nbits
        self._acc &= (1 << self._nbits) - 1
        return value

    def read_unary(self) -> int:
        """Count zero bits up to and including the next one bit; return the zero count."""
        zeros = 0
        while True:
            if self._nbits == 0:
                self._load_byte()
            if self._acc == 0:
                zeros += self._nbits
                self._nbits = 0
                continue
            leading = self._nbits - self._acc.bit_length()
            zeros += leading
            self._nbits -= leading + 1
            self._acc &= (1 << self._nbits) - 1
            return zeros


class _SubframeType(enum.Enum):
    CONSTANT = "constant"
    VERBATIM = "verbatim"
    FIXED = "fixed"
    LPC = "lpc"


def _wrap_i32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _read_subframe_header(bits: BitReader) -> Tuple[_SubframeType, int, int]:
    if bits.read_bit():
        raise FormatError("invalid subframe header")

    n = bits.read_bits(6)
    order = 0
    if n == 0:
        kind = _SubframeType.CONSTANT
    elif n == 1:
        kind = _SubframeType.VERBATIM
    elif (
        (n & 0b111110) == 0b000010
        or (n & 0b111100) == 0b000100
        or (n & 0b110000) == 0b010000
    ):
        raise FormatError("invalid subframe header, encountered reserved value")
    elif (n & 0b111000) == 0b001000:
        order = n & 0b000111
        if order > 4:
            raise FormatError("invalid subframe header, encountered reserved value")
        kind = _SubframeType.FIXED
    else:
        kind = _SubframeType.LPC
        order = (n & 0b011111) + 1

    wasted = 1 + bits.read_unary() if bits.read_bit() else 0
    if wasted > 31:
        raise FormatError("wasted bits per sample must not exceed 31")
    return kind, order, wasted


def _read_verbatim(bits: BitReader, bps: int, count: int) -> List[int]:
    return [extend_sign(bits.read_bits(bps), bps) for _ in range(count)]


def _decode_residual(bits: BitReader, buffer: List[int], n_warm_up: int) -> None:
    block_size = len(buffer)

    method = bits.read_bits(2)
    if method == 0b00:
        param_bits, escape = 4, 0b1111
    elif method == 0b01:
        param_bits, escape = 5, 0b11111
    else:
        raise FormatError("invalid residual, encountered reserved value")

    order = bits.read_bits(4)
    n_partitions = 1 << order
    per_partition = block_size >> order

    if block_size & (n_partitions - 1):
        raise FormatError("invalid partition order")
    if n_warm_up > per_partition:
        raise FormatError("invalid residual")

    start = n_warm_up
    for partition in range(n_partitions):
        end = (partition + 1) * per_partition
        param = bits.read_bits(param_bits)
        if param == escape:
            raise UnsupportedError("unencoded binary is not yet implemented")
        for i in range(start, end):
            quotient = bits.read_unary()
            remainder = bits.read_bits(param)
            buffer[i] = rice_to_signed(((quotient << param) | remainder) & 0xFFFFFFFF)
        start = end


def _decode_fixed(bits: BitReader, bps: int, order: int, buffer: List[int]) -> None:
    if len(buffer) < order:
        raise FormatError("invalid fixed subframe, order is larger than block size")
    buffer[:order] = _read_verbatim(bits, bps, order)
    _decode_residual(bits, buffer, order)
    predict_fixed(order, buffer)


def _decode_lpc(bits: BitReader, bps: int, order: int, buffer: List[int]) -> None:
    if len(buffer) < order:
        raise FormatError("invalid LPC subframe, lpc order is larger than block size")
    buffer[:order] = _read_verbatim(bits, bps, order)

    qlp_precision = bits.read_bits(4) + 1
    if qlp_precision - 1 == 0b1111:
        raise FormatError("invalid subframe, qlp precision value invalid")

    qlp_shift = extend_sign(bits.read_bits(5), 5)
    if qlp_shift < 0:
        raise UnsupportedError(
            "a negative quantized linear predictor coefficient shift is not supported"
        )

    # Coefficients are stored newest-sample first; prediction wants oldest first.
    stored = [extend_sign(bits.read_bits(qlp_precision), qlp_precision) for _ in range(order)]
    coefficients = stored[::-1]

    _decode_residual(bits, buffer, order)

    if order <= _LOW_ORDER_LIMIT:
        predict_lpc_low_order(coefficients, qlp_shift, buffer)
    else:
        predict_lpc_high_order(coefficients, qlp_shift, buffer)


def decode(bits: BitReader, bps: int, block_size: int) -> List[int]:
    """Decode one subframe of ``block_size`` samples at ``bps`` bits per sample."""
    if not 1 <= bps <= 32:
        raise ValueError("bits per sample must be between 1 and 32")
    if block_size < 0:
        raise ValueError("block size must not be negative")

    kind, order, wasted = _read_subframe_header(bits)
    if wasted >= bps:
        raise FormatError("subframe has no non-wasted bits")
    sf_bps = bps - wasted

    buffer = [0] * block_size
    if kind is _SubframeType.CONSTANT:
        sample = extend_sign(bits.read_bits(sf_bps), sf_bps)
        buffer = [sample] * block_size
    elif kind is _SubframeType.VERBATIM:
        buffer = _read_verbatim(bits, sf_bps, block_size)
    elif kind is _SubframeType.FIXED:
        _decode_fixed(bits, sf_bps, order, buffer)
    else:
        _decode_lpc(bits, sf_bps, order, buffer)

    if wasted:
        buffer = [_wrap_i32(s << wasted) for s in buffer]
    return buffer