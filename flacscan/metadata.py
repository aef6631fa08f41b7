"""Parsing of the metadata blocks that precede the audio data in a FLAC stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, Tuple, Union

_MAX_LARGE_BLOCK = 10 * 1024 * 1024
_SKIP_CHUNK = 64 * 1024


class FlacError(Exception):
    """Base class for errors raised while decoding a FLAC stream."""


class FormatError(FlacError):
    """The stream does not conform to the FLAC format."""


class UnsupportedError(FlacError):
    """The stream uses a feature that is valid but not supported."""


@dataclass(frozen=True)
class StreamInfo:
    """The streaminfo block, describing the stream as a whole."""

    min_block_size: int
    max_block_size: int
    min_frame_size: int | None
    max_frame_size: int | None
    sample_rate: int
    channels: int
    bits_per_sample: int
    samples: int | None
    md5sum: bytes


@dataclass(frozen=True)
class SeekPoint:
    """A seek point: first sample of a frame, its byte offset and its length."""

    sample: int
    offset: int
    samples: int


@dataclass(frozen=True)
class Padding:
    """A padding block, or a block that is skipped and treated as padding."""

    length: int


@dataclass(frozen=True)
class Application:
    """An application block with a registered id and opaque data."""

    id: int
    data: bytes


@dataclass(frozen=True)
class Reserved:
    """A block with a reserved block type."""


@dataclass(frozen=True)
class VorbisComment:
    """Vorbis comments (tags): a vendor string and name-value pairs."""

    vendor: str
    comments: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def tags(self) -> Iterator[Tuple[str, str]]:
        """Iterate over (name, value) pairs in stream order."""
        return iter(self.comments)

    def get_tag(self, name: str) -> Iterator[str]:
        """Yield the values of all comments whose name matches, ignoring ASCII case."""
        if not name.isascii():
            return
        needle = name.lower()
        for tag_name, value in self.comments:
            if tag_name.lower() == needle:
                yield value


MetadataBlock = Union[StreamInfo, Padding, Application, VorbisComment, Reserved]


def _read_exact(stream: BinaryIO, count: int) -> bytes:
    data = stream.read(count)
    if data is None or len(data) != count:
        raise EOFError("unexpected end of stream")
    return data


def _skip(stream: BinaryIO, count: int) -> None:
    remaining = count
    while remaining > 0:
        chunk = stream.read(min(remaining, _SKIP_CHUNK))
        if not chunk:
            raise EOFError("unexpected end of stream")
        remaining -= len(chunk)


def _read_le_u32(stream: BinaryIO) -> int:
    return int.from_bytes(_read_exact(stream, 4), "little")


def _read_header(stream: BinaryIO) -> tuple[bool, int, int]:
    raw = _read_exact(stream, 4)
    is_last = (raw[0] >> 7) == 1
    block_type = raw[0] & 0x7F
    length = int.from_bytes(raw[1:4], "big")
    return is_last, block_type, length


def read_metadata_block_with_header(stream: BinaryIO) -> MetadataBlock:
    """Read one metadata block, including its 4-byte header."""
    _, block_type, length = _read_header(stream)
    return read_metadata_block(stream, block_type, length)


def read_metadata_block(stream: BinaryIO, block_type: int, length: int) -> MetadataBlock:
    """Read the body of a metadata block of the given type and length."""
    if block_type == 0:
        if length != 34:
            raise FormatError("invalid streaminfo metadata block length")
        return _read_streaminfo(stream)
    if block_type == 1:
        _skip(stream, length)
        return Padding(length)
    if block_type == 2:
        return _read_application(stream, length)
    if block_type == 4:
        return _read_vorbis_comment(stream, length)
    if block_type in (3, 5, 6):
        # Seek tables, cue sheets and pictures are skipped like padding.
        _skip(stream, length)
        return Padding(length)
    if block_type == 127:
        raise FormatError("invalid metadata block type")
    _skip(stream, length)
    return Reserved()


def iter_metadata_blocks(stream: BinaryIO) -> Iterator[MetadataBlock]:
    """Yield metadata blocks until the block flagged as last has been read.

    At least one block is read. An error ends the iteration.
    """
    while True:
        is_last, block_type, length = _read_header(stream)
        yield read_metadata_block(stream, block_type, length)
        if is_last:
            return


def _read_streaminfo(stream: BinaryIO) -> StreamInfo:
    data = _read_exact(stream, 34)
    min_block_size = int.from_bytes(data[0:2], "big")
    max_block_size = int.from_bytes(data[2:4], "big")
    min_frame_size = int.from_bytes(data[4:7], "big")
    max_frame_size = int.from_bytes(data[7:10], "big")
    sample_rate = (int.from_bytes(data[10:12], "big") << 4) | (data[12] >> 4)
    channels = ((data[12] >> 1) & 0b111) + 1
    bits_per_sample = (((data[12] & 1) << 4) | (data[13] >> 4)) + 1
    n_samples = ((data[13] & 0x0F) << 32) | int.from_bytes(data[14:18], "big")
    md5sum = bytes(data[18:34])

    if min_block_size > max_block_size:
        raise FormatError("inconsistent bounds, min block size > max block size")
    if min_block_size < 16:
        raise FormatError("invalid block size, must be at least 16")
    if min_frame_size > max_frame_size and max_frame_size != 0:
        raise FormatError("inconsistent bounds, min frame size > max frame size")
    if sample_rate == 0 or sample_rate > 655350:
        raise FormatError("invalid sample rate")

    return StreamInfo(
        min_block_size=min_block_size,
        max_block_size=max_block_size,
        min_frame_size=min_frame_size or None,
        max_frame_size=max_frame_size or None,
        sample_rate=sample_rate,
        channels=channels,
        bits_per_sample=bits_per_sample,
        samples=n_samples or None,
        md5sum=md5sum,
    )


def _decode_utf8(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FormatError("invalid UTF-8") from exc


def _read_vorbis_comment(stream: BinaryIO, length: int) -> VorbisComment:
    if length < 8:
        raise FormatError("Vorbis comment block is too short")
    if length > _MAX_LARGE_BLOCK:
        raise UnsupportedError("Vorbis comment blocks larger than 10 MiB are not supported")

    vendor_len = _read_le_u32(stream)
    if vendor_len > length - 8:
        raise FormatError("vendor string too long")
    vendor = _decode_utf8(_read_exact(stream, vendor_len))

    comments_len = _read_le_u32(stream)
    if comments_len >= length // 4:
        raise FormatError("too many entries for Vorbis comment block")

    comments: list[tuple[str, str]] = []
    bytes_left = length - 8 - vendor_len

    while bytes_left >= 4 and len(comments) < comments_len:
        comment_len = _read_le_u32(stream)
        bytes_left -= 4
        if comment_len > bytes_left:
            raise FormatError("Vorbis comment too long for Vorbis comment block")
        if comment_len == 0:
            # Empty comments are invalid but occur in the wild; skip them.
            comments_len -= 1
            continue

        raw = _read_exact(stream, comment_len)
        bytes_left -= comment_len

        sep = raw.find(b"=")
        if sep < 0:
            raise FormatError("Vorbis comment does not contain '='")
        if any(b < 0x20 or b > 0x7D for b in raw[:sep]):
            raise FormatError("Vorbis comment field name contains invalid byte")

        text = _decode_utf8(raw)
        comments.append((text[:sep], text[sep + 1:]))

    if bytes_left != 0:
        raise FormatError("Vorbis comment block has excess data")
    if len(comments) != comments_len:
        raise FormatError("Vorbis comment block contains wrong number of entries")

    return VorbisComment(vendor=vendor, comments=tuple(comments))


def _read_application(stream: BinaryIO, length: int) -> Application:
    if length < 4:
        raise FormatError("application block length must be at least 4 bytes")
    if length > _MAX_LARGE_BLOCK:
        raise UnsupportedError("application blocks larger than 10 MiB are not supported")
    app_id = int.from_bytes(_read_exact(stream, 4), "big")
    data = _read_exact(stream, length - 4)
    return Application(id=app_id, data=bytes(data))