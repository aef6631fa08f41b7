"""Opening a FLAC stream: the stream header, streaminfo and Vorbis comments."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional, Tuple, Union

from flacscan.metadata import (
    FormatError,
    StreamInfo,
    VorbisComment,
    iter_metadata_blocks,
)

_FLAC_HEADER = 0x664C6143
_ID3_HEADER = 0x49443300


@dataclass(frozen=True)
class FlacReaderOptions:
    """Which metadata a reader looks for before it stops reading.

    With ``metadata_only`` set, reading stops as soon as every desired block
    has been found. With ``read_vorbis_comment`` cleared, tags are not kept.
    """

    metadata_only: bool = False
    read_vorbis_comment: bool = True

    def _has_desired_blocks(self) -> bool:
        if not self.metadata_only:
            return True
        return self.read_vorbis_comment


def read_stream_header(stream: BinaryIO) -> None:
    """Read the 4-byte stream marker and raise FormatError if it is not 'fLaC'."""
    raw = stream.read(4)
    if raw is None or len(raw) != 4:
        raise EOFError("unexpected end of stream")
    header = int.from_bytes(raw, "big")
    if header == _FLAC_HEADER:
        return
    if (header & 0xFFFFFF00) == _ID3_HEADER:
        raise FormatError("stream starts with ID3 header rather than FLAC header")
    raise FormatError("invalid stream header")


class FlacReader:
    """Reads the header and metadata of a FLAC stream.

    The metadata is read when the reader is constructed; afterwards the
    underlying stream is positioned after the last metadata block read.
    """

    def __init__(self, stream: BinaryIO, options: Optional[FlacReaderOptions] = None) -> None:
        self.options = options if options is not None else FlacReaderOptions()
        self._stream = stream
        self._streaminfo, self._vorbis_comment = self._read_metadata(stream, self.options)

    @staticmethod
    def _read_metadata(
        stream: BinaryIO, options: FlacReaderOptions
    ) -> Tuple[StreamInfo, Optional[VorbisComment]]:
        read_stream_header(stream)

        blocks = iter_metadata_blocks(stream)
        first = next(blocks)
        if not isinstance(first, StreamInfo):
            raise FormatError("streaminfo block missing")

        current = options
        vorbis_comment: Optional[VorbisComment] = None
        for block in blocks:
            if isinstance(block, VorbisComment):
                if vorbis_comment is not None:
                    raise FormatError("encountered second Vorbis comment block")
                vorbis_comment = block
                current = FlacReaderOptions(
                    metadata_only=current.metadata_only, read_vorbis_comment=False
                )
            elif isinstance(block, StreamInfo):
                raise FormatError("encountered second streaminfo block")

            if not current._has_desired_blocks():
                break

        if not options.read_vorbis_comment:
            vorbis_comment = None
        return first, vorbis_comment

    @classmethod
    def open(
        cls,
        path: Union[str, "os.PathLike[str]"],
        options: Optional[FlacReaderOptions] = None,
    ) -> "FlacReader":
        """Open the file at ``path`` and read its metadata."""
        stream = open(path, "rb")
        try:
            return cls(stream, options)
        except BaseException:
            stream.close()
            raise

    @property
    def streaminfo(self) -> StreamInfo:
        """The streaminfo block: sample rate, channels, bit depth and so on."""
        return self._streaminfo

    @property
    def vendor(self) -> Optional[str]:
        """The vendor string of the Vorbis comment block, if one was read."""
        if self._vorbis_comment is None:
            return None
        return self._vorbis_comment.vendor

    def tags(self) -> Iterator[Tuple[str, str]]:
        """Iterate over the (name, value) pairs of the Vorbis comments."""
        if self._vorbis_comment is None:
            return iter(())
        return self._vorbis_comment.tags()

    def get_tag(self, name: str) -> Iterator[str]:
        """Yield the values of every tag called ``name``, ignoring ASCII case."""
        if self._vorbis_comment is None:
            return iter(())
        return self._vorbis_comment.get_tag(name)

    def into_inner(self) -> BinaryIO:
        """Return the underlying stream, positioned after the metadata read."""
        return self._stream

    def close(self) -> None:
        """Close the underlying stream."""
        self._stream.close()

    def __enter__(self) -> "FlacReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()