# flacscan

A small, dependency-free Python library for FLAC streams. It reads the stream
header and the metadata blocks (stream info, Vorbis comments, application
blocks), and it decodes individual FLAC subframes from a bit stream.

## Installation

```
pip install flacscan
```

## Reading stream information and tags

`FlacReader` reads the `fLaC` marker and the metadata blocks when it is
constructed, from any binary stream or through `FlacReader.open(path)`.

```python
from flacscan.reader import FlacReader

with FlacReader.open("song.flac") as reader:
    info = reader.streaminfo
    print(info.sample_rate, info.channels, info.bits_per_sample, info.samples)

    print("vendor:", reader.vendor)
    for name, value in reader.tags():
        print(f"{name} = {value}")

    # Tag names are matched ignoring ASCII case; a tag may occur more than once.
    for artist in reader.get_tag("artist"):
        print("artist:", artist)
```

`streaminfo` and `vendor` are properties; `vendor` is `None` when no Vorbis
comment block was read. `into_inner()` returns the underlying stream,
positioned after the last metadata block that was read, and `close()` closes it.

`FlacReader` and `FlacReader.open` take an optional `FlacReaderOptions`. With
`metadata_only=True`, reading stops as soon as the wanted metadata has been
collected; with `read_vorbis_comment=False`, tags are not kept:

```python
from flacscan.reader import FlacReader, FlacReaderOptions

options = FlacReaderOptions(metadata_only=True, read_vorbis_comment=False)
with FlacReader.open("song.flac", options) as reader:
    print(reader.streaminfo.samples)
    print(reader.vendor)  # None
```

## Metadata blocks on their own

When FLAC metadata is embedded in a container, blocks can be decoded directly
from a binary stream with the functions in `flacscan.metadata`:

```python
import io
from flacscan.metadata import (
    iter_metadata_blocks,
    read_metadata_block,
    read_metadata_block_with_header,
)

block = read_metadata_block_with_header(io.BytesIO(raw_block_with_header))
block = read_metadata_block(io.BytesIO(raw_body), block_type, length)
for block in iter_metadata_blocks(stream):
    ...
```

Blocks come back as `StreamInfo`, `Padding`, `Application`, `VorbisComment`
or `Reserved`. Seek tables, cue sheets and pictures are skipped and returned
as `Padding`. `VorbisComment` has `vendor`, `comments`, `tags()` and
`get_tag(name)`.

## Subframes and prediction

`flacscan.subframe.decode(bits, bps, block_size)` decodes one subframe
(constant, verbatim, fixed or LPC, with wasted bits) from a `BitReader` and
returns the list of samples. `BitReader` wraps a binary stream or a bytes
object and offers `read_bit()`, `read_bits(count)` and `read_unary()`.

```python
from flacscan.subframe import BitReader, decode

samples = decode(BitReader(subframe_bytes), bps=16, block_size=4096)
```

`flacscan.prediction` holds the arithmetic on its own: `extend_sign`,
`rice_to_signed`, `predict_fixed`, `predict_lpc_low_order` and
`predict_lpc_high_order`.

## What it does not do

flacscan does not parse frame headers, undo inter-channel decorrelation or
iterate over the audio samples of a whole stream; only single subframes can be
decoded. Rice partitions with unencoded (escaped) residuals and negative LPC
shifts raise `UnsupportedError`. There is no command-line tool.

## Errors

Malformed input raises `flacscan.metadata.FormatError`. Valid streams that use
features this library does not handle, or metadata blocks over 10 MiB, raise
`flacscan.metadata.UnsupportedError`. Both derive from
`flacscan.metadata.FlacError`. A stream that ends too early raises `EOFError`.

## Running the tests

```
pip install -e ".[test]"
pytest
```