"""Streaming decompression sinks.

A sink is written to chunk by chunk while the download is in flight, so the
decoders here are incremental rather than the file-oriented ``gzip.open``
style readers.
"""

import bz2
import lzma
import zlib
from typing import BinaryIO, Protocol

from blindspot.core.errors import BlindspotError
from blindspot.models.installer import Compression


class DecompressionError(BlindspotError):
    """Downloaded data could not be decoded."""

    pass


class Sink(Protocol):
    def write(self, data: bytes) -> int: ...

    def flush(self) -> None: ...

    def close(self) -> None: ...


def _gzip_decompressor():
    # wbits | 16 makes zlib expect a gzip header and trailer
    return zlib.decompressobj(wbits=zlib.MAX_WBITS | 16)


class _StreamDecoder:
    """Incremental decoder that restarts on concatenated streams.

    gzip members, pbzip2 output and multi-stream xz files are several
    complete streams back to back; each one gets a fresh decompressor.
    """

    def __init__(self, factory):
        self._factory = factory
        self._decoder = factory()
        self._pending = False

    def decompress(self, data: bytes) -> bytes:
        output = []
        while data:
            self._pending = True
            output.append(self._decoder.decompress(data))
            if not self._decoder.eof:
                break
            data = self._decoder.unused_data
            self._decoder = self._factory()
            self._pending = False
        return b"".join(output)

    def finish(self) -> bytes:
        if self._pending:
            raise EOFError("compressed stream ended before the end-of-stream marker")
        return b""


def _decoder_for(compression: Compression) -> _StreamDecoder:
    if compression is Compression.GZIP:
        return _StreamDecoder(_gzip_decompressor)
    if compression is Compression.BZIP2:
        return _StreamDecoder(bz2.BZ2Decompressor)
    if compression is Compression.XZ:
        return _StreamDecoder(lzma.LZMADecompressor)
    raise ValueError(f"No decoder for {compression}")


class DecompressingWriter:
    """Write compressed bytes in, decompressed bytes land in the wrapped file."""

    def __init__(self, file: BinaryIO, compression: Compression):
        self.file = file
        self.compression = compression
        self._decoder = _decoder_for(compression)
        self.closed = False

    def write(self, data: bytes) -> int:
        try:
            self.file.write(self._decoder.decompress(data))
        except (zlib.error, lzma.LZMAError, OSError, EOFError) as e:
            raise DecompressionError(f"Invalid {self.compression} data: {e}") from e
        return len(data)

    def flush(self) -> None:
        self.file.flush()

    def close(self) -> None:
        """Close the wrapped file, failing if the stream was truncated."""
        if self.closed:
            return
        self.closed = True
        try:
            self.file.write(self._decoder.finish())
        except EOFError as e:
            raise DecompressionError(f"Truncated {self.compression} data: {e}") from e
        finally:
            self.file.close()

    def __enter__(self) -> "DecompressingWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            # Keep the in-flight error; partial output is discarded by the caller
            self.closed = True
            self.file.close()
            return
        self.close()


def open_sink(compression: Compression, file: BinaryIO) -> Sink:
    """Wrap *file* so that writes are decompressed according to *compression*."""
    if compression is Compression.NONE:
        return file
    return DecompressingWriter(file, compression)
