#!/usr/bin/env python3
"""
Streaming transfer engine.

Moves bytes from a source file to a sink through at most one transform,
one chunk at a time:

    source chunks -> transform -> sink (file or digest)

The chain is pull-driven: a chunk is only read after the previous one has
been written, so memory use is bounded by the chunk size plus codec state
regardless of file size. Every job ends in exactly one outcome, either a
TransferResult or a single TransferError naming the stage that failed.

Compressed files use the gzip container, so they can also be read by any
gzip tool.
"""

import os
import zlib
import hashlib
import logging
from enum import Enum
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional

from .errors import TransferError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
COMPRESSED_SUFFIX = '.gz'

# wbits selecting the gzip header and trailer
GZIP_WBITS = 16 + zlib.MAX_WBITS


class TransformKind(Enum):
    """Byte transform applied between source and sink."""
    NONE = 'none'
    COMPRESS = 'compress'
    DECOMPRESS = 'decompress'


@dataclass
class TransferJob:
    """One source-to-sink transfer. A job without destination is a hash."""
    source_path: str
    destination_path: Optional[str] = None
    kind: TransformKind = TransformKind.NONE


@dataclass
class TransferResult:
    """Terminal outcome of a successful job."""
    job: TransferJob
    bytes_read: int = 0
    bytes_written: int = 0
    digest: Optional[str] = None


def compressed_name(path: str) -> str:
    """Destination name for compress: the suffix is always appended."""
    return path + COMPRESSED_SUFFIX


def decompressed_name(path: str) -> str:
    """Destination name for decompress: a trailing suffix is stripped."""
    if path.endswith(COMPRESSED_SUFFIX) and len(path) > len(COMPRESSED_SUFFIX):
        return path[:-len(COMPRESSED_SUFFIX)]
    return path


def same_file(first: str, second: str) -> bool:
    """True when both paths name the same existing file."""
    try:
        return os.path.samefile(first, second)
    except OSError:
        return False


def read_chunks(stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    """Yield successive chunks of an open binary stream until EOF."""
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        yield chunk


# Transforms

class IdentityTransform:
    """Passes chunks through unchanged."""

    def feed(self, chunk: bytes) -> Iterator[bytes]:
        yield chunk

    def finish(self) -> Iterator[bytes]:
        return iter(())


class CompressTransform:
    """gzip compression of a chunk stream."""

    def __init__(self, level: int = 6):
        self._compressor = zlib.compressobj(level, zlib.DEFLATED, GZIP_WBITS)

    def feed(self, chunk: bytes) -> Iterator[bytes]:
        compressed = self._compressor.compress(chunk)
        if compressed:
            yield compressed

    def finish(self) -> Iterator[bytes]:
        tail = self._compressor.flush()
        if tail:
            yield tail


class DecompressTransform:
    """
    gzip decompression of a chunk stream.

    Output is produced in pieces of at most max_output bytes, so a small
    highly compressed input cannot expand into one huge buffer. Concatenated
    gzip members are decoded one after another. Input that ends before the
    last member is complete (including empty input) raises zlib.error from
    finish().
    """

    def __init__(self, max_output: int = CHUNK_SIZE):
        self.max_output = max_output
        self._decompressor = zlib.decompressobj(GZIP_WBITS)

    def feed(self, chunk: bytes) -> Iterator[bytes]:
        data = chunk
        while data:
            if self._decompressor.eof:
                # Next gzip member
                self._decompressor = zlib.decompressobj(GZIP_WBITS)
            out = self._decompressor.decompress(data, self.max_output)
            if out:
                yield out
            if self._decompressor.eof:
                data = self._decompressor.unused_data
            else:
                data = self._decompressor.unconsumed_tail

    def finish(self) -> Iterator[bytes]:
        tail = self._decompressor.flush()
        if tail:
            yield tail
        if not self._decompressor.eof:
            raise zlib.error('unexpected end of compressed stream')


# Sinks

class FileSink:
    """Writes chunks to an open binary stream."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.bytes_written = 0

    def write(self, chunk: bytes) -> None:
        self.stream.write(chunk)
        self.bytes_written += len(chunk)

    def close(self) -> None:
        self.stream.flush()


class DigestSink:
    """Feeds chunks into a hashlib digest."""

    def __init__(self, algorithm: str = 'sha256'):
        self._hash = hashlib.new(algorithm)
        self.bytes_written = 0
        self.hexdigest: Optional[str] = None

    def write(self, chunk: bytes) -> None:
        self._hash.update(chunk)
        self.bytes_written += len(chunk)

    def close(self) -> None:
        self.hexdigest = self._hash.hexdigest()


def _pump(source: Iterator[bytes], transform, sink) -> int:
    """
    Drive chunks from source through transform into sink.

    Returns the number of bytes read. Failures are wrapped in TransferError
    tagged with the stage they came from.
    """
    bytes_read = 0
    while True:
        try:
            chunk = next(source, None)
        except (OSError, ValueError) as e:
            raise TransferError('source', e) from e
        if chunk is None:
            break
        bytes_read += len(chunk)
        _drain(transform.feed(chunk), sink)

    _drain(transform.finish(), sink)
    try:
        sink.close()
    except OSError as e:
        raise TransferError('sink', e) from e
    return bytes_read


def _drain(pieces: Iterator[bytes], sink) -> None:
    """Write every piece a transform call produces."""
    while True:
        try:
            piece = next(pieces, None)
        except (zlib.error, ValueError) as e:
            raise TransferError('transform', e) from e
        if piece is None:
            return
        try:
            sink.write(piece)
        except OSError as e:
            raise TransferError('sink', e) from e


class TransferEngine:
    """
    Runs TransferJobs.

    A destination file is opened (and truncated) only after the source has
    been opened, so a missing source never leaves an empty destination
    behind. A destination written by a failed job is left as it is.
    """

    def __init__(self, chunk_size: int = CHUNK_SIZE, compression_level: int = 6,
                 digest_algorithm: str = 'sha256'):
        self.chunk_size = chunk_size
        self.compression_level = compression_level
        self.digest_algorithm = digest_algorithm

    def _make_transform(self, kind: TransformKind):
        if kind is TransformKind.COMPRESS:
            return CompressTransform(self.compression_level)
        if kind is TransformKind.DECOMPRESS:
            return DecompressTransform(self.chunk_size)
        return IdentityTransform()

    def run(self, job: TransferJob) -> TransferResult:
        """Run a job to completion and return its single outcome."""
        logger.debug("transfer %s: %s -> %s", job.kind.value,
                     job.source_path, job.destination_path or '<digest>')
        transform = self._make_transform(job.kind)

        try:
            source_stream = open(job.source_path, 'rb')
        except OSError as e:
            raise TransferError('source', e) from e

        with source_stream:
            source = read_chunks(source_stream, self.chunk_size)

            if job.destination_path is None:
                sink = DigestSink(self.digest_algorithm)
                bytes_read = _pump(source, transform, sink)
                result = TransferResult(job, bytes_read, sink.bytes_written,
                                        digest=sink.hexdigest)
            else:
                if same_file(job.source_path, job.destination_path):
                    raise TransferError('sink', ValueError(
                        'source and destination are the same file'))
                try:
                    destination_stream = open(job.destination_path, 'wb')
                except OSError as e:
                    raise TransferError('sink', e) from e
                with destination_stream:
                    sink = FileSink(destination_stream)
                    bytes_read = _pump(source, transform, sink)
                result = TransferResult(job, bytes_read, sink.bytes_written)

        logger.info("transfer %s finished: %s (%d bytes in, %d bytes out)",
                    job.kind.value, job.source_path,
                    result.bytes_read, result.bytes_written)
        return result

    def hash(self, path: str) -> TransferResult:
        """Compute the digest of a file without loading it into memory."""
        return self.run(TransferJob(source_path=path))

    def compress(self, source: str, destination: str) -> TransferResult:
        """Compress source into destination + COMPRESSED_SUFFIX."""
        return self.run(TransferJob(source_path=source,
                                    destination_path=compressed_name(destination),
                                    kind=TransformKind.COMPRESS))

    def decompress(self, source: str, destination: str) -> TransferResult:
        """Decompress source into destination with COMPRESSED_SUFFIX removed."""
        return self.run(TransferJob(source_path=source,
                                    destination_path=decompressed_name(destination),
                                    kind=TransformKind.DECOMPRESS))
