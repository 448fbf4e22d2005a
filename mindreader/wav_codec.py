"""
Canonical 44-byte PCM WAV header handling and fragment splicing.

Layout (little-endian):
    0  "RIFF"        4  riff size (36 + data)   8  "WAVE"
    12 "fmt "        16 16                      20 format tag (1 = PCM)
    22 channels      24 sample rate             28 byte rate
    32 block align   34 bits per sample         36 "data"
    40 data size     44 payload
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Sequence

from loguru import logger

WAV_HEADER_SIZE = 44
PCM_FORMAT_TAG = 1

_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


class WavFormatError(ValueError):
    pass


@dataclass(frozen=True)
class WavFormat:
    channels: int
    sample_rate: int
    bits_per_sample: int

    @property
    def block_align(self) -> int:
        return self.channels * self.bits_per_sample // 8

    @property
    def byte_rate(self) -> int:
        return self.sample_rate * self.channels * self.bits_per_sample // 8


def parse_header(buffer: bytes) -> WavFormat:
    """Read the format fields of a canonical WAV header, validating its tags."""
    if len(buffer) < WAV_HEADER_SIZE:
        raise WavFormatError(f"WAV buffer too short for a header ({len(buffer)} bytes)")
    if buffer[0:4] != b"RIFF" or buffer[8:12] != b"WAVE":
        raise WavFormatError("Missing RIFF/WAVE tags")

    channels, = struct.unpack_from("<H", buffer, 22)
    sample_rate, = struct.unpack_from("<I", buffer, 24)
    bits_per_sample, = struct.unpack_from("<H", buffer, 34)
    return WavFormat(channels=channels, sample_rate=sample_rate, bits_per_sample=bits_per_sample)


def build_header(fmt: WavFormat, data_size: int) -> bytes:
    return _HEADER.pack(
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,
        PCM_FORMAT_TAG,
        fmt.channels,
        fmt.sample_rate,
        fmt.byte_rate,
        fmt.block_align,
        fmt.bits_per_sample,
        b"data",
        data_size,
    )


def pcm_payload(buffer: bytes) -> bytes:
    if len(buffer) <= WAV_HEADER_SIZE:
        return b""
    return buffer[WAV_HEADER_SIZE:]


def first_valid_format(fragments: Sequence[bytes]) -> WavFormat:
    """Format of the first fragment whose header parses."""
    for index, fragment in enumerate(fragments):
        try:
            return parse_header(fragment)
        except WavFormatError as e:
            logger.warning(f"Fragment {index + 1} has no usable header ({e})")
    raise WavFormatError("No fragment carries a valid RIFF/WAVE header")


def combine_wav_buffers(fragments: Sequence[bytes]) -> bytes:
    """
    Splice WAV fragments into one WAV buffer.

    The format is taken from the first fragment with a valid header; later
    headers are ignored. Fragments of 44 bytes or less contribute no audio.
    Raises WavFormatError only when no fragment has a valid header.
    """
    if not fragments:
        return b""
    if len(fragments) == 1:
        return fragments[0]

    logger.info(f"Combining {len(fragments)} WAV fragments")

    payloads = []
    for index, fragment in enumerate(fragments):
        payload = pcm_payload(fragment)
        if not payload:
            logger.warning(f"Fragment {index + 1} too small ({len(fragment)} bytes), skipping")
        payloads.append(payload)
    data = b"".join(payloads)

    fmt = first_valid_format(fragments)
    logger.debug(f"Format: {fmt.sample_rate}Hz, {fmt.channels}ch, {fmt.bits_per_sample}bit; PCM bytes: {len(data)}")

    return build_header(fmt, len(data)) + data
