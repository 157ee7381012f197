"""Assemble playable WAV containers from inline audio fragments.

Speech providers stream audio either as fragments of an already complete
container (``audio/wav``) or as raw linear PCM (``audio/L16;rate=24000``).
Raw PCM is wrapped in a canonical 44-byte RIFF/WAVE header.
"""

from __future__ import annotations

import base64
import re
import struct
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

DEFAULT_AUDIO_MIME_TYPE = "audio/L16;rate=24000"
WAV_MIME_TYPE = "audio/wav"
WAV_HEADER_SIZE = 44
_PCM_FORMAT_TAG = 1
_DEFAULT_CHANNELS = 1
_DEFAULT_SAMPLE_RATE = 24_000
_DEFAULT_BITS_PER_SAMPLE = 16


@dataclass(frozen=True, slots=True)
class PcmFormat:
    """Sample layout of a raw PCM stream."""

    channels: int = _DEFAULT_CHANNELS
    sample_rate: int = _DEFAULT_SAMPLE_RATE
    bits_per_sample: int = _DEFAULT_BITS_PER_SAMPLE

    @property
    def block_align(self) -> int:
        return self.channels * self.bits_per_sample // 8

    @property
    def byte_rate(self) -> int:
        return self.sample_rate * self.block_align


_LEADING_DIGITS = re.compile(r"\d+", re.ASCII)


def _parse_int(value: str) -> int | None:
    match = _LEADING_DIGITS.match(value.strip())
    return int(match.group()) if match else None


def parse_pcm_mime_type(mime_type: str) -> PcmFormat:
    """Read channels, rate, and sample width from a PCM MIME type.

    ``audio/L24;rate=48000;channels=2`` yields 2 channels at 48 kHz with
    24-bit samples. Missing or unparsable values keep their defaults.
    """
    file_type, *params = (part.strip() for part in mime_type.split(";"))
    _, _, subtype = file_type.partition("/")

    channels = _DEFAULT_CHANNELS
    sample_rate = _DEFAULT_SAMPLE_RATE
    bits = _DEFAULT_BITS_PER_SAMPLE

    if subtype[:1] in ("L", "l"):
        parsed_bits = _parse_int(subtype[1:])
        if parsed_bits is not None:
            bits = parsed_bits

    for param in params:
        key, _, value = (s.strip() for s in param.partition("="))
        parsed = _parse_int(value)
        if parsed is None:
            continue
        if key == "rate":
            sample_rate = parsed
        elif key == "channels":
            channels = parsed

    return PcmFormat(channels=channels, sample_rate=sample_rate, bits_per_sample=bits)


def create_wav_header(data_length: int, fmt: PcmFormat) -> bytes:
    """Build the canonical 44-byte RIFF/WAVE header for a PCM payload."""
    return struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + data_length,
        b"WAVE",
        b"fmt ",
        16,
        _PCM_FORMAT_TAG,
        fmt.channels,
        fmt.sample_rate,
        fmt.byte_rate,
        fmt.block_align,
        fmt.bits_per_sample,
        b"data",
        data_length,
    )


def decode_fragment(fragment: str | bytes) -> bytes:
    """Decode one inline fragment; strings are base64, bytes pass through."""
    if isinstance(fragment, str):
        return base64.b64decode(fragment)
    return bytes(fragment)


def is_wav_container(mime_type: str) -> bool:
    return mime_type.strip().lower().startswith(WAV_MIME_TYPE)


def assemble_wav(fragments: Iterable[str | bytes], mime_type: str) -> bytes:
    """Join fragments into a playable WAV buffer.

    Raises:
        ValueError: If there are no fragments.
    """
    decoded = [decode_fragment(fragment) for fragment in fragments]
    if not decoded:
        raise ValueError("No audio data to convert")

    payload = b"".join(decoded)
    if is_wav_container(mime_type):
        return payload

    header = create_wav_header(len(payload), parse_pcm_mime_type(mime_type))
    return header + payload


def audio_extension(mime_type: str) -> str:
    """File extension for a MIME type: the subtype without parameters."""
    _, _, subtype = mime_type.partition("/")
    return subtype.split(";")[0].strip() or "wav"
