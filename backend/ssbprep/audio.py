from __future__ import annotations

import base64
import re
from typing import Dict, Sequence, Union

import numpy as np

INPUT_SAMPLE_RATE = 16000
OUTPUT_SAMPLE_RATE = 24000


def encode(data: bytes) -> str:
	return base64.b64encode(data).decode("ascii")


def decode(data: str) -> bytes:
	return base64.b64decode(data)


def float_to_pcm16(samples: Union[Sequence[float], np.ndarray]) -> bytes:
	"""Float samples in [-1, 1] to little-endian signed 16-bit PCM."""
	arr = np.asarray(samples, dtype=np.float32)
	scaled = np.clip(arr * 32768.0, -32768, 32767).astype("<i2")
	return scaled.tobytes()


def pcm16_to_float(data: bytes, num_channels: int = 1) -> np.ndarray:
	"""Interleaved 16-bit PCM to a (channels, frames) float32 array in [-1, 1)."""
	if num_channels < 1:
		raise ValueError("num_channels must be positive")
	ints = np.frombuffer(data, dtype="<i2")
	frames = len(ints) // num_channels
	ints = ints[: frames * num_channels]
	return (ints.reshape(frames, num_channels).T / 32768.0).astype(np.float32)


def pcm_blob(data: bytes, rate: int = INPUT_SAMPLE_RATE) -> Dict[str, str]:
	return {"data": encode(data), "mime_type": f"audio/pcm;rate={rate}"}


def sample_rate_from_mime(mime_type: str | None, default: int = OUTPUT_SAMPLE_RATE) -> int:
	if isinstance(mime_type, str):
		m = re.search(r"rate=(\d+)", mime_type)
		if m:
			return int(m.group(1))
	return default


def duration_seconds(data: bytes, rate: int, num_channels: int = 1) -> float:
	return len(data) / (2 * num_channels * rate)
