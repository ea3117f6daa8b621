from os import getenv
from typing import Any

DEFAULT_ENCODING: str = getenv("BUFFERED_ENCODING", "utf8")
EOL: bytes = b"\r\n"


def asBytes(value: str | bytes | None) -> bytes:
	if isinstance(value, bytes):
		return value
	elif isinstance(value, str):
		return bytes(value, DEFAULT_ENCODING)
	elif value is None:
		return b""
	else:
		raise ValueError(f"Expected bytes or str, got: {value}")


def asWritable(value: str | bytes | bytearray | Any) -> str:
	"""Converts any value written to a capture sink to text, bytes
	being decoded with the default encoding."""
	if isinstance(value, str):
		return value
	elif isinstance(value, bytes) or isinstance(value, bytearray):
		return value.decode(DEFAULT_ENCODING)
	elif value is None:
		return ""
	else:
		return str(value)


# EOF
