import time
from abc import ABC, abstractmethod
from datetime import datetime
from http import HTTPStatus
from typing import Any, BinaryIO, Callable, TypeAlias
from urllib.parse import quote_plus

from mypy_extensions import KwArg, VarArg

from .utils.io import EOL, asBytes

# --
# ## Transport
#
# The transport is the side of the response that is irreversible: headers,
# cookies and body bytes. A `ResponseBuffer` replays its recorded operations
# against a transport when it is sent.

# A transport primitive accepts whatever arguments the recorded operation
# holds.
TPrimitive: TypeAlias = Callable[[VarArg(Any), KwArg(Any)], Any]
TExpires: TypeAlias = int | float | datetime | None

HTTP_STATUS: dict[int, str] = {_.value: _.phrase for _ in HTTPStatus}

DAYS: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTHS: tuple[str, ...] = (
	"Jan",
	"Feb",
	"Mar",
	"Apr",
	"May",
	"Jun",
	"Jul",
	"Aug",
	"Sep",
	"Oct",
	"Nov",
	"Dec",
)

COOKIE_NAME_RESERVED: str = "=,; \t\r\n\v\f"
COOKIE_VALUE_RESERVED: str = ",; \t\r\n\v\f"
COOKIE_DELETED_EXPIRES: float = 1.0

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def headername(name: str, *, headers: dict[str, str] = {}) -> str:
	"""Normalizes the header name as `Kebab-Case`."""
	if name in headers:
		return headers[name]
	key: str = name.lower()
	if key in headers:
		return headers[key]
	else:
		normalized: str = "-".join(_.capitalize() for _ in name.split("-"))
		headers[key] = normalized
		return normalized


def timestamp(t: float) -> str:
	"""Formats a UNIX timestamp as an HTTP date."""
	# FORMAT: Sat, 29 Oct 1994 19:43:31 GMT
	g = time.gmtime(t)
	return f"{DAYS[g.tm_wday]}, {g.tm_mday:02d} {MONTHS[g.tm_mon - 1]} {g.tm_year} {g.tm_hour:02d}:{g.tm_min:02d}:{g.tm_sec:02d} GMT"


def cookie(
	name: str,
	value: str | None = "",
	expires: TExpires = 0,
	path: str = "",
	domain: str = "",
	secure: bool = False,
	httpOnly: bool = False,
	sameSite: str | None = None,
	*,
	raw: bool = False,
) -> str:
	"""Formats the value of a `Set-Cookie` header. An empty value produces
	a cookie that expires the existing one."""
	if not name or any(_ in COOKIE_NAME_RESERVED for _ in name):
		raise ValueError(f"Cookie name contains reserved characters: {name!r}")
	value = value or ""
	if raw and any(_ in COOKIE_VALUE_RESERVED for _ in value):
		raise ValueError(f"Cookie value contains reserved characters: {value!r}")
	if not value:
		parts: list[str] = [
			f"{name}=deleted",
			f"expires={timestamp(COOKIE_DELETED_EXPIRES)}",
			"Max-Age=0",
		]
	else:
		parts = [f"{name}={value if raw else quote_plus(value)}"]
		at: float | None = (
			expires.timestamp() if isinstance(expires, datetime) else expires
		)
		if at:
			parts.append(f"expires={timestamp(at)}")
			parts.append(f"Max-Age={max(0, int(at - time.time()))}")
	if path:
		parts.append(f"path={path}")
	if domain:
		parts.append(f"domain={domain}")
	if secure:
		parts.append("secure")
	if httpOnly:
		parts.append("HttpOnly")
	if sameSite:
		parts.append(f"SameSite={sameSite}")
	return "; ".join(parts)


# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class HeadersAlreadySent(RuntimeError):
	"""Raised when a header is set after the head was written."""


# -----------------------------------------------------------------------------
#
# TRANSPORT
#
# -----------------------------------------------------------------------------


class Transport(ABC):
	"""The capabilities a response buffer commits to."""

	@abstractmethod
	def setHeader(
		self, header: str, replace: bool = True, status: int | None = None
	) -> None: ...

	@abstractmethod
	def setCookie(
		self,
		name: str,
		value: str | None = "",
		expires: TExpires = 0,
		path: str = "",
		domain: str = "",
		secure: bool = False,
		httpOnly: bool = False,
		sameSite: str | None = None,
	) -> bool: ...

	@abstractmethod
	def setRawCookie(
		self,
		name: str,
		value: str | None = "",
		expires: TExpires = 0,
		path: str = "",
		domain: str = "",
		secure: bool = False,
		httpOnly: bool = False,
		sameSite: str | None = None,
	) -> bool: ...

	@abstractmethod
	def write(self, data: str | bytes) -> int: ...


class HeadTransport(Transport):
	"""Keeps track of the status and headers until the first write, after
	which they can't be changed anymore."""

	__slots__ = ["status", "message", "headers", "headersSent"]

	def __init__(self) -> None:
		self.status: int = 200
		self.message: str = HTTP_STATUS[200]
		self.headers: list[tuple[str, str]] = []
		self.headersSent: bool = False

	def setStatus(self, status: int, message: str | None = None) -> None:
		self.status = status
		self.message = message or HTTP_STATUS.get(status, "Unknown status")

	def getHeader(self, name: str) -> str | None:
		key = headername(name)
		for k, v in reversed(self.headers):
			if k == key:
				return v
		return None

	def setHeader(
		self, header: str, replace: bool = True, status: int | None = None
	) -> None:
		self._ensureHeadersNotSent(header)
		if "\r" in header or "\n" in header:
			raise ValueError(f"Header line may not contain line breaks: {header!r}")
		if header[:5].upper() == "HTTP/":
			parts = header.split(None, 2)
			if len(parts) < 2 or not parts[1].isdigit():
				raise ValueError(f"Malformed status line: {header!r}")
			self.setStatus(int(parts[1]), parts[2] if len(parts) > 2 else None)
		else:
			key, sep, value = header.partition(":")
			key = key.strip()
			if not sep or not key:
				raise ValueError(f"Malformed header line: {header!r}")
			name = headername(key)
			if replace:
				self.headers = [_ for _ in self.headers if _[0] != name]
			self.headers.append((name, value.strip()))
			# A redirect without an explicit status is a 302
			if (
				name == "Location"
				and status is None
				and self.status != 201
				and not 300 <= self.status < 400
			):
				self.setStatus(302)
		if status:
			self.setStatus(status)

	def setCookie(
		self,
		name: str,
		value: str | None = "",
		expires: TExpires = 0,
		path: str = "",
		domain: str = "",
		secure: bool = False,
		httpOnly: bool = False,
		sameSite: str | None = None,
	) -> bool:
		self._ensureHeadersNotSent("Set-Cookie")
		self.headers.append(
			(
				"Set-Cookie",
				cookie(name, value, expires, path, domain, secure, httpOnly, sameSite),
			)
		)
		return True

	def setRawCookie(
		self,
		name: str,
		value: str | None = "",
		expires: TExpires = 0,
		path: str = "",
		domain: str = "",
		secure: bool = False,
		httpOnly: bool = False,
		sameSite: str | None = None,
	) -> bool:
		self._ensureHeadersNotSent("Set-Cookie")
		self.headers.append(
			(
				"Set-Cookie",
				cookie(
					name,
					value,
					expires,
					path,
					domain,
					secure,
					httpOnly,
					sameSite,
					raw=True,
				),
			)
		)
		return True

	def write(self, data: str | bytes) -> int:
		payload: bytes = asBytes(data)
		if not self.headersSent:
			self.headersSent = True
			self._writeHead(payload)
		return self._writeBody(payload)

	def _ensureHeadersNotSent(self, header: str) -> None:
		if self.headersSent:
			raise HeadersAlreadySent(
				f"Cannot set header {header!r}, headers have already been sent"
			)

	@abstractmethod
	def _writeHead(self, payload: bytes) -> None: ...

	@abstractmethod
	def _writeBody(self, payload: bytes) -> int: ...


class HTTPTransport(HeadTransport):
	"""Serializes the response as HTTP/1.1 to a binary stream. The
	`Content-Length` is derived from the first write."""

	__slots__ = ["stream", "protocol"]

	def __init__(self, stream: BinaryIO, protocol: str = "HTTP/1.1") -> None:
		super().__init__()
		self.stream: BinaryIO = stream
		self.protocol: str = protocol

	def head(self) -> bytes:
		"""Serializes the head as a payload."""
		lines: list[str] = [f"{k}: {v}" for k, v in self.headers]
		lines.insert(0, f"{self.protocol} {self.status} {self.message}")
		lines.append("")
		lines.append("")
		return EOL.join(_.encode("latin-1") for _ in lines)

	def _writeHead(self, payload: bytes) -> None:
		if self.getHeader("Content-Length") is None:
			self.headers.append(("Content-Length", str(len(payload))))
		self.stream.write(self.head())

	def _writeBody(self, payload: bytes) -> int:
		return self.stream.write(payload) if payload else 0


class WSGITransport(HeadTransport):
	"""Collects the status, headers and body chunks so that they can be
	handed to a WSGI server's `start_response`."""

	__slots__ = ["body"]

	def __init__(self) -> None:
		super().__init__()
		self.body: list[bytes] = []

	@property
	def statusLine(self) -> str:
		return f"{self.status} {self.message}"

	def _writeHead(self, payload: bytes) -> None:
		pass

	def _writeBody(self, payload: bytes) -> int:
		if payload:
			self.body.append(payload)
		return len(payload)

# EOF
