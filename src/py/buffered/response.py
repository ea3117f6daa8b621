from enum import Enum
from pathlib import Path
from typing import Any, Callable, Mapping, NamedTuple, TypeAlias, Union

from . import config
from .transport import TExpires, TPrimitive, Transport
from .utils.logging import event
from .view import render

# --
# ## Response Buffer
#
# Header and cookie calls are recorded as operations and the view is only
# rendered when the response is sent. Sending happens in a fixed order:
# the view is rendered, the recorded operations are replayed against the
# transport, the body is written and finally the post-send hook is called.
#
# NOTE: A view that fails aborts the send before any header is committed,
# but a transport that rejects an operation leaves the operations replayed
# so far committed. There is no rollback.

# The variable that is never passed to a view, so that a view can't get
# a handle on the response it is rendered for.
RESERVED_VAR: str = "this"

# -----------------------------------------------------------------------------
#
# OPERATIONS
#
# -----------------------------------------------------------------------------


class OpKind(Enum):
	SetHeader = "header"
	SetCookie = "setcookie"
	SetRawCookie = "setrawcookie"


class SetHeader(NamedTuple):
	"""A recorded `Transport.setHeader` call."""

	header: str
	replace: bool = True
	status: int | None = None

	@property
	def kind(self) -> OpKind:
		return OpKind.SetHeader

	@property
	def args(self) -> tuple[Any, ...]:
		return tuple(self)


class SetCookie(NamedTuple):
	"""A recorded `Transport.setCookie` call."""

	name: str
	value: str | None = ""
	expires: TExpires = 0
	path: str = ""
	domain: str = ""
	secure: bool = False
	httpOnly: bool = False
	sameSite: str | None = None

	@property
	def kind(self) -> OpKind:
		return OpKind.SetCookie

	@property
	def args(self) -> tuple[Any, ...]:
		return tuple(self)


class SetRawCookie(NamedTuple):
	"""A recorded `Transport.setRawCookie` call, the value being sent as-is."""

	name: str
	value: str | None = ""
	expires: TExpires = 0
	path: str = ""
	domain: str = ""
	secure: bool = False
	httpOnly: bool = False
	sameSite: str | None = None

	@property
	def kind(self) -> OpKind:
		return OpKind.SetRawCookie

	@property
	def args(self) -> tuple[Any, ...]:
		return tuple(self)


THeaderOp: TypeAlias = Union[SetHeader, SetCookie, SetRawCookie]
TPostSendHook: TypeAlias = Callable[["ResponseBuffer"], Any]

# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class ResponseAlreadySent(RuntimeError):
	"""Raised when `send()` is called more than once on the same buffer."""


# -----------------------------------------------------------------------------
#
# BUFFER
#
# -----------------------------------------------------------------------------


class ResponseBuffer:
	"""Accumulates the header operations, the view and its variables for a
	single response, and commits them all at once with `send()`."""

	__slots__ = ["headerOps", "viewPath", "viewVars", "postSendHook", "sent"]

	def __init__(self) -> None:
		self.headerOps: list[THeaderOp] = []
		self.viewPath: str | Path | None = None
		self.viewVars: dict[str, Any] = {}
		self.postSendHook: TPostSendHook | None = None
		self.sent: bool = False

	# =========================================================================
	# VIEW
	# =========================================================================

	def setView(self, path: str | Path | None) -> None:
		self.viewPath = path

	def getView(self) -> str | Path | None:
		return self.viewPath

	def setVars(self, vars: Mapping[str, Any]) -> None:
		"""Replaces the view variables, dropping the reserved `this`."""
		self.viewVars = {k: v for k, v in vars.items() if k != RESERVED_VAR}

	def getVars(self) -> dict[str, Any]:
		return self.viewVars

	# =========================================================================
	# HEADERS
	# =========================================================================

	def addHeader(self, *args: Any, **kwargs: Any) -> None:
		self.headerOps.append(SetHeader(*args, **kwargs))

	def addCookie(self, *args: Any, **kwargs: Any) -> bool:
		self.headerOps.append(SetCookie(*args, **kwargs))
		return True

	def addRawCookie(self, *args: Any, **kwargs: Any) -> bool:
		self.headerOps.append(SetRawCookie(*args, **kwargs))
		return True

	def getHeaderOps(self) -> list[THeaderOp]:
		return self.headerOps

	# =========================================================================
	# HOOK
	# =========================================================================

	def setPostSendHook(self, hook: TPostSendHook | None) -> None:
		self.postSendHook = hook

	def getPostSendHook(self) -> TPostSendHook | None:
		return self.postSendHook

	# =========================================================================
	# COMMIT
	# =========================================================================

	def renderView(self) -> str:
		"""Renders the view with its variables and returns its output, or
		an empty string when there is no view."""
		if not self.viewPath:
			return ""
		return render(self.viewPath, self.viewVars)

	def primitive(self, transport: Transport, kind: OpKind) -> TPrimitive:
		if kind is OpKind.SetHeader:
			return transport.setHeader
		elif kind is OpKind.SetCookie:
			return transport.setCookie
		elif kind is OpKind.SetRawCookie:
			return transport.setRawCookie
		else:
			raise ValueError(f"Unsupported header operation: {kind}")

	def commitHeaders(self, transport: Transport) -> None:
		for op in self.headerOps:
			self.primitive(transport, op.kind)(*op.args)

	def callPostSendHook(self) -> None:
		if self.postSendHook is None:
			return None
		self.postSendHook(self)

	def send(self, transport: Transport) -> None:
		"""Renders the view, commits the headers, writes the body and calls
		the post-send hook, in that order. A buffer can only be sent once."""
		if self.sent:
			raise ResponseAlreadySent(f"Response has already been sent: {self}")
		self.sent = True
		body = self.renderView()
		self.commitHeaders(transport)
		transport.write(body)
		if config.LOG_COMMITS:
			event(
				"response.sent",
				len(body),
				Ops=len(self.headerOps),
				View=str(self.viewPath) if self.viewPath else None,
			)
		self.callPostSendHook()

	def __str__(self) -> str:
		return f"ResponseBuffer(view={self.viewPath} ops={len(self.headerOps)} sent={self.sent})"


# EOF
