from .response import (
	ResponseBuffer,
	ResponseAlreadySent,
	OpKind,
	SetHeader,
	SetCookie,
	SetRawCookie,
)  # NOQA: F401
from .transport import (
	Transport,
	HTTPTransport,
	WSGITransport,
	HeadersAlreadySent,
)  # NOQA: F401
from .view import Capture, render  # NOQA: F401

__version__ = "1.0.0"

# EOF
