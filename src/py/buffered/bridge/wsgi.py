from typing import Any, Callable, Iterable

from ..response import ResponseBuffer
from ..transport import WSGITransport

# --
# ## WSGI Bridge
#
# Exposes a handler that fills a `ResponseBuffer` as a WSGI application.

# SEE: https://peps.python.org/pep-3333/

TEnviron = dict[str, Any]
TStartResponse = Callable[[str, list[tuple[str, str]]], Any]
THandler = Callable[[TEnviron, ResponseBuffer], None]


def application(
	handler: THandler,
	transport: Callable[[], WSGITransport] = WSGITransport,
) -> Callable[[TEnviron, TStartResponse], Iterable[bytes]]:
	"""Wraps the handler so that each request gets its own buffer, which is
	sent once the handler returns."""

	def run(environ: TEnviron, start_response: TStartResponse) -> Iterable[bytes]:
		response = ResponseBuffer()
		handler(environ, response)
		t = transport()
		response.send(t)
		start_response(t.statusLine, t.headers)
		return t.body

	return run


# EOF
