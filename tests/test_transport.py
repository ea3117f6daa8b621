from datetime import datetime, timezone
from io import BytesIO

from buffered.transport import (
	HeadersAlreadySent,
	HTTPTransport,
	WSGITransport,
	cookie,
	headername,
	timestamp,
)

Y2100: int = 4102444800


def raises(exception: type[Exception], f, *args, **kwargs) -> bool:
	try:
		f(*args, **kwargs)
	except exception:
		return True
	return False


def test_headername():
	assert headername("content-type") == "Content-Type"
	assert headername("X-FORWARDED-FOR") == "X-Forwarded-For"


def test_timestamp():
	assert timestamp(Y2100) == "Fri, 01 Jan 2100 00:00:00 GMT"
	assert timestamp(1) == "Thu, 01 Jan 1970 00:00:01 GMT"


def test_cookie_encoding():
	assert cookie("a", "x y&z") == "a=x+y%26z"
	assert cookie("a", "x%20y", raw=True) == "a=x%20y"
	assert cookie("sid", "1", path="/", domain="example.com") == (
		"sid=1; path=/; domain=example.com"
	)
	assert cookie("sid", "1", secure=True, httpOnly=True, sameSite="Strict") == (
		"sid=1; secure; HttpOnly; SameSite=Strict"
	)


def test_cookie_expires():
	value = cookie("a", "1", Y2100)
	assert value.startswith("a=1; expires=Fri, 01 Jan 2100 00:00:00 GMT; Max-Age=")
	assert int(value.rsplit("=", 1)[1]) > 0
	when = datetime(2100, 1, 1, tzinfo=timezone.utc)
	assert cookie("a", "1", when).split("; ")[1] == (
		"expires=Fri, 01 Jan 2100 00:00:00 GMT"
	)
	# Expired in the past still gets a zero max age
	assert cookie("a", "1", 1).endswith("Max-Age=0")


def test_cookie_deletion():
	assert cookie("a", "", path="/") == (
		"a=deleted; expires=Thu, 01 Jan 1970 00:00:01 GMT; Max-Age=0; path=/"
	)
	assert cookie("a", None).startswith("a=deleted")


def test_cookie_invalid():
	assert raises(ValueError, cookie, "", "1")
	assert raises(ValueError, cookie, "a=b", "1")
	assert raises(ValueError, cookie, "a b", "1")
	assert raises(ValueError, cookie, "a", "1;2", raw=True)
	assert cookie("a", "1;2") == "a=1%3B2"


def test_http_head_and_body():
	stream = BytesIO()
	t = HTTPTransport(stream)
	t.setHeader("content-type: text/plain")
	t.setCookie("a", "1", 0, "/")
	t.setRawCookie("b", "x%20y")
	assert t.write("Hello") == 5
	assert stream.getvalue() == (
		b"HTTP/1.1 200 OK\r\n"
		b"Content-Type: text/plain\r\n"
		b"Set-Cookie: a=1; path=/\r\n"
		b"Set-Cookie: b=x%20y\r\n"
		b"Content-Length: 5\r\n"
		b"\r\n"
		b"Hello"
	)


def test_http_empty_body():
	stream = BytesIO()
	t = HTTPTransport(stream)
	assert t.write("") == 0
	assert stream.getvalue() == b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\n\r\n"


def test_status_line():
	t = WSGITransport()
	t.setHeader("HTTP/1.1 404 Not Found")
	assert t.statusLine == "404 Not Found"
	t.setHeader("HTTP/1.0 418")
	assert t.statusLine == "418 I'm a Teapot"
	t.setHeader("X-A: 1", True, 201)
	assert t.status == 201
	assert raises(ValueError, t.setHeader, "HTTP/1.1 abc")


def test_header_replace():
	t = WSGITransport()
	t.setHeader("X-A: 1")
	t.setHeader("X-A: 2")
	assert t.headers == [("X-A", "2")]
	t.setHeader("x-a: 3", False)
	assert t.headers == [("X-A", "2"), ("X-A", "3")]
	assert t.getHeader("X-A") == "3"
	assert t.getHeader("X-B") is None


def test_location_redirects():
	t = WSGITransport()
	t.setHeader("Location: /next")
	assert t.status == 302
	t = WSGITransport()
	t.setHeader("HTTP/1.1 301 Moved Permanently")
	t.setHeader("Location: /next")
	assert t.status == 301
	t = WSGITransport()
	t.setHeader("Location: /next", True, 303)
	assert t.status == 303


def test_invalid_headers():
	t = WSGITransport()
	assert raises(ValueError, t.setHeader, "no separator")
	assert raises(ValueError, t.setHeader, ": empty")
	assert raises(ValueError, t.setHeader, "X-A: 1\r\nX-B: 2")


def test_headers_after_write():
	t = WSGITransport()
	t.setHeader("X-A: 1")
	t.write(b"body")
	assert raises(HeadersAlreadySent, t.setHeader, "X-B: 2")
	assert raises(HeadersAlreadySent, t.setCookie, "a", "1")
	assert raises(HeadersAlreadySent, t.setRawCookie, "a", "1")
	t.write("more")
	assert t.body == [b"body", b"more"]
	assert t.headers == [("X-A", "1")]


if __name__ == "__main__":
	for name, test in list(globals().items()):
		if name.startswith("test_") and callable(test):
			test()
	print("EOK")

# EOF
