import tempfile
from io import StringIO
from pathlib import Path

from buffered.utils import logging
from buffered.view import Capture, PythonView, TextView, render, resolve


def write(directory: str, name: str, source: str) -> Path:
	path = Path(directory) / name
	path.write_text(source, encoding="utf8")
	return path


def test_capture():
	sink = Capture()
	assert sink.write("a") == 1
	assert sink.write(b"bc") == 2
	assert sink.write(3) == 1
	assert sink.write(None) == 0
	assert sink.getvalue() == "abc3"
	assert len(sink) == 4


def test_resolve():
	with tempfile.TemporaryDirectory() as d:
		write(d, "page.py", "")
		write(d, "page.html", "")
		assert isinstance(resolve("page.py", d), PythonView)
		assert isinstance(resolve("page.html", d), TextView)
		assert isinstance(resolve(Path(d) / "page.py"), PythonView)
		try:
			resolve("missing.py", d)
		except FileNotFoundError:
			pass
		else:
			raise AssertionError("Missing views should not resolve")


def test_python_view_output():
	with tempfile.TemporaryDirectory() as d:
		write(
			d,
			"page.py",
			"echo('<h1>', escape(title), '</h1>')\n"
			"out.write('\\n')\n"
			"for item in items:\n"
			"\tprint(item, end=';')\n",
		)
		assert render("page.py", {"title": "A & B", "items": [1, 2]}, d) == (
			"<h1>A &amp; B</h1>\n1;2;"
		)


def test_python_view_verbatim():
	with tempfile.TemporaryDirectory() as d:
		write(d, "raw.py", "echo('  <b>\\r\\n\\t</b>  ')\n")
		assert render("raw.py", {}, d) == "  <b>\r\n\t</b>  "


def test_python_view_isolation():
	with tempfile.TemporaryDirectory() as d:
		write(d, "mutate.py", "x = 'changed'\nglobal_name = 1\necho(x)\n")
		vars = {"x": "original"}
		assert render("mutate.py", vars, d) == "changed"
		assert vars == {"x": "original"}


def test_python_view_helper_collision():
	stream = StringIO()
	previous = logging.setErrorStream(stream)
	try:
		with tempfile.TemporaryDirectory() as d:
			write(d, "echo.py", "echo('ok')\n")
			assert render("echo.py", {"echo": "value"}, d) == "ok"
	finally:
		logging.setErrorStream(previous)
	assert "View variables shadowed by view helpers" in stream.getvalue()


def test_python_view_error_propagates():
	with tempfile.TemporaryDirectory() as d:
		write(d, "error.py", "echo('partial')\n1 / 0\n")
		try:
			render("error.py", {}, d)
		except ZeroDivisionError:
			pass
		else:
			raise AssertionError("View errors should propagate")


def test_text_view():
	with tempfile.TemporaryDirectory() as d:
		write(d, "mail.txt", "Hello, ${name}! You have ${count} messages.")
		assert render("mail.txt", {"name": "Ada", "count": 3}, d) == (
			"Hello, Ada! You have 3 messages."
		)
		try:
			render("mail.txt", {"name": "Ada"}, d)
		except KeyError:
			pass
		else:
			raise AssertionError("Missing bindings should fail")


def test_text_view_keeps_line_endings():
	with tempfile.TemporaryDirectory() as d:
		(Path(d) / "crlf.txt").write_bytes(b"Line1\r\nLine2\rLine3\n${name}\r\n")
		assert render("crlf.txt", {"name": "Ada"}, d) == (
			"Line1\r\nLine2\rLine3\nAda\r\n"
		)


def test_text_view_static_dollars():
	with tempfile.TemporaryDirectory() as d:
		source = "<p>Only $5.00 for $user</p><script>$('#x').hide(); $$</script>$"
		write(d, "price.html", source)
		assert render("price.html", {}, d) == source
		write(d, "mixed.html", "<p>$5.00 for ${user}</p>")
		assert render("mixed.html", {"user": "Ada"}, d) == "<p>$5.00 for Ada</p>"


if __name__ == "__main__":
	for name, test in list(globals().items()):
		if name.startswith("test_") and callable(test):
			test()
	print("EOK")

# EOF
