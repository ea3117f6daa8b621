from pathlib import Path
from wsgiref.simple_server import make_server

from buffered.bridge.wsgi import application
from buffered.response import ResponseBuffer
from buffered.utils.logging import info

VIEWS = Path(__file__).parent / "views"


def hello(environ: dict, response: ResponseBuffer) -> None:
	name = environ.get("QUERY_STRING") or "World"
	if environ["PATH_INFO"] == "/bye":
		response.setView(VIEWS / "goodbye.txt")
		response.setVars({"name": name})
		response.addCookie("visited")
		return None
	response.setView(VIEWS / "hello.py")
	response.setVars({"name": name, "items": environ["PATH_INFO"].split("/")})
	response.addHeader("Content-Type: text/html; charset=utf-8")
	response.addCookie("visited", "yes", path="/")
	response.setPostSendHook(
		lambda r: info("Sent response", View=str(r.getView()), Name=name)
	)


if __name__ == "__main__":
	with make_server("127.0.0.1", 8000, application(hello)) as server:
		info("Serving on http://127.0.0.1:8000")
		server.serve_forever()
# EOF
