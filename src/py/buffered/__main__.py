import argparse
import sys
from typing import BinaryIO

from .response import ResponseBuffer
from .transport import HTTPTransport, WSGITransport
from .utils.logging import error


def parseVars(items: list[str] | None) -> dict[str, str]:
	res: dict[str, str] = {}
	for item in items or ():
		name, sep, value = item.partition("=")
		if not sep or not name:
			raise ValueError(f"Expected NAME=VALUE, got: {item!r}")
		res[name] = value
	return res


def main(args: list[str], stream: BinaryIO | None = None) -> int:
	parser = argparse.ArgumentParser(
		prog="buffered",
		description="Renders a view through a response buffer",
		formatter_class=argparse.ArgumentDefaultsHelpFormatter,
	)
	parser.add_argument(
		"-v",
		"--var",
		action="append",
		dest="vars",
		help="A NAME=VALUE variable given to the view",
	)
	parser.add_argument(
		"-H",
		"--header",
		action="append",
		dest="headers",
		help="A header line to add to the response",
	)
	parser.add_argument(
		"--head",
		action="store_true",
		help="Outputs the HTTP head before the body",
	)
	parser.add_argument("view", metavar="VIEW", help="Path to the view")
	options = parser.parse_args(args=args)
	out: BinaryIO = stream or sys.stdout.buffer
	try:
		bindings = parseVars(options.vars)
	except ValueError as e:
		parser.error(str(e))

	response = ResponseBuffer()
	response.setView(options.view)
	response.setVars(bindings)
	for header in options.headers or ():
		response.addHeader(header)
	try:
		if options.head:
			response.send(HTTPTransport(out))
		else:
			transport = WSGITransport()
			response.send(transport)
			for chunk in transport.body:
				out.write(chunk)
	except FileNotFoundError as e:
		error("Could not render view", "ENOENT", View=options.view, Reason=str(e))
		return 1
	out.flush()
	return 0


def run() -> None:
	sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
	run()
# EOF
