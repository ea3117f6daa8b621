import builtins
from abc import ABC, abstractmethod
from html import escape
from pathlib import Path
from string import Template
from typing import Any, Callable, Mapping

from . import config
from .utils.io import DEFAULT_ENCODING, asWritable
from .utils.logging import warning

# --
# ## Views
#
# A view is rendered with an explicit binding namespace and writes its
# output to an explicit `Capture` sink. Nothing the view binds is visible
# to the caller once rendering is done.


class Capture:
	"""An accumulating text sink that views write to."""

	__slots__ = ["chunks"]

	def __init__(self) -> None:
		self.chunks: list[str] = []

	def write(self, value: Any) -> int:
		text = asWritable(value)
		if text:
			self.chunks.append(text)
		return len(text)

	def flush(self) -> None:
		pass

	def getvalue(self) -> str:
		return "".join(self.chunks)

	def __len__(self) -> int:
		return sum(len(_) for _ in self.chunks)


class View(ABC):
	__slots__ = ["path"]

	def __init__(self, path: Path) -> None:
		self.path: Path = path

	@abstractmethod
	def render(self, vars: Mapping[str, Any], sink: Capture) -> None: ...

	def __str__(self) -> str:
		return f"{self.__class__.__name__}({self.path})"


class PythonView(View):
	"""Executes a Python source file with the bindings as its globals. The
	view can write with `echo(...)`, `out.write(...)` or `print(...)`."""

	HELPERS: tuple[str, ...] = ("echo", "out", "escape", "print")

	def namespace(self, vars: Mapping[str, Any], sink: Capture) -> dict[str, Any]:
		scope: dict[str, Any] = dict(vars)
		collisions = [_ for _ in self.HELPERS if _ in scope]
		if collisions:
			warning(
				"View variables shadowed by view helpers",
				View=str(self.path),
				Names=collisions,
			)

		def echo(*values: Any) -> None:
			for _ in values:
				sink.write(_)

		def redirected(*args: Any, **kwargs: Any) -> None:
			kwargs["file"] = sink
			builtins.print(*args, **kwargs)

		scope.update(
			{
				"__name__": "__view__",
				"__file__": str(self.path),
				"__builtins__": builtins,
				"echo": echo,
				"out": sink,
				"escape": escape,
				"print": redirected,
			}
		)
		return scope

	def render(self, vars: Mapping[str, Any], sink: Capture) -> None:
		source = self.path.read_text(encoding=DEFAULT_ENCODING)
		code = compile(source, str(self.path), "exec")
		exec(code, self.namespace(vars, sink))  # nosec: B102


class Placeholders(Template):
	"""Only `${name}` is a placeholder, any other `$` is kept as-is."""

	pattern = r"""
	\$(?:
		(?P<escaped>(?!))|
		(?P<named>(?!))|
		{(?P<braced>[_a-z][_a-z0-9]*)}|
		(?P<invalid>(?!))
	)
	"""


class TextView(View):
	"""Substitutes `${name}` placeholders in a text file, the rest of the
	file being output byte for byte."""

	def render(self, vars: Mapping[str, Any], sink: Capture) -> None:
		source = self.path.read_bytes().decode(DEFAULT_ENCODING)
		sink.write(Placeholders(source).substitute(vars))


VIEW_TYPES: dict[str, Callable[[Path], View]] = {
	".py": PythonView,
}


def resolve(path: str | Path, root: str | Path | None = None) -> View:
	"""Locates the view at the given path, relative paths being resolved
	against `root` (defaults to `config.VIEW_ROOT`)."""
	p = Path(path)
	if not p.is_absolute():
		p = Path(config.VIEW_ROOT if root is None else root) / p
	if not p.is_file():
		raise FileNotFoundError(f"View not found: {p}")
	return VIEW_TYPES.get(p.suffix, TextView)(p)


def render(
	path: str | Path, vars: Mapping[str, Any], root: str | Path | None = None
) -> str:
	sink = Capture()
	resolve(path, root).render(vars, sink)
	return sink.getvalue()


# EOF
