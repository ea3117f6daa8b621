import os
import sys
import time
from contextvars import ContextVar
from enum import Enum
from typing import Any, ClassVar, NamedTuple, TextIO, TypeAlias

ERR: TextIO = sys.stderr

# SEE: https://no-color.org/
NO_COLOR: bool = "NO_COLOR" in os.environ
FORCE_COLOR: bool = "FORCE_COLOR" in os.environ
COLOR: bool = FORCE_COLOR or NO_COLOR is False

LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="buffered")

TContext: TypeAlias = dict[str, Any]


class Term:
	BOLD: ClassVar[str] = "" if NO_COLOR else "\033[1m"
	RESET: ClassVar[str] = "" if NO_COLOR else "\033[0m"

	@staticmethod
	def Color(color: int) -> str:
		return f"\033[0;38;5;{color}m" if COLOR else ""


class LogType(Enum):
	Message = 0
	Event = 20


class LogLevel(Enum):
	Info = 10
	Warning = 30
	Error = 40


LOG_LEVEL_COLOR = {
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
}


class LogEntry(NamedTuple):
	origin: str
	time: float
	type: LogType = LogType.Message
	level: LogLevel = LogLevel.Info
	message: str | None = None
	name: str | None = None
	value: Any = None
	context: TContext | None = None


def setErrorStream(stream: TextIO) -> TextIO:
	"""Redirects log output, returning the previous stream."""
	global ERR
	previous = ERR
	ERR = stream
	return previous


def formatData(value: Any) -> str:
	if value is None or value == () or value == [] or value == {}:
		return "◌"
	elif isinstance(value, dict):
		return " ".join(
			f"{Term.BOLD}{k}{Term.RESET}={formatData(v)}" for k, v in value.items()
		)
	elif isinstance(value, list) or isinstance(value, tuple):
		return ",".join(formatData(v) for v in value)
	elif isinstance(value, str):
		return repr(value) if " " in value else value
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	else:
		return str(value)


def send(entry: LogEntry) -> LogEntry:
	clr: str = Term.Color(LOG_LEVEL_COLOR[entry.level])
	if entry.type == LogType.Event:
		ERR.write(
			f"{clr}{Term.BOLD}[{entry.origin}] {entry.name}{Term.RESET} {formatData(entry.value)} {formatData(entry.context)}{Term.RESET}\n"
		)
	else:
		ERR.write(
			f"{clr}{Term.BOLD}[{entry.origin}]{Term.RESET} {entry.message} {formatData(entry.context)}{Term.RESET}\n"
		)
	ERR.flush()
	return entry


def entry(
	*,
	origin: str | None = None,
	type: LogType = LogType.Message,
	level: LogLevel = LogLevel.Info,
	message: str | None = None,
	name: str | None = None,
	value: Any = None,
	context: TContext,
) -> LogEntry:
	return LogEntry(
		origin=origin or LogOrigin.get(),
		time=time.time(),
		type=type,
		level=level,
		message=message,
		name=name,
		value=value,
		context=context,
	)


def info(message: str, *, origin: str | None = None, **context: Any) -> LogEntry:
	return send(entry(message=message, origin=origin, context=context))


def warning(message: str, *, origin: str | None = None, **context: Any) -> LogEntry:
	return send(
		entry(message=message, level=LogLevel.Warning, origin=origin, context=context)
	)


def error(
	message: str,
	code: int | str | None,
	*,
	origin: str | None = None,
	**context: Any,
) -> LogEntry:
	return send(
		entry(
			message=message,
			value=code,
			level=LogLevel.Error,
			origin=origin,
			context=context,
		)
	)


def event(
	event: str,
	value: Any = None,
	*,
	origin: str | None = None,
	**context: Any,
) -> LogEntry:
	return send(
		entry(
			name=event,
			value=value,
			type=LogType.Event,
			origin=origin,
			context=context,
		)
	)


# EOF
