"""
Switchyard logging sink.

What this module provides
- Logger: the sink every command writes to. It wraps one private standard-library
  logger (never propagated to the root logger) with:
  • a rich console destination (RichHandler on stderr),
  • an optional file destination (see Logger.redirect),
  • monotonically increasing error/warning counters,
  • a verbosity bitmask gating notes and success messages,
  • fire-and-forget observer notification.
- Verbosity: message categories the bitmask selects.
- Severity / LogMessage: what observers receive.

Thread-safety
- Counter reads/increments and writes to the destinations share one lock per
  sink, so the dispatcher's before/after snapshots of error_count are
  consistent even when handlers log from background threads.
- Observers are notified through a queue drained by a daemon thread. Delivery
  happens after the call that produced the message returns; nothing orders it
  against the dispatcher. flush() waits until the queue is drained.
"""
import datetime
import itertools
import logging
import queue
import threading
from enum import IntEnum, IntFlag
from typing import NamedTuple

from rich.console import Console
from rich.highlighter import Highlighter
from rich.logging import RichHandler
from rich.text import Text

from .utils import Unset, coalesce, program

SEPARATOR = "=" * 32

LAYOUT = "%(asctime)s | %(levelname)s | %(message)s"

TRACE = 5
logging.addLevelName(TRACE, "TRACE")


class Severity(IntEnum):
    """
    severity attached to every observed message.
    """
    NOTE = 0
    SUCCESS = 1
    WARNING = 2
    ERROR = 3


class Verbosity(IntFlag):
    """
    message categories selected by the sink's verbosity bitmask.

    - LEVEL1..LEVEL5: host-defined detail levels (LEVEL1 is the default for notes).
    - SUCCESS: success messages.
    - WARNINGS: reserved for hosts that gate their own warning chatter.
    - COMMAND_LINE_PROCESSING: dispatcher tracing (switches seen, timings, skips).
    """
    NONE = 0
    LEVEL1 = 1
    LEVEL2 = 2
    LEVEL3 = 4
    LEVEL4 = 8
    LEVEL5 = 16
    SUCCESS = 32
    WARNINGS = 64
    COMMAND_LINE_PROCESSING = 128
    ALL = 255


class LogMessage(NamedTuple):
    severity: Severity
    message: str
    timestamp: datetime.datetime


class _SuccessHighlighter(Highlighter):
    def highlight(self, text):
        text.stylize("green")


_success = _SuccessHighlighter()


class _ConsoleHandler(RichHandler):
    """
    RichHandler that prints a record's styled 'renderable' in place of its plain message.
    """

    def render_message(self, record, message):
        if isinstance(renderable := getattr(record, "renderable", None), Text):
            return renderable.copy()
        return super().render_message(record, message)

_sinks = itertools.count(1)


class Logger:
    """
    Thread-safe logging sink with counters, verbosity, and observers.

    Parameters
    - path: str | Unset
      When given, the sink also writes to this file (see redirect()).
    - verbosity: int | Verbosity
      Initial bitmask (0..255). Defaults to Verbosity.ALL.
    - console: rich.console.Console | Unset
      Console destination; a stderr console when Unset.

    Gating
    - note() and success() honour the verbosity bitmask.
    - warning(), error() and exception() are always written and always counted.
    - debug() and trace() are written at their standard levels; destinations
      only show INFO and above, so both are silent unless a host attaches its
      own handler. Neither is counted nor observed.

    Lifecycle
    - close() detaches every destination and stops observer delivery; any
      later call is ignored (not counted).
    """

    def __init__(self, path=Unset, /, verbosity=Verbosity.ALL, *, console=Unset):
        self._lock = threading.Lock()
        self._errors = 0
        self._warnings = 0
        self._closed = False
        self._verbosity = Verbosity.ALL
        self.verbosity = verbosity

        self._observers = []
        self._channel = queue.Queue()
        self._worker = None

        self._backend = logging.getLogger(f"switchyard.sink{next(_sinks)}")
        self._backend.setLevel(TRACE)
        self._backend.propagate = False

        self._console = _ConsoleHandler(
            level=logging.INFO,
            console=coalesce(console, None) or Console(stderr=True),
            show_path=False,
            markup=False,
        )
        self._backend.addHandler(self._console)
        self._file = None

        if path is not Unset:
            self.redirect(path)

    @property
    def verbosity(self):
        return self._verbosity

    @verbosity.setter
    def verbosity(self, value):
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError("verbosity must be an integer")
        if not 0 <= value <= Verbosity.ALL:
            raise ValueError(f"verbosity must be within [0, {int(Verbosity.ALL)}], got {value}")
        self._verbosity = Verbosity(value)

    @property
    def error_count(self):
        with self._lock:
            return self._errors

    @property
    def warning_count(self):
        with self._lock:
            return self._warnings

    @property
    def path(self):
        """
        the file destination, or None while the sink only writes to the console.
        """
        return self._file.baseFilename if self._file else None

    @property
    def closed(self):
        return self._closed

    def redirect(self, path, /):
        """
        write to 'path' from now on (in addition to the console).

        behavior
        - the previous file destination, if any, is closed and replaced.
        - a header (separator, date, program) is written to the new file.
        - the file is opened in append mode, utf-8 encoded.

        raises
        - TypeError / ValueError when path is not a non-empty string.
        - OSError when the file cannot be opened.
        """
        if not isinstance(path, str):
            raise TypeError("redirect() argument must be a string")
        if not (path := path.strip()):
            raise ValueError("redirect() argument cannot be empty")

        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter(LAYOUT))

        with self._lock:
            if self._closed:
                handler.close()
                return
            if self._file:
                self._backend.removeHandler(self._file)
                self._file.close()
            self._file = handler
            self._backend.addHandler(handler)
            for line in (SEPARATOR, f"Date: {datetime.datetime.now()}", f"Program: {program()}", SEPARATOR):
                handler.handle(self._backend.makeRecord(self._backend.name, logging.INFO, __file__, 0, line, None, None))

    def note(self, message, /, verbosity=Verbosity.LEVEL1):
        """
        log 'message' when every bit of 'verbosity' is enabled.

        a rich.text.Text keeps its styles on the console; the file destination
        and observers receive its plain text.
        """
        extra = None
        if isinstance(message, Text):
            message, extra = message.plain, {"renderable": message}
        with self._lock:
            if self._closed or (self._verbosity & verbosity) != verbosity:
                return
            self._backend.info(message, extra=extra)
        self._notify(Severity.NOTE, message)

    def success(self, message, /):
        with self._lock:
            if self._closed or not self._verbosity & Verbosity.SUCCESS:
                return
            self._backend.info(message, extra={"highlighter": _success})
        self._notify(Severity.SUCCESS, message)

    def warning(self, message, /):
        with self._lock:
            if self._closed:
                return
            self._warnings += 1
            self._backend.warning(message)
        self._notify(Severity.WARNING, message)

    def error(self, message, /):
        with self._lock:
            if self._closed:
                return
            self._errors += 1
            self._backend.error(message)
        self._notify(Severity.ERROR, message)

    def exception(self, exception, message, /):
        """
        log 'message' as an error with the traceback of 'exception' attached.
        """
        with self._lock:
            if self._closed:
                return
            self._errors += 1
            self._backend.error(message, exc_info=(type(exception), exception, exception.__traceback__))
        self._notify(Severity.ERROR, message)

    def debug(self, message, /):
        with self._lock:
            if self._closed:
                return
            self._backend.debug(message)

    def trace(self, message, /):
        with self._lock:
            if self._closed:
                return
            self._backend.log(TRACE, message)

    def subscribe(self, observer, /):
        """
        register a callable receiving every LogMessage (from a worker thread).
        """
        if not callable(observer):
            raise TypeError("subscribe() argument must be callable")
        with self._lock:
            self._observers.append(observer)

    def unsubscribe(self, observer, /):
        with self._lock:
            self._observers.remove(observer)

    def _notify(self, severity, message):
        with self._lock:
            if not self._observers or self._closed:
                return
            if self._worker is None:
                self._worker = threading.Thread(target=self._deliver, name=f"{self._backend.name}-observers", daemon=True)
                self._worker.start()
            self._channel.put(LogMessage(severity, message, datetime.datetime.now()))

    def _deliver(self):
        while (message := self._channel.get()) is not None:
            with self._lock:
                observers = tuple(self._observers)
            for observer in observers:
                try:
                    observer(message)
                except Exception:
                    # an observer failure is not a command error: reported, never counted
                    with self._lock:
                        if not self._closed:
                            self._backend.warning("observer %r failed", observer, exc_info=True)
            self._channel.task_done()
        self._channel.task_done()

    def flush(self):
        """
        wait until observers received every pending message, then flush destinations.
        """
        if self._worker is not None:
            self._channel.join()
        with self._lock:
            for handler in self._backend.handlers:
                handler.flush()

    def close(self):
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for handler in tuple(self._backend.handlers):
                self._backend.removeHandler(handler)
                handler.close()
            self._file = None
            worker = self._worker
        if worker is not None:
            self._channel.put(None)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __repr__(self):
        return f"logger(verbosity={self.verbosity!r}, errors={self.error_count}, warnings={self.warning_count}, path={self.path!r})"


__all__ = (
    "SEPARATOR",
    "Severity",
    "Verbosity",
    "LogMessage",
    "Logger",
)
