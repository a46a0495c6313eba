"""
Cancellable line reading for the interactive loop.

A blocking readline() cannot be interrupted, so LineReader moves it to a dedicated
daemon thread and hands lines over through a queue. The consumer waits on the queue
in short slices and checks, between slices, a cancellation event and an optional
stop predicate; whichever resolves first wins:

- a line is available          → readline() returns it (without the line ending);
- the event is set / stop seen → readline() returns None and leaves any late line
                                 in the queue for the next call;
- the stream is exhausted      → readline() raises EOFError (and keeps raising it).

Reads are demand-driven: the thread reads one line per outstanding request, so
nothing is pulled from the stream before a caller asks for it.
"""
import logging
import queue
import threading

logger = logging.getLogger(__name__)

_EOF = object()


class LineReader:
    """
    Read lines from a text stream on a background thread.

    Parameters
    - stream: object with a readline() method (sys.stdin, io.StringIO, …).
    - interval: seconds between cancellation checks while waiting.
    """

    def __init__(self, stream, /, *, interval=0.05):
        if not callable(getattr(stream, "readline", None)):
            raise TypeError("LineReader() argument must be a readable text stream")
        if not isinstance(interval, int | float) or interval <= 0:
            raise ValueError("LineReader() 'interval' must be a positive number")
        self._stream = stream
        self._interval = interval
        self._lines = queue.Queue()
        self._requests = threading.Semaphore(0)
        self._lock = threading.Lock()
        self._thread = None
        self._pending = False
        self._exhausted = False

    @property
    def stream(self):
        return self._stream

    @property
    def exhausted(self):
        return self._exhausted

    def _pump(self):
        while True:
            self._requests.acquire()
            try:
                line = self._stream.readline()
            except Exception as exception:
                # re-raised on the consumer side
                self._lines.put(exception)
                return
            if not line:
                self._lines.put(_EOF)
                return
            self._lines.put(line.rstrip("\r\n"))

    def _request(self):
        with self._lock:
            if self._thread is None:
                self._thread = threading.Thread(target=self._pump, name="helmsman-reader", daemon=True)
                self._thread.start()
            if not self._pending:
                self._pending = True
                self._requests.release()

    def readline(self, cancel=None, /, *, stopped=None):
        """
        Wait for the next line, a cancellation, or a stop.

        Parameters
        - cancel: threading.Event | None
          Returns None as soon as the event is set.
        - stopped: Callable[[], bool] | None
          Returns None as soon as it answers True.

        Returns
        - str: the line without its line ending, or None when cancelled/stopped.

        Raises
        - EOFError: the stream is exhausted.
        - any exception raised by the stream's readline().
        """
        if self._exhausted:
            raise EOFError("end of input stream")
        self._request()

        while True:
            if cancel is not None and cancel.is_set():
                logger.debug("line read cancelled")
                return None
            if stopped is not None and stopped():
                logger.debug("line read interrupted by a stop request")
                return None
            try:
                item = self._lines.get(timeout=self._interval)
            except queue.Empty:
                continue

            self._pending = False
            if item is _EOF:
                self._exhausted = True
                raise EOFError("end of input stream")
            if isinstance(item, BaseException):
                self._exhausted = True
                raise item
            return item

    def __repr__(self):
        return "line-reader(stream=%r, exhausted=%r)" % (self._stream, self._exhausted)


__all__ = (
    "LineReader",
)
