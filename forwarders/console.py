import logging
import sys
from typing import Callable, Optional, TextIO, Union

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[Exception], int], None]


class ConsoleForwarder:
    """Writes each mapped beacon to a text stream, stdout by default."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def send(self, data: Union[bytes, str], separator: str, callback: Callback) -> None:
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        stream = self.stream or sys.stdout

        try:
            stream.write(text + separator)
            stream.flush()
        except (OSError, ValueError) as e:
            logger.error(f"Failed to forward beacon: {e}")
            callback(e, 0)
            return

        callback(None, len(text.encode("utf-8")))


def initialise(options=None) -> ConsoleForwarder:
    return ConsoleForwarder()
