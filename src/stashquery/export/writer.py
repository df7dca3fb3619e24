import logging
from pathlib import Path
from typing import Iterable, Union

from stashquery.core.exceptions import SinkWriteError
from stashquery.settings import FLUSH_SIZE

logger = logging.getLogger(__name__)


class BufferedWriter:
    """Buffer output lines and append them to a file in fixed-size batches.

    The file is truncated when the writer is created. Once every line has been
    written, ``finish()`` flushes the remainder and rewrites the file sorted.
    """

    def __init__(self, path: Union[str, Path], flush_size: int = FLUSH_SIZE):
        """
        Initialize the writer and truncate the output file.

        Args:
            path: Output file
            flush_size: Number of buffered lines that triggers a write

        Raises:
            SinkWriteError: If the file cannot be created or truncated
        """
        if flush_size < 1:
            raise ValueError(f"flush_size must be positive, got {flush_size}")

        self.path = Path(path)
        self.flush_size = flush_size
        self.buffer: list[str] = []
        self.lines_written = 0

        self._write_text("w", "")

    def _write_text(self, mode: str, text: str) -> None:
        # Closing the file is where buffered data reaches the disk.
        try:
            with open(self.path, mode, encoding="utf-8", newline="\n") as f:
                f.write(text)
        except OSError as e:
            raise SinkWriteError(
                f"Could not write to output file ({self.path}): {e}", path=self.path
            ) from e

    def _read_text(self) -> str:
        try:
            with open(self.path, "r", encoding="utf-8", newline="\n") as f:
                return f.read()
        except OSError as e:
            raise SinkWriteError(
                f"Could not read output file ({self.path}): {e}", path=self.path
            ) from e

    def write(self, line: str) -> None:
        self.buffer.append(line)
        if len(self.buffer) % self.flush_size == 0:
            self.flush()

    def write_many(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.write(line)

    def flush(self) -> None:
        """Append the buffered lines to the file and clear the buffer."""
        if not self.buffer:
            return

        self._write_text("a", "\n".join(self.buffer) + "\n")

        self.lines_written += len(self.buffer)
        logger.debug(
            f"Flushed {len(self.buffer)} lines to {self.path}",
            extra={"batch_size": len(self.buffer), "lines_written": self.lines_written},
        )
        self.buffer = []

    def sort(self) -> None:
        """Rewrite the file with its lines in ascending order.

        The whole file is read into memory.
        """
        lines = self._read_text().split("\n")
        if lines[-1] == "":
            lines.pop()

        lines.sort()

        self._write_text("w", "\n".join(lines) + "\n" if lines else "")
        logger.debug(f"Sorted {len(lines)} lines in {self.path}")

    def finish(self) -> Path:
        self.flush()
        self.sort()
        return self.path
