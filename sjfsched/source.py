#!/usr/bin/env python3
"""
Command sources feeding the process manager.

A source hands out fixed-size command records as token lists, without
ever blocking the control loop.
"""

import queue
import sys
import threading
from typing import List, Optional, TextIO

from decologr import Logger as log

MAX_RECORD_BYTES = 79
MAX_TOKENS = 9
DEFAULT_PROMPT = "\x1b[34msjfsched\x1b[0m$ "


def truncate_record(line: str) -> str:
    """
    Cut a raw input line down to one command record.

    :param line: Line as read, possibly with a trailing newline
    :return: Record of at most MAX_RECORD_BYTES UTF-8 bytes, without newline
    """
    record = line.split("\n", 1)[0].rstrip("\r")
    encoded = record.encode("utf-8")
    if len(encoded) <= MAX_RECORD_BYTES:
        return record
    return encoded[:MAX_RECORD_BYTES].decode("utf-8", errors="ignore")


def tokenize(record: str) -> List[str]:
    """Split a record on whitespace, keeping at most MAX_TOKENS tokens."""
    return record.split()[:MAX_TOKENS]


class QueueCommandSource:
    """In-memory command source; ``submit()`` may be called from any thread."""

    def __init__(self):
        self.records: "queue.Queue[str]" = queue.Queue()

    def submit(self, line: str):
        """Queue a raw command line."""
        self.records.put(truncate_record(line))

    def poll(self) -> Optional[List[str]]:
        """
        Take the next pending command without blocking.

        :return: Token list, or None if nothing is pending
        """
        try:
            record = self.records.get_nowait()
        except queue.Empty:
            return None
        return tokenize(record)


class ConsoleCommandSource(QueueCommandSource):
    """
    Reads command lines from a text stream on a background thread.

    End of input is turned into an ``exit`` command.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        prompt: str = DEFAULT_PROMPT,
        out: Optional[TextIO] = None,
    ):
        """
        Initialize the console source.

        :param stream: Input stream (default: stdin)
        :param prompt: Prompt shown before each line on interactive streams
        :param out: Stream the prompt is written to (default: stdout)
        """
        super().__init__()
        self.stream = stream or sys.stdin
        self.prompt = prompt
        self.out = out or sys.stdout
        self.reader_thread: Optional[threading.Thread] = None

    def start(self):
        """Start the reader thread."""
        if self.reader_thread is not None:
            log.warning("Console reader already running")
            return
        self.reader_thread = threading.Thread(
            target=self._read_loop, daemon=True, name="ConsoleCommandSource"
        )
        self.reader_thread.start()

    def _interactive(self) -> bool:
        try:
            return self.stream.isatty()
        except (AttributeError, ValueError):
            return False

    def _read_loop(self):
        interactive = self._interactive()
        while True:
            if interactive and self.prompt:
                self.out.write(self.prompt)
                self.out.flush()
            line = self.stream.readline()
            if not line:
                log.debug("End of command input")
                self.submit("exit")
                return
            self.submit(line)
            if tokenize(truncate_record(line))[:1] == ["exit"]:
                return
