# SPDX-License-Identifier: BSD-2-Clause

import logging
import shlex
import subprocess
import threading
import time

from ipsetctl.errors import CommandCancelledError, CommandError, CommandTimeoutError, classify_error


class CommandRunner:
    def __init__(self, binary_path: str, timeout: float | None = None,
                 cancel_event: threading.Event | None = None, poll_interval: float = 0.1):
        self.binary_path = binary_path
        self.timeout = timeout
        self.cancel_event = cancel_event
        self.poll_interval = poll_interval

    def run(self, *args: str, capture_output: bool = False) -> bytes:
        argv = [self.binary_path, *args]
        logging.debug(f"Running {shlex.join(argv)}")

        if self.cancel_event is not None and self.cancel_event.is_set():
            raise CommandCancelledError(argv)

        try:
            process = subprocess.Popen(argv,
                                       stdin=subprocess.DEVNULL,
                                       stdout=subprocess.PIPE if capture_output else subprocess.DEVNULL,
                                       stderr=subprocess.PIPE)
        except OSError as e:
            raise CommandError(argv, -1, str(e)) from e

        with process:
            stdout, stderr = self._communicate(argv, process)

        if process.returncode != 0:
            raise classify_error(argv, process.returncode, stderr.decode(errors='replace'))

        return stdout or b''

    def _communicate(self, argv: list[str], process: subprocess.Popen) -> tuple[bytes | None, bytes]:
        deadline = None if self.timeout is None else time.monotonic() + self.timeout

        while True:
            wait = self.poll_interval if self.cancel_event is not None else None
            if deadline is not None:
                remaining = max(deadline - time.monotonic(), 0)
                wait = remaining if wait is None else min(wait, remaining)

            try:
                return process.communicate(timeout=wait)
            except subprocess.TimeoutExpired:
                if self.cancel_event is not None and self.cancel_event.is_set():
                    self._kill(process)
                    raise CommandCancelledError(argv)
                if deadline is not None and time.monotonic() >= deadline:
                    self._kill(process)
                    raise CommandTimeoutError(argv, self.timeout)

    @staticmethod
    def _kill(process: subprocess.Popen) -> None:
        process.kill()
        process.communicate()
