"""
Screenshot path generation.

Files are named screenshot-<epoch-millis>.png. A name is reserved by
creating the file exclusively, so two captures in the same millisecond (in
this process or another worker process) never share a path.
"""

import os
import threading
import time
from pathlib import Path
from typing import Callable, Union


class ScreenshotPathFactory:
    def __init__(
        self,
        directory: Union[str, Path] = "screenshots",
        clock: Callable[[], float] = time.time,
    ):
        self.directory = Path(directory)
        self.clock = clock
        self._last_millis = 0
        self._lock = threading.Lock()

    def resolve_directory(self) -> Path:
        # Relative directories follow the worker's working directory at capture time
        if self.directory.is_absolute():
            return self.directory
        return Path.cwd() / self.directory

    def reserve(self) -> Path:
        """Create the screenshots directory if needed and claim a unique path"""
        directory = self.resolve_directory()
        directory.mkdir(parents=True, exist_ok=True)

        with self._lock:
            millis = max(int(self.clock() * 1000), self._last_millis + 1)
            while True:
                path = directory / f"screenshot-{millis}.png"
                try:
                    fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
                except FileExistsError:
                    millis += 1
                    continue
                os.close(fd)
                break
            self._last_millis = millis

        return path
