"""
This file contains some general utilities
"""

import os
import threading
from datetime import datetime, timedelta
from typing import Optional


class TimeStamper:
    """
    Thread-safe time stamper to generate unique timestamps.
    """

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.prev: Optional[datetime] = None

    def get_timestamp(self) -> datetime:
        """
        Generates a unique timestamp.

        Returns:
            A unique timestamp as a datetime object.
        """
        with self.lock:
            ts = datetime.now()
            if self.prev is not None and ts <= self.prev:
                ts = self.prev + timedelta(microseconds=1)
            self.prev = ts
        return ts


def safe_remove(filename: Optional[str]) -> None:
    """
    Safely removes a file if it exists.

    Args:
        filename: Path to the file.
    """
    if filename and os.path.isfile(filename):
        try:
            os.remove(filename)
        except OSError as e:
            print(f"Error removing file {filename}: {e}")


def file_ok(file: Optional[str]) -> bool:
    """
    Checks if a file exists and is not empty.

    Args:
        file: Path to the file.

    Returns:
        True if the file exists and is not empty, otherwise False.
    """
    return file is not None and os.path.isfile(file) and os.path.getsize(file) > 0
