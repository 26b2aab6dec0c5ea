"""
DesignSync File Watcher Package.

Single-file change monitoring with debouncing.
Requires Python 3.11+.
"""

from watcher.file_watcher import DesignFileHandler, FileWatcher
from watcher.debouncer import Debouncer

__all__ = ["DesignFileHandler", "FileWatcher", "Debouncer"]
