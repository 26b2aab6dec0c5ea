"""
DesignSync Document Loader.

Reads the watched design file into a JSON payload.
Requires Python 3.11+.
"""

import json
from pathlib import Path
from typing import Any

from sync.exceptions import LoadError
from utils.logger import LoggerMixin


class DocumentLoader(LoggerMixin):
    """
    Loads the current contents of the design file.

    No retries: a half-written file fails to parse and the next settle
    gets a fresh read.
    """

    def __init__(self, path: Path, encoding: str = "utf-8") -> None:
        self._path = path
        self._encoding = encoding

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Any]:
        """
        Read and parse the file.

        Returns:
            The parsed JSON object

        Raises:
            LoadError: File unreadable, not valid JSON, or not a JSON object
        """
        try:
            content = self._path.read_text(encoding=self._encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(self._path, f"cannot read file: {e}") from e

        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            raise LoadError(self._path, f"invalid JSON at line {e.lineno} column {e.colno}: {e.msg}") from e
        except RecursionError as e:
            raise LoadError(self._path, "invalid JSON: nesting too deep") from e

        if not isinstance(payload, dict):
            raise LoadError(self._path, f"expected a JSON object, got {type(payload).__name__}")

        self.log.debug("document_loaded", path=str(self._path), keys=len(payload))
        return payload
