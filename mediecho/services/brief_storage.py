"""Filesystem storage for rendered brief PDFs."""

import logging
import os
import time
from typing import Optional

logger = logging.getLogger(__name__)


class BriefStorage:
    def __init__(self, directory: str):
        self.directory = directory

    def _path_for(self, user_id: int, token: int) -> str:
        return os.path.join(self.directory, f"brief_{user_id}_{token}.pdf")

    def save(self, user_id: int, pdf_bytes: bytes) -> str:
        """Write a PDF as brief_<userId>_<millis>.pdf and return its path.

        Never overwrites: a clash on the same millisecond bumps the token.
        """
        os.makedirs(self.directory, exist_ok=True)

        token = int(time.time() * 1000)
        while True:
            file_path = self._path_for(user_id, token)
            try:
                with open(file_path, "xb") as buffer:
                    buffer.write(pdf_bytes)
                return file_path
            except FileExistsError:
                token += 1

    def exists(self, file_path: Optional[str]) -> bool:
        return bool(file_path) and os.path.exists(file_path)

    def delete(self, file_path: Optional[str]) -> bool:
        """Delete a stored PDF; returns False when there was nothing to delete."""
        if not self.exists(file_path):
            return False
        os.remove(file_path)
        logger.info(f"Deleted brief artifact {file_path}")
        return True
