"""
File tree writer for exported pages and images.
"""

import os
from typing import Union

from ..errors import StoreError
from .log import get_logger


def ensure_parent_dir(file_path: str) -> None:
    """
    Ensure the parent directory of a file exists.

    Args:
        file_path: File path whose parent directory should exist
    """
    parent = os.path.dirname(file_path)
    if parent:
        os.makedirs(parent, exist_ok=True)


class DataStore:
    """
    Writes files below an output directory.

    Existing files are overwritten: every crawl is a full re-export.
    """

    def __init__(self, directory: str):
        self.directory = os.path.abspath(directory)
        self.logger = get_logger("store")

    def full_path(self, path: str) -> str:
        return os.path.join(self.directory, path)

    def write(self, path: str, content: Union[str, bytes]) -> str:
        """
        Write content to a path relative to the output directory.

        Args:
            path: Relative file path
            content: Text (written as UTF-8) or raw bytes

        Returns:
            Absolute path of the written file

        Raises:
            StoreError: If the directory or the file cannot be written
        """
        full_path = self.full_path(path)
        try:
            ensure_parent_dir(full_path)
            if isinstance(content, bytes):
                with open(full_path, 'wb') as f:
                    f.write(content)
            else:
                with open(full_path, 'w', encoding='utf-8') as f:
                    f.write(content)
        except OSError as e:
            raise StoreError(path, e) from e

        self.logger.debug(f"Wrote {full_path}")
        return full_path
