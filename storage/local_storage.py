"""Local filesystem storage implementation."""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import IO, BinaryIO

from werkzeug.utils import secure_filename

from .abstract_storage import AbstractStorage


class LocalStorage(AbstractStorage):
    """Persist files under a single upload directory with collision-free names."""

    def __init__(self, upload_dir: str | os.PathLike):
        self.base_directory = Path(upload_dir)
        os.makedirs(self.base_directory, exist_ok=True)

    def _resolve(self, name: str) -> Path:
        safe_name = secure_filename(name)
        if not safe_name or safe_name != name:
            raise ValueError(f"Invalid stored file name: {name!r}")
        return self.base_directory / safe_name

    def save(self, file_obj: IO[bytes], filename: str) -> str:
        """Save a file under a random name that keeps the original suffix."""

        suffix = Path(secure_filename(filename)).suffix.lower()
        stored_name = f"{uuid.uuid4().hex}{suffix}"
        destination = self.base_directory / stored_name

        if hasattr(file_obj, "save"):
            file_obj.save(destination)  # type: ignore[arg-type]
        else:
            with open(destination, "wb") as output:
                output.write(file_obj.read())

        return stored_name

    def exists(self, name: str) -> bool:
        try:
            return self._resolve(name).exists()
        except ValueError:
            return False

    def open(self, name: str, mode: str = "rb") -> BinaryIO:
        return open(self._resolve(name), mode)

    def delete(self, name: str) -> None:
        path = self._resolve(name)
        if path.exists():
            path.unlink()
