"""Storage abstraction layer for uploaded profile images."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import IO, BinaryIO


class AbstractStorage(ABC):
    """Interface for storage backends."""

    @abstractmethod
    def save(self, file_obj: IO[bytes], filename: str) -> str:
        """Persist a file and return its stored name."""

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Return whether the given stored name exists."""

    @abstractmethod
    def open(self, name: str, mode: str = "rb") -> BinaryIO:
        """Open a stored file and return the file object."""

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove a stored file if present."""
