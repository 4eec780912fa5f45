from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from invoice_scan.database.repositories.memory_invoice_repository import (
    InMemoryInvoiceRepository,
)
from invoice_scan.storage.local_storage import LocalFileStorage
from invoice_scan.worker.launcher import BaseTaskLauncher


class InlineTaskLauncher(BaseTaskLauncher):
    """Runs launched work synchronously so tests can observe the final state."""

    def __init__(self) -> None:
        self.launched: list[tuple[Callable[..., None], tuple[Any, ...]]] = []

    def launch(self, fn: Callable[..., None], *args: Any) -> None:
        self.launched.append((fn, args))
        fn(*args)


class DeferredTaskLauncher(BaseTaskLauncher):
    """Records launched work without running it until run_all() is called."""

    def __init__(self) -> None:
        self.pending: list[tuple[Callable[..., None], tuple[Any, ...]]] = []

    def launch(self, fn: Callable[..., None], *args: Any) -> None:
        self.pending.append((fn, args))

    def run_all(self) -> None:
        while self.pending:
            fn, args = self.pending.pop(0)
            fn(*args)


@pytest.fixture()
def jpeg_bytes() -> bytes:
    """Minimal bytes carrying a JPEG signature."""
    return b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + b"\x00" * 64 + b"\xff\xd9"


@pytest.fixture()
def png_bytes() -> bytes:
    """Minimal bytes carrying a PNG signature."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture()
def inline_launcher() -> InlineTaskLauncher:
    return InlineTaskLauncher()


@pytest.fixture()
def deferred_launcher() -> DeferredTaskLauncher:
    return DeferredTaskLauncher()


@pytest.fixture()
def memory_repo() -> InMemoryInvoiceRepository:
    return InMemoryInvoiceRepository()


@pytest.fixture()
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture()
def local_storage(upload_dir: Path) -> LocalFileStorage:
    return LocalFileStorage(upload_dir, "http://localhost:3001")
