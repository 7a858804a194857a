# Ensure the repository root is on sys.path so `receipt_printer` can be imported in tests.

import io
import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest


def _ensure_repo_root_on_syspath() -> None:
    # This file lives at: <repo_root>/tests/conftest.py
    here = Path(__file__).resolve()
    repo_str = str(here.parent.parent)
    if repo_str not in sys.path:
        sys.path.insert(0, repo_str)


_ensure_repo_root_on_syspath()


@pytest.fixture(autouse=True)
def _isolated_paths(tmp_path, monkeypatch):
    # Keep config lookups and session archives out of the real home directory
    monkeypatch.setenv("RECEIPTPRINTER_CONFIG_PATH", str(tmp_path / "config.json"))
    monkeypatch.setenv("RECEIPTPRINTER_ARCHIVE_PATH", str(tmp_path / "logs"))


class FakePrinter:
    """Records the ESC/POS calls made by the receipt formatters."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.images: List[Any] = []
        self.closed = False

    def text(self, s: str):
        self.calls.append(("text", s))

    def set(self, **kwargs):
        self.calls.append(("set", kwargs))

    def image(self, img, **kwargs):
        self.images.append(img)
        self.calls.append(("image", img.size))

    def cut(self, *args, **kwargs):
        self.calls.append(("cut",))

    def close(self):
        self.closed = True

    @property
    def texts(self) -> List[str]:
        return [c[1] for c in self.calls if c[0] == "text"]

    @property
    def output(self) -> str:
        return "".join(self.texts)


@pytest.fixture
def fake_printers(monkeypatch) -> List[FakePrinter]:
    """Replace the device connection; every connect returns a new FakePrinter."""
    from receipt_printer.printing import device

    printers: List[FakePrinter] = []

    def _connect(cfg: Dict[str, Any]):
        p = FakePrinter()
        printers.append(p)
        return p

    monkeypatch.setattr(device, "connect_printer", _connect)
    return printers


def png_bytes(img) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def get_csrf_token(client, path: str = "/admin") -> str:
    resp = client.get(path)
    for sc in resp.headers.getlist("Set-Cookie"):
        for seg in sc.split(";"):
            seg = seg.strip()
            if seg.startswith("csrf_token="):
                return seg.split("=", 1)[1]
    raise AssertionError(f"Expected csrf_token cookie to be set by GET {path}")


@pytest.fixture
def to_png():
    return png_bytes


@pytest.fixture
def csrf_token():
    return get_csrf_token
