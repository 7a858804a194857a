from datetime import datetime

import pytest
from PIL import Image, UnidentifiedImageError

from receipt_printer.printing import device
from receipt_printer.printing.device import DeviceError, connect_printer
from receipt_printer.printing.jobs import (
    format_timestamp,
    image_job,
    print_image_receipt,
    print_text_receipt,
    text_job,
)
from receipt_printer.printing.raster import rasterize

RULE = "=" * 42 + "\n"
NOW = datetime(2025, 3, 4, 18, 5, 9)


def test_format_timestamp_is_us_date_and_24h_clock():
    assert format_timestamp(NOW) == "3/4/2025 18:05:09"
    assert format_timestamp(datetime(2024, 12, 25, 7, 0, 0)) == "12/25/2024 07:00:00"


def test_text_receipt_layout():
    from conftest import FakePrinter

    p = FakePrinter()
    print_text_receipt(p, "Hello\nworld", "printer.example.com", now=NOW)

    assert p.texts == [
        RULE,
        "RECEIPT\n",
        RULE,
        "\n",
        "Hello\nworld\n",
        "\n",
        RULE,
        "Date: 3/4/2025 18:05:09\n",
        "From: printer.example.com\n",
        RULE,
    ]
    assert p.calls[-1] == ("cut",)
    # Title in bold font B, centered; body left-aligned
    assert ("set", {"align": "center", "font": "b", "bold": True}) in p.calls
    body_idx = p.calls.index(("text", "Hello\nworld\n"))
    assert p.calls[body_idx - 1] == ("set", {"align": "left", "font": "a", "bold": False})


def test_footer_omits_attribution_when_missing():
    from conftest import FakePrinter

    p = FakePrinter()
    print_text_receipt(p, "x", None, now=NOW)
    assert not any(t.startswith("From:") for t in p.texts)


def test_rule_follows_config():
    from conftest import FakePrinter

    p = FakePrinter()
    print_text_receipt(p, "x", None, config={"line_width": 10, "line_character": "-"}, now=NOW)
    assert p.texts[0] == "-" * 10 + "\n"


def test_image_receipt_layout():
    from conftest import FakePrinter

    p = FakePrinter()
    img = Image.new("1", (384, 20), 1)
    print_image_receipt(p, img, "host", now=NOW)
    assert p.texts[1] == "IMAGE PRINT\n"
    assert p.images == [img]
    kinds = [c[0] for c in p.calls]
    assert kinds.index("image") < kinds.index("cut")


def test_text_job_connects_prints_and_closes(fake_printers):
    job = text_job("Hi there", "example.com", {"printer_type": "file", "device_path": "/dev/null"})
    assert fake_printers == []  # nothing touches the device until the job runs
    job()
    assert len(fake_printers) == 1
    p = fake_printers[0]
    assert "RECEIPT" in p.output
    assert "Hi there" in p.output
    assert "From: example.com" in p.output
    assert p.closed


def test_image_job_prints_rasterized_image(fake_printers, to_png):
    raster = rasterize(to_png(Image.new("RGB", (768, 100), "white")))
    job = image_job(raster.encode(), "example.com", {"printer_type": "file"})
    job()
    p = fake_printers[0]
    assert "IMAGE PRINT" in p.output
    assert len(p.images) == 1
    assert p.images[0].size == (384, 50)
    assert p.images[0].mode == "1"
    assert p.closed


def test_image_job_with_unreadable_raster_raises_pillow_error(fake_printers):
    job = image_job(b"not a png", None, {"printer_type": "file"})
    with pytest.raises(UnidentifiedImageError) as exc_info:
        job()
    assert not isinstance(exc_info.value, DeviceError)
    # Never connects to the printer
    assert fake_printers == []


def test_device_failure_mid_print_is_device_error_and_closes(monkeypatch):
    from conftest import FakePrinter

    class JammedPrinter(FakePrinter):
        def cut(self, *args, **kwargs):
            raise OSError("paper jam")

    jammed = JammedPrinter()
    monkeypatch.setattr(device, "connect_printer", lambda cfg: jammed)

    with pytest.raises(DeviceError, match="paper jam"):
        text_job("x", None, {})()
    assert jammed.closed


def test_connect_failure_propagates(monkeypatch):
    def _refuse(cfg):
        raise DeviceError("no printer")

    monkeypatch.setattr(device, "connect_printer", _refuse)
    with pytest.raises(DeviceError, match="no printer"):
        text_job("x", None, {})()


def test_connect_printer_rejects_unknown_type():
    with pytest.raises(DeviceError, match="Unsupported printer type"):
        connect_printer({"printer_type": "carrier-pigeon"})


def test_connect_printer_missing_device_file(tmp_path):
    with pytest.raises(DeviceError):
        connect_printer({"printer_type": "file", "device_path": str(tmp_path / "missing" / "lp0")})


def test_text_receipt_written_to_device_file(tmp_path):
    devfile = tmp_path / "lp0"
    devfile.touch()
    cfg = {"printer_type": "file", "device_path": str(devfile), "printer_profile": "default"}
    text_job("Written to the device", "tests", cfg)()
    raw = devfile.read_bytes()
    assert b"RECEIPT" in raw
    assert b"Written to the device" in raw
    assert b"From: tests" in raw
