"""
Image rasterization for the thermal print head.

The pipeline turns arbitrary uploaded image bytes into a 1-bit raster the
printer can reproduce with two intensity levels:

    decode -> resize to head width -> grayscale -> contrast stretch
           -> Floyd-Steinberg dithering -> RasterImage

Everything here is a pure function of the input bytes and the target width,
so identical uploads always produce byte-identical output.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Dots per line on a 58mm head
PRINTER_WIDTH_PX = 384
THRESHOLD = 128
BLACK = 0
WHITE = 255
# Longest strip we will dither, about half a metre of paper at 8 dots/mm
MAX_RASTER_HEIGHT = 4096

SUPPORTED_FORMATS = frozenset({"PNG", "JPEG", "MPO", "GIF", "BMP", "WEBP", "TIFF"})


class DecodeError(ValueError):
    """The uploaded bytes are not a decodable image."""


class UnsupportedFormatError(DecodeError):
    """The bytes decode, but as a container format we do not print."""


@dataclass(frozen=True)
class RasterImage:
    """
    A width x height grid with one intensity byte per pixel, row-major.
    After rasterize() every pixel is either BLACK or WHITE.
    """

    width: int
    height: int
    pixels: bytes

    def to_image(self) -> Image.Image:
        """Return the raster as a Pillow image in mode "1"."""
        gray = Image.frombytes("L", (self.width, self.height), bytes(self.pixels))
        return gray.convert("1", dither=Image.Dither.NONE)

    def encode(self) -> bytes:
        """Serialize to the lossless 1-bit PNG handed to the printer's image primitive."""
        buf = io.BytesIO()
        self.to_image().save(buf, format="PNG")
        return buf.getvalue()

    def dark_count(self) -> int:
        return sum(1 for v in self.pixels if v < THRESHOLD)


def _decode(image_bytes: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(image_bytes))
    except (UnidentifiedImageError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Unrecognized image data: {e}") from e
    except (OSError, SyntaxError, ValueError) as e:
        raise DecodeError(f"Unreadable image data: {e}") from e

    if img.format not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(f"Unsupported image format: {img.format}")

    try:
        img.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Corrupt {img.format} image: {e}") from e
    return img


def _to_8bit(img: Image.Image) -> Image.Image:
    """
    Rescale a high bit-depth grayscale image (I;16*, I, F) into mode "L".
    A plain convert("L") clips everything above 255 to white.
    """
    if img.mode.startswith("I;16"):
        img = img.convert("I")
        scale = WHITE / 65535
    else:
        hi = img.getextrema()[1]
        if hi <= WHITE:
            scale = 1.0
        elif hi <= 65535:
            scale = WHITE / 65535
        else:
            scale = WHITE / hi
    if scale != 1.0:
        img = img.point(lambda v: v * scale)
    return img.convert("L")


def _flatten(img: Image.Image) -> Image.Image:
    """Apply EXIF orientation and composite any transparency onto white paper."""
    img = ImageOps.exif_transpose(img)
    if img.mode.startswith("I") or img.mode == "F":
        return _to_8bit(img)
    has_alpha = img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info)
    if has_alpha:
        rgba = img.convert("RGBA")
        paper = Image.new("RGBA", rgba.size, (WHITE, WHITE, WHITE, 255))
        return Image.alpha_composite(paper, rgba).convert("RGB")
    if img.mode not in ("L", "RGB"):
        return img.convert("RGB")
    return img


def fit_width(img: Image.Image, target_width: int) -> Image.Image:
    """
    Scale to exactly target_width, preserving aspect ratio. Wider sources are
    reduced, narrower ones enlarged; an image already at width is untouched.
    """
    if img.width == target_width:
        return img
    return img.resize((target_width, scaled_height(img.size, target_width)), Image.Resampling.LANCZOS)


def scaled_height(size: tuple[int, int], target_width: int) -> int:
    width, height = size
    if width == target_width:
        return height
    return max(1, round(height * target_width / width))


def floyd_steinberg(pixels: Sequence[int], width: int, height: int) -> bytearray:
    """
    Error-diffusion dither of a row-major grayscale buffer.

    Pixels are visited strictly left to right, top to bottom. Each one is
    thresholded at 128 and its quantization error is pushed onto the
    not-yet-visited neighbours: 7/16 right, 3/16 below-left, 5/16 below and
    1/16 below-right.
    """
    if len(pixels) != width * height:
        raise ValueError(f"pixel buffer has {len(pixels)} values, expected {width * height}")

    acc = [float(v) for v in pixels]
    out = bytearray(width * height)
    for y in range(height):
        row = y * width
        below = row + width
        has_below = y + 1 < height
        for x in range(width):
            i = row + x
            old = acc[i]
            new = BLACK if old < THRESHOLD else WHITE
            out[i] = new
            err = old - new
            if not err:
                continue
            has_right = x + 1 < width
            if has_right:
                acc[i + 1] += err * 7 / 16
            if has_below:
                if x > 0:
                    acc[below + x - 1] += err * 3 / 16
                acc[below + x] += err * 5 / 16
                if has_right:
                    acc[below + x + 1] += err * 1 / 16
    return out


def rasterize(image_bytes: bytes, target_width: int = PRINTER_WIDTH_PX) -> RasterImage:
    """
    Convert uploaded image bytes into a dithered black/white RasterImage.

    Raises:
        DecodeError: the bytes are not a decodable image.
        UnsupportedFormatError: decodable, but not PNG/JPEG/GIF/BMP/WEBP/TIFF.
        DecodeError: also when the scaled raster would exceed MAX_RASTER_HEIGHT.
        ValueError: target_width is not positive.
    """
    if target_width < 1:
        raise ValueError("target_width must be positive")

    img = _decode(image_bytes)
    src_size = img.size
    img = _flatten(img)
    out_height = scaled_height(img.size, target_width)
    if out_height > MAX_RASTER_HEIGHT:
        raise DecodeError(
            f"Image too tall to print: {img.width}x{img.height} scales to "
            f"{target_width}x{out_height} (limit {MAX_RASTER_HEIGHT} rows)"
        )
    img = fit_width(img, target_width)
    gray = img.convert("L")
    gray = ImageOps.autocontrast(gray)

    dithered = floyd_steinberg(gray.tobytes(), gray.width, gray.height)
    raster = RasterImage(width=gray.width, height=gray.height, pixels=bytes(dithered))
    logger.info(
        "Rasterized %sx%s image to %sx%s (%d dark dots)",
        src_size[0],
        src_size[1],
        raster.width,
        raster.height,
        raster.dark_count(),
    )
    return raster


__all__ = [
    "MAX_RASTER_HEIGHT",
    "PRINTER_WIDTH_PX",
    "SUPPORTED_FORMATS",
    "DecodeError",
    "RasterImage",
    "UnsupportedFormatError",
    "fit_width",
    "scaled_height",
    "floyd_steinberg",
    "rasterize",
]
