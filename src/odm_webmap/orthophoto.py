# FILE: src/odm_webmap/orthophoto.py
# =================================================================================================
# Orthophoto transcoding
#
# decode (limits lifted) ─┬─ identity        → <out>/odm_orthophoto.png   (lossless, full-res)
#                         └─ resize → RGBA   → <out>/odm_orthophoto.webp  (lossy, downscaled)
#
# Both branches take the same decoded image, so each can be exercised against one fixture
# without decoding twice. At most the full decode plus one resized bitmap are alive at once.
# =================================================================================================
from __future__ import annotations

import io
import math
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

from PIL import Image, PngImagePlugin

from .errors import DecodeError, EncodeError, WriteError
from .utils.logging_utils import get_logger

log = get_logger(__name__)

ORTHOPHOTO_SUBDIR = "odm_orthophoto"
ORTHOPHOTO_BASENAME = "odm_orthophoto"
ORTHOPHOTO_SOURCE = Path(ORTHOPHOTO_SUBDIR) / f"{ORTHOPHOTO_BASENAME}.png"

LOSSLESS_FORMAT, LOSSLESS_EXT = "PNG", "png"
LOSSY_FORMAT, LOSSY_EXT = "WEBP", "webp"

# Modes Pillow resamples natively; anything else is widened to RGBA first.
_RESAMPLE_MODES = ("RGBA", "RGB", "LA", "L")


@contextmanager
def unbounded_decoder() -> Iterator[None]:
    """
    Lift Pillow's decompression-bomb and PNG text-chunk limits for the duration
    of the block, restoring the previous values afterwards.

    Orthomosaics routinely exceed the pixel ceiling Pillow applies for ordinary
    photographs. Inputs are trusted local ODM output; see decode_orthophoto(max_pixels=...)
    for a bounded alternative.
    """
    saved = (Image.MAX_IMAGE_PIXELS, PngImagePlugin.MAX_TEXT_CHUNK, PngImagePlugin.MAX_TEXT_MEMORY)
    Image.MAX_IMAGE_PIXELS = None
    PngImagePlugin.MAX_TEXT_CHUNK = 2**31 - 1
    PngImagePlugin.MAX_TEXT_MEMORY = 2**31 - 1
    try:
        yield
    finally:
        Image.MAX_IMAGE_PIXELS, PngImagePlugin.MAX_TEXT_CHUNK, PngImagePlugin.MAX_TEXT_MEMORY = saved


def _narrowed_from_16bit(img: Image.Image) -> bool:
    """True when Pillow unpacks 16-bit samples into an 8-bit mode (e.g. RGB;16B -> RGB)."""
    if img.mode not in ("RGB", "RGBA", "LA"):
        return False
    for tile in img.tile or []:
        rawmode = tile[3]
        if isinstance(rawmode, tuple):
            rawmode = rawmode[0] if rawmode else ""
        if isinstance(rawmode, str) and ";16" in rawmode:
            return True
    return False


def decode_orthophoto(path: str | Path, max_pixels: Optional[int] = None) -> Image.Image:
    """
    Fully decode the raster at `path`; the format is sniffed from content, not the extension.

    Parameters
    ----------
    path : str | Path
        Source raster.
    max_pixels : int, optional
        Reject rasters with more than this many pixels. None means no ceiling.

    Raises
    ------
    DecodeError
        If the file cannot be opened or decoded, or exceeds `max_pixels`.
    """
    p = Path(path)
    try:
        with unbounded_decoder(), p.open("rb") as fh:
            img = Image.open(fh)
            w, h = img.size
            if max_pixels is not None and w * h > max_pixels:
                raise DecodeError(
                    f"Orthophoto has {w}x{h}={w * h} pixels, above the configured max_pixels={max_pixels}",
                    p,
                )
            narrowed = _narrowed_from_16bit(img)
            img.load()
    except DecodeError:
        raise
    except (OSError, SyntaxError, ValueError, MemoryError) as e:
        raise DecodeError(f"Failed to decode orthophoto: {type(e).__name__}: {e}", p) from e

    log.info("Decoded %s: format=%s mode=%s size=%dx%d", p, img.format, img.mode, img.width, img.height)
    if narrowed:
        log.warning(
            "%s stores 16 bits per channel; it is decoded as 8-bit %s, so the full-resolution copy loses precision",
            p,
            img.mode,
        )
    return img


def target_size(size: Tuple[int, int], factor: float) -> Tuple[int, int]:
    """(floor(w * factor), floor(h * factor)); fractional pixels truncate."""
    w, h = size
    return math.floor(w * factor), math.floor(h * factor)


def resize_rgba(image: Image.Image, factor: float) -> Image.Image:
    """
    Bilinear downscale by `factor`, always returning an RGBA image.

    Sources without alpha gain a fully opaque channel.
    """
    if not all(math.isfinite(v) for v in (factor, image.width * factor, image.height * factor)):
        raise EncodeError(f"size factor {factor} does not give a finite image size")
    new_size = target_size(image.size, factor)
    if new_size[0] < 1 or new_size[1] < 1:
        raise EncodeError(f"size factor {factor} reduces {image.width}x{image.height} to an empty image {new_size}")

    src = image if image.mode in _RESAMPLE_MODES else image.convert("RGBA")
    try:
        resized = src.resize(new_size, resample=Image.Resampling.BILINEAR)
    except (ValueError, OSError, OverflowError, MemoryError) as e:
        raise EncodeError(f"Resize to {new_size} failed: {e}") from e
    if resized.mode != "RGBA":
        resized = resized.convert("RGBA")
    return resized


def _save_to(image: Image.Image, path: Path, fmt: str, **params: Any) -> Path:
    """
    Stream `image` straight into `path`, separating I/O failures (WriteError)
    from encoder failures (EncodeError). A partial file is removed on failure.
    """
    try:
        fh = path.open("wb")
    except OSError as e:
        raise WriteError(f"Cannot open output: {e.strerror or e}", path) from e
    try:
        with fh:
            image.save(fh, format=fmt, **params)
    except OSError as e:
        path.unlink(missing_ok=True)
        if e.errno is not None:
            raise WriteError(f"Cannot write {fmt}: {e.strerror or e}", path) from e
        raise EncodeError(f"{fmt} encoding failed: {e}", path) from e
    except (ValueError, KeyError) as e:
        path.unlink(missing_ok=True)
        raise EncodeError(f"{fmt} encoding failed: {e}", path) from e
    return path


def write_lossless(image: Image.Image, path: str | Path) -> Path:
    """Persist the decoded image unmodified as PNG."""
    p = _save_to(image, Path(path), LOSSLESS_FORMAT)
    log.info("Wrote full-resolution %s (%dx%d)", p, image.width, image.height)
    return p


def encode_lossy(image: Image.Image, quality: float) -> bytes:
    """Encode to lossy WebP bytes at `quality` (0-100)."""
    buf = io.BytesIO()
    try:
        image.save(buf, format=LOSSY_FORMAT, quality=float(quality), lossless=False)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(f"WebP encoding failed at quality={quality}: {e}") from e
    return buf.getvalue()


def write_lossy(image: Image.Image, path: str | Path, size_factor: float, quality: float) -> Tuple[Path, Tuple[int, int]]:
    """Resize to RGBA, encode as WebP, and write to `path`. Returns (path, (w, h))."""
    p = Path(path)
    resized = resize_rgba(image, size_factor)
    try:
        data = encode_lossy(resized, quality)
    except EncodeError as e:
        e.path = p
        raise
    try:
        p.write_bytes(data)
    except OSError as e:
        raise WriteError(f"Cannot write WebP: {e.strerror or e}", p) from e
    log.info("Wrote %s (%dx%d, quality=%s, %d bytes)", p, resized.width, resized.height, quality, len(data))
    return p, resized.size


def process_orthophoto(
    input_dir: str | Path,
    output_dir: str | Path,
    size_factor: float,
    quality: float,
    max_pixels: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Process the full-res ODM orthophoto into a smaller web-compatible product.

    Returns
    -------
    dict
        Paths and pixel sizes of the lossless and lossy artifacts.
    """
    source = Path(input_dir) / ORTHOPHOTO_SOURCE
    out = Path(output_dir)

    img = decode_orthophoto(source, max_pixels=max_pixels)
    full_size = img.size

    lossless = write_lossless(img, out / f"{ORTHOPHOTO_BASENAME}.{LOSSLESS_EXT}")
    lossy, lossy_size = write_lossy(img, out / f"{ORTHOPHOTO_BASENAME}.{LOSSY_EXT}", size_factor, quality)

    return {
        "source": str(source),
        "lossless": str(lossless),
        "lossless_size": list(full_size),
        "lossy": str(lossy),
        "lossy_size": list(lossy_size),
        "size_factor": size_factor,
        "quality": quality,
    }
