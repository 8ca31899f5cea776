"""
Image I/O and metadata utilities.

Loads micrographs for the wand (8/16-bit gray or RGB, kept at native
depth) and extracts the SEM pixel size (µm/px) from TIFF metadata.
"""

from __future__ import annotations
import logging
import re
from typing import Optional, Tuple
import cv2
import numpy as np
from PIL import Image

from .image import Calibration, WandImage, UNWEIGHTED_RGB, WEIGHTED_RGB

logger = logging.getLogger(__name__)


def imread_image(path: str) -> np.ndarray:
    """Read an image as H×W gray (uint8/uint16/float32) or H×W×3 RGB uint8."""
    img = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if img is None:
        # Fallback: use Pillow if OpenCV fails
        pil = Image.open(path)
        if pil.mode in ("I;16", "I;16B", "I;16L"):
            return np.array(pil).astype(np.uint16)
        if pil.mode == "F":
            return np.array(pil).astype(np.float32)
        if pil.mode not in ("L", "RGB"):
            pil = pil.convert("RGB")
        return np.array(pil)

    if img.ndim == 3:
        if img.shape[2] == 4:
            img = cv2.cvtColor(img, cv2.COLOR_BGRA2RGB)
        else:
            img = cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
        if img.dtype != np.uint8:
            img = cv2.normalize(img, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
        # Gray images stored as 3 identical channels
        if np.array_equal(img[..., 0], img[..., 1]) and np.array_equal(img[..., 1], img[..., 2]):
            img = img[..., 0].copy()
    return img


def dump_tiff_metadata_text(image_path: str) -> str:
    """Return TIFF metadata as concatenated text for regex parsing."""
    try:
        pil = Image.open(image_path)
    except OSError as e:
        return f"[ERROR opening TIFF: {e}]"

    out = []
    for tag, val in getattr(pil, "tag_v2", {}).items():
        if isinstance(val, bytes):
            s = val.decode(errors="ignore")
        elif isinstance(val, (list, tuple)):
            s = " ".join([v.decode(errors="ignore") if isinstance(v, bytes) else str(v) for v in val])
        else:
            s = str(val)
        out.append(f"[{tag}] {s}")

    # Include general info fields
    for k, v in (pil.info or {}).items():
        if isinstance(v, bytes):
            v = v.decode(errors="ignore")
        out.append(f"[{k}] {v}")

    return "\n".join(out)


def _positive_float(s: str) -> Optional[float]:
    try:
        v = float(s)
    except ValueError:
        return None
    return v if v > 0 else None


def parse_um_per_px_from_text(txt: str) -> Optional[Tuple[float, float]]:
    """
    Extract (µm/px in x, µm/px in y) from TIFF metadata text.

    PixelHeight falls back to PixelWidth; HFW/ResolutionX gives square pixels.
    """
    if not txt:
        return None

    # Direct PixelWidth / PixelHeight fields (in meters)
    m = re.search(r"PixelWidth\s*=\s*([0-9eE\.\-\+]+)", txt)
    if m:
        px_m = _positive_float(m.group(1))
        if px_m:
            mh = re.search(r"PixelHeight\s*=\s*([0-9eE\.\-\+]+)", txt)
            py_m = _positive_float(mh.group(1)) if mh else None
            return px_m * 1e6, (py_m or px_m) * 1e6

    # Derived from horizontal field width and resolution
    m_hfw = re.search(r"(HorFieldsize|HFW)\s*=\s*([0-9eE\.\-\+]+)", txt)
    m_rx = re.search(r"(ResolutionX|Resolutionx)\s*=\s*([0-9]+)", txt)
    if m_hfw and m_rx:
        hfw_m = _positive_float(m_hfw.group(2))
        resx = int(m_rx.group(2))
        if hfw_m and resx > 0:
            s = (hfw_m * 1e6) / float(resx)
            return s, s
    return None


def scale_from_metadata(image_path: str) -> Optional[Tuple[float, float]]:
    """Read a TIFF file and return (µm/px x, µm/px y) parsed from metadata."""
    return parse_um_per_px_from_text(dump_tiff_metadata_text(image_path))


def load_wand_image(
    path: str,
    scale: Optional[float] = None,
    threshold: Optional[Tuple[float, float]] = None,
    weighted_rgb: bool = False,
) -> WandImage:
    """
    Load `path` as a `WandImage`.

    The spatial calibration is `scale` (µm/px) if given, else the TIFF
    metadata scale, else uncalibrated pixels.
    """
    arr = imread_image(path)
    if scale:
        umx = umy = float(scale)
    else:
        meta = scale_from_metadata(path)
        umx, umy = meta if meta else (None, None)
        if meta:
            logger.info("Scale %.6f x %.6f µm/px from TIFF metadata", umx, umy)
    cal = Calibration(pixel_width=umx, pixel_height=umy, unit="µm") if umx else Calibration()
    return WandImage(arr, calibration=cal, threshold=threshold,
                     luma_weights=WEIGHTED_RGB if weighted_rgb else UNWEIGHTED_RGB)
