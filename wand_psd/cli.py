"""
Command line front end.

    wand-psd wand IMAGE X Y [options]   grow a region from a seed pixel
    wand-psd unfold CSV [options]       Schwartz–Saltikov unfolding of section diameters
    wand-psd meta IMAGE                 print TIFF metadata and the parsed scale
"""

from __future__ import annotations
import argparse
import logging
import re
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple
import cv2
import numpy as np
from matplotlib.figure import Figure

from wand_psd.core import (
    Connectivity, WandParams, WandError, grow_region, load_wand_image,
    dump_tiff_metadata_text, scale_from_metadata,
)
from wand_psd.addons import (
    measure_region, saltikov, read_diameters_csv, write_outline_csv, write_saltikov_csv,
)

logger = logging.getLogger(__name__)

CONNECTIVITY_CHOICES = {"8": Connectivity.EIGHT, "4": Connectivity.FOUR,
                        "non-contiguous": Connectivity.NON_CONTIGUOUS}


def safe_stem(st: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]+", "_", st)


def parse_pair(text: str, cast=float) -> Tuple:
    parts = [p for p in re.split(r"[,\s]+", text.strip()) if p]
    return tuple(cast(p) for p in parts)


def _progress(fraction: float) -> None:
    logger.debug("progress %.1f%%", 100.0 * fraction)


def overlay_image(gray: np.ndarray, region) -> np.ndarray:
    """8-bit BGR rendering of the image with outer contours green and holes red."""
    if gray.dtype != np.uint8:
        gray = cv2.normalize(gray, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
    img = cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)
    cv2.drawContours(img, region.contours, -1, (0, 255, 0), 1)
    if region.holes:
        cv2.drawContours(img, region.holes, -1, (0, 0, 255), 1)
    return img


# ---------------- commands ----------------

def cmd_wand(args: argparse.Namespace) -> int:
    threshold = parse_pair(args.threshold) if args.threshold else None
    if threshold is not None and len(threshold) != 2:
        raise SystemExit("--threshold expects LOW,HIGH")
    foreground = parse_pair(args.eyedropper, int) if args.eyedropper else None
    if foreground is not None and len(foreground) != 3:
        raise SystemExit("--eyedropper expects R,G,B")

    try:
        image = load_wand_image(args.image, scale=args.scale, threshold=threshold,
                                weighted_rgb=args.weighted_rgb)
        params = WandParams(
            value_tolerance=args.tolerance,
            color_sensitivity=args.color / 100.0,
            gradient_tolerance=args.gradient,
            connectivity=CONNECTIVITY_CHOICES[args.connectivity],
            include_holes=args.holes,
            use_eyedropper=foreground is not None,
        )
        region = grow_region(image, args.x, args.y, params, foreground=foreground,
                             progress_cb=_progress)
    except (WandError, ValueError, OSError) as e:
        raise SystemExit(str(e))

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    stem = safe_stem(Path(args.image).stem)
    mask_path = out_dir / f"mask_{stem}.png"
    outline_path = out_dir / f"outline_{stem}.csv"
    overlay_path = out_dir / f"overlay_{stem}.png"

    if not cv2.imwrite(str(mask_path), region.mask.astype(np.uint8) * 255):
        logger.warning("imwrite failed: %s", mask_path)
    write_outline_csv(str(outline_path), region)
    if not cv2.imwrite(str(overlay_path), overlay_image(image.gray, region)):
        logger.warning("imwrite failed: %s", overlay_path)

    cal = image.calibration
    m = measure_region(region, cal.pixel_width, cal.pixel_height)
    print("=== REGION ===")
    print(f"Image   : {args.image}")
    print(f"Mask    : {mask_path}")
    print(f"Outline : {outline_path}")
    print(f"Overlay : {overlay_path}")
    for k, v in m.items():
        print(f"{k:>13}: {v:.4f}")
    return 0


def cmd_unfold(args: argparse.Namespace) -> int:
    try:
        d = read_diameters_csv(args.csv, args.column)
        res = saltikov(d, args.bins, bin_width=args.bin_width, thickness=args.thickness,
                       area=args.area, clip_negative=args.clip_negative)
    except (ValueError, OSError) as e:
        raise SystemExit(str(e))

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    stem = safe_stem(Path(args.csv).stem)
    csv_path = out_dir / f"saltikov_{stem}.csv"
    write_saltikov_csv(str(csv_path), res, unit=args.unit)
    print(f"Particles : {d.size}")
    print(f"CSV       : {csv_path}")

    if args.plot:
        plot_path = out_dir / f"saltikov_{stem}.png"
        plot_saltikov(res, plot_path, f"Saltikov: {Path(args.csv).name}", args.unit)
        print(f"Plot      : {plot_path}")
    if (res.nv < 0).any():
        logger.warning("Negative Nv in %d class(es); try fewer bins.", int((res.nv < 0).sum()))
    return 0


def plot_saltikov(res, out_path: Path, title: str, unit: str) -> None:
    """Side-by-side bars of the 2-D (Na) and unfolded 3-D (Nv) distributions."""
    fig = Figure(figsize=(8, 5))
    ax1, ax2 = fig.subplots(1, 2)
    centers = 0.5 * (res.bin_edges[:-1] + res.bin_edges[1:])
    width = res.bin_edges[1] - res.bin_edges[0]
    ax1.bar(centers, res.na, width=width, edgecolor="black", alpha=0.7)
    ax1.set_xlabel(f"Section diameter ({unit})")
    ax1.set_ylabel("Na")
    ax2.bar(centers, res.nv, width=width, edgecolor="black", alpha=0.7, color="tab:orange")
    ax2.set_xlabel(f"Particle diameter ({unit})")
    ax2.set_ylabel("Nv")
    for ax in (ax1, ax2):
        ax.grid(True)
    fig.suptitle(title)
    fig.tight_layout()
    fig.savefig(out_path, dpi=180)


def cmd_meta(args: argparse.Namespace) -> int:
    print("===== TIFF METADATA =====")
    print(dump_tiff_metadata_text(args.image))
    print("===== END =====")
    scale = scale_from_metadata(args.image)
    if scale:
        print(f"Scale: {scale[0]:.6f} x {scale[1]:.6f} µm/px")
    else:
        print("Scale: not found")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="wand-psd", description="Versatile wand selection and Saltikov unfolding")
    ap.add_argument("--verbose", "-v", action="store_true", help="debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    w = sub.add_parser("wand", help="grow a region from a seed pixel")
    w.add_argument("image")
    w.add_argument("x", type=int)
    w.add_argument("y", type=int)
    w.add_argument("--tolerance", type=float, default=0.0, help="value tolerance (calibrated units)")
    w.add_argument("--color", type=float, default=0.0,
                   help="-100 = gray only, 0 = RGB distance, 100 = hue only")
    w.add_argument("--gradient", type=float, default=0.0, help="gradient tolerance, 0 = off")
    w.add_argument("--connectivity", choices=list(CONNECTIVITY_CHOICES), default="8")
    w.add_argument("--holes", action="store_true", help="include holes (no interior holes)")
    w.add_argument("--eyedropper", default=None, help="reference color R,G,B instead of the seed pixel")
    w.add_argument("--threshold", default=None, help="existing threshold band LOW,HIGH (raw units)")
    w.add_argument("--scale", type=float, default=None,
                   help="µm/px. If not set, read from TIFF metadata when present.")
    w.add_argument("--weighted-rgb", action="store_true", help="weighted RGB to gray conversion")
    w.add_argument("--out", default="results")
    w.set_defaults(func=cmd_wand)

    u = sub.add_parser("unfold", help="Schwartz–Saltikov unfolding of section diameters")
    u.add_argument("csv")
    u.add_argument("--column", default="0", help="header name or 0-based index of the diameter column")
    u.add_argument("--bins", type=int, default=None,
                   help="number of classes above the first. Default: Scott's rule")
    u.add_argument("--bin-width", type=float, default=None)
    u.add_argument("--thickness", type=float, default=0.0, help="section thickness (diameter units)")
    u.add_argument("--area", type=float, default=1.0, help="analysed area (diameter units squared)")
    u.add_argument("--clip-negative", action=argparse.BooleanOptionalAction, default=True,
                   help="set negative Nv classes to 0")
    u.add_argument("--unit", default="µm")
    u.add_argument("--plot", action="store_true")
    u.add_argument("--out", default="results")
    u.set_defaults(func=cmd_unfold)

    m = sub.add_parser("meta", help="print TIFF metadata and scale")
    m.add_argument("image")
    m.set_defaults(func=cmd_meta)
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
