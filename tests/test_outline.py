import numpy as np
import pytest
from wand_psd.core import (
    trace_outline, outline_to_mask, auto_outline, threshold_to_selection,
    combine_regions, combine_mode,
)

def test_trace_single_pixel_and_block():
    m = np.zeros((4, 4), bool)
    m[1, 2] = True
    v = trace_outline(m, 2, 1)
    assert [tuple(p) for p in v] == [(2, 1), (3, 1), (3, 2), (2, 2)]
    m[1:3, 1:4] = True
    v = trace_outline(m, 1, 1)
    assert [tuple(p) for p in v] == [(1, 1), (4, 1), (4, 3), (1, 3)]
    assert np.array_equal(outline_to_mask(v, m.shape), m)

def test_trace_diagonal_pair_depends_on_connectivity():
    m = np.zeros((3, 3), bool)
    m[0, 0] = m[1, 1] = True
    eight = auto_outline(m, 0, eight_connected=True)
    four = auto_outline(m, 0, eight_connected=False)
    assert np.array_equal(eight.mask, m)
    assert four.area_px == 1 and four.mask[0, 0]

def test_outline_fills_holes():
    m = np.zeros((7, 7), bool)
    m[1:6, 1:6] = True
    m[3, 3] = False
    r = auto_outline(m, 1)
    assert r.traced and r.mask[3, 3] and r.area_px == 25

def test_auto_outline_empty_row_and_bad_start():
    m = np.zeros((3, 3), bool)
    assert auto_outline(m, 1) is None
    with pytest.raises(ValueError):
        trace_outline(m, 0, 0)

def test_threshold_to_selection_keeps_holes():
    m = np.zeros((9, 9), bool)
    m[1:8, 1:8] = True
    m[3:6, 3:6] = False
    r = threshold_to_selection(m)
    assert len(r.contours) == 1 and len(r.holes) == 1
    assert r.area_px == 49 - 9 and r.bounds() == (1, 1, 7, 7)

def test_combine_regions():
    a = np.zeros((6, 6), bool); a[0:3, 0:3] = True
    b = np.zeros((6, 6), bool); b[1:4, 1:4] = True
    ra, rb = threshold_to_selection(a), threshold_to_selection(b)
    assert combine_regions(ra, rb, "add").area_px == 9 + 9 - 4
    assert combine_regions(ra, rb, "subtract").area_px == 5
    assert combine_regions(ra, rb, "intersect").area_px == 4
    assert combine_regions(ra, rb, "replace") is rb
    assert combine_regions(None, rb, "add") is rb
    with pytest.raises(ValueError):
        combine_regions(ra, rb, "xor")
    assert combine_mode(True, False) == "add"
    assert combine_mode(False, True) == "subtract"
    assert combine_mode(True, True) == "intersect"
    assert combine_mode(False, False) == "replace"
