import cv2
import numpy as np
import pytest
from wand_psd.core import (
    WandImage, WandParams, Connectivity, NotInThresholdedArea, WandCancelled,
    grow_region, wand_select, build_mask, resolve_reference, UNKNOWN, OUTSIDE, INSIDE,
)

def grow(img, x, y, **kw):
    return grow_region(WandImage(img), x, y, WandParams(**kw))

def test_guard_scenario():
    img = np.full((10, 10), 100, np.uint8)
    img[5, 5] = 200
    with pytest.raises(NotInThresholdedArea):
        grow_region(WandImage(img, threshold=(0, 150)), 5, 5, WandParams())

def test_flat_fill_covers_everything():
    img = np.full((10, 10), 7, np.uint8)
    image, params = WandImage(img), WandParams(value_tolerance=0)
    mask, ymin = build_mask(image, 5, 5, params, resolve_reference(image, 5, 5, params))
    assert (mask == INSIDE).all() and not (mask == OUTSIDE).any()
    assert ymin == 0
    assert grow(img, 5, 5, value_tolerance=0).area_px == 100

def test_gradient_blocks_step(step_image):
    r = grow(step_image, 2, 2, value_tolerance=200, gradient_tolerance=10)
    assert r.mask[:, :5].all()
    assert not r.mask[:, 5:].any()
    # without gating the tolerance engulfs both halves
    assert grow(step_image, 2, 2, value_tolerance=200).area_px == 100

def mask_for(img, x, y, **kw):
    image, params = WandImage(img), WandParams(**kw)
    return build_mask(image, x, y, params, resolve_reference(image, x, y, params))[0]

def test_gradient_blocks_step_from_bright_side(step_image):
    # the edge column is large-gradient and passes the fill along itself only
    mask = mask_for(step_image, 7, 2, value_tolerance=200, gradient_tolerance=10)
    assert (mask[:, 5:] == INSIDE).all()
    assert (mask[:, :5] == UNKNOWN).all()

def test_gradient_admits_step_against_slope():
    # slope +20/px at x=1: x=2 falls against it and is admitted, x=0 lies down the slope
    img = np.array([[0, 60, 40]], np.uint8)
    mask = mask_for(img, 1, 0, value_tolerance=200, gradient_tolerance=10)
    assert mask.tolist() == [[UNKNOWN, INSIDE, INSIDE]]
    assert (mask_for(img, 1, 0, value_tolerance=200) == INSIDE).all()

def test_gated_pixel_reached_from_flat_side():
    # (2, 0) is refused from (1, 0) on the edge, then accepted from (3, 0)
    # where the two bright neighbours cancel the gradient
    row = np.array([[0, 0, 100, 0, 100]], np.uint8)
    mask = mask_for(row, 0, 0, value_tolerance=200, gradient_tolerance=10)
    assert mask.tolist() == [[INSIDE, INSIDE, UNKNOWN, UNKNOWN, UNKNOWN]]
    corridor = np.vstack([row, np.zeros_like(row)])
    mask = mask_for(corridor, 0, 0, value_tolerance=200, gradient_tolerance=10,
                    connectivity=Connectivity.FOUR)
    assert mask[0, 2] == INSIDE
    assert (mask == INSIDE).all()

def test_non_contiguous_checkerboard():
    yy, xx = np.mgrid[0:10, 0:10]
    board = (((xx + yy) % 2) * 100).astype(np.uint8)
    r = grow(board, 0, 0, value_tolerance=0, connectivity=Connectivity.FOUR)
    assert r.area_px == 1
    r = grow(board, 0, 0, value_tolerance=0, connectivity=Connectivity.NON_CONTIGUOUS)
    assert np.array_equal(r.mask, board == 0)

@pytest.mark.parametrize("conn,cv_conn", [(Connectivity.EIGHT, 8), (Connectivity.FOUR, 4)])
def test_fill_matches_connected_component(noisy_gray, conn, cv_conn):
    # large irregular region: exercises frontier growth, compare against OpenCV labelling
    seed = (20, 20)
    v0 = int(noisy_gray[seed[1], seed[0]])
    tol = 40
    r = grow(noisy_gray, *seed, value_tolerance=tol, connectivity=conn)
    ok = ((noisy_gray.astype(int) >= v0 - tol) & (noisy_gray.astype(int) <= v0 + tol)).astype(np.uint8)
    _, labels = cv2.connectedComponents(ok, connectivity=cv_conn)
    assert np.array_equal(r.mask, labels == labels[seed[1], seed[0]])

def test_ring_buffer_growth_uniform_50x50():
    r = grow(np.full((50, 50), 3, np.uint8), 25, 25, value_tolerance=0, connectivity=Connectivity.FOUR)
    assert r.area_px == 2500

def test_idempotent(noisy_gray):
    a = grow(noisy_gray, 20, 20, value_tolerance=25, gradient_tolerance=15)
    b = grow(noisy_gray, 20, 20, value_tolerance=25, gradient_tolerance=15)
    assert np.array_equal(a.mask, b.mask)
    assert len(a.contours) == len(b.contours)
    assert all(np.array_equal(p, q) for p, q in zip(a.contours, b.contours))

def test_monotonic_tolerance(noisy_gray):
    prev = None
    for tol in (0, 10, 20, 40, 80):
        m = grow(noisy_gray, 20, 20, value_tolerance=tol).mask
        if prev is not None:
            assert not (prev & ~m).any()
        prev = m

def test_four_connected_subset_of_eight(noisy_gray):
    m4 = grow(noisy_gray, 20, 20, value_tolerance=30, connectivity=Connectivity.FOUR).mask
    m8 = grow(noisy_gray, 20, 20, value_tolerance=30, connectivity=Connectivity.EIGHT).mask
    assert not (m4 & ~m8).any()

def test_include_holes(ring_image):
    with_holes = grow(ring_image, 5, 5, value_tolerance=0)
    assert with_holes.area_px == 100 - 16
    assert len(with_holes.holes) == 1

    filled = grow(ring_image, 5, 5, value_tolerance=0, include_holes=True)
    assert filled.traced and filled.area_px == 100
    assert filled.mask[5:15, 5:15].all()
    corners = {tuple(p) for p in filled.contours[0].reshape(-1, 2)}
    assert corners == {(5, 5), (15, 5), (15, 15), (5, 15)}

def test_include_holes_single_pixel():
    img = np.zeros((5, 5), np.uint8)
    img[2, 2] = 100
    r = grow(img, 2, 2, value_tolerance=0, include_holes=True)
    assert r.traced and r.area_px == 1 and r.mask[2, 2]
    corners = {tuple(p) for p in r.contours[0].reshape(-1, 2)}
    assert corners == {(2, 2), (3, 2), (3, 3), (2, 3)}

def test_color_mode_sensitivity():
    rgb = np.zeros((6, 12, 3), np.uint8)
    rgb[:, :4] = (200, 0, 0)
    rgb[:, 4:8] = (100, 0, 0)
    rgb[:, 8:] = (0, 200, 0)
    image = WandImage(rgb)
    nc = Connectivity.NON_CONTIGUOUS
    plain = grow_region(image, 1, 1, WandParams(value_tolerance=10, connectivity=nc))
    assert plain.area_px == 24
    hue = grow_region(image, 1, 1, WandParams(value_tolerance=10, color_sensitivity=1.0, connectivity=nc))
    assert hue.mask[:, :8].all() and not hue.mask[:, 8:].any()
    gray = grow_region(image, 1, 1, WandParams(value_tolerance=10, color_sensitivity=-1.0, connectivity=nc))
    assert gray.mask[:, :4].all() and gray.mask[:, 8:].all() and not gray.mask[:, 4:8].any()

def test_eyedropper_seed_forced_inside():
    img = np.full((10, 10), 50, np.uint8)
    img[2:5, 6:9] = 200
    p = WandParams(value_tolerance=5, use_eyedropper=True)
    r = grow_region(WandImage(img), 0, 0, p, foreground=(200, 200, 200))
    assert r.area_px == 1 and r.mask[0, 0]
    p = WandParams(value_tolerance=5, use_eyedropper=True, connectivity=Connectivity.NON_CONTIGUOUS)
    r = grow_region(WandImage(img), 0, 0, p, foreground=(200, 200, 200))
    assert np.array_equal(r.mask, img == 200)

def test_seed_out_of_bounds():
    with pytest.raises(ValueError):
        grow(np.zeros((5, 5), np.uint8), 5, 0)

def test_cancel_and_progress():
    img = np.zeros((80, 80), np.uint8)
    with pytest.raises(WandCancelled):
        grow_region(WandImage(img), 0, 0, WandParams(), cancel_cb=lambda: True)
    seen = []
    grow_region(WandImage(img), 0, 0, WandParams(), progress_cb=seen.append)
    assert len(seen) >= 2 and seen[-1] == 1.0
    assert all(0.0 <= f <= 1.0 for f in seen)

def test_wand_select_reports_and_combines():
    img = np.zeros((20, 20), np.uint8)
    img[2:6, 2:6] = 100
    img[10:15, 10:15] = 100
    image, p = WandImage(img), WandParams(value_tolerance=0)
    first = wand_select(image, 3, 3, p)
    both = wand_select(image, 12, 12, p, previous=first, shift=True)
    assert both.area_px == 16 + 25 and len(both.contours) == 2
    back = wand_select(image, 12, 12, p, previous=both, alt=True)
    assert np.array_equal(back.mask, first.mask)

    messages = []
    thr = WandImage(img, threshold=(50, 150))
    assert wand_select(thr, 0, 0, p, previous=first, notify_cb=messages.append) is None
    assert messages == ["Not in Thresholded Area"]
    assert wand_select(image, 0, 0, p, cancel_cb=lambda: True) is None
