from collections import deque
import numpy as np
import pytest
from wand_psd.core import FrontierQueue, Calibration, local_gradient, is_within
from wand_psd.core.gradient import gradient_limits, is_downhill, is_large_gradient

def test_local_gradient_on_ramp():
    ramp = np.tile(np.arange(8, dtype=np.float32) * 10, (6, 1))
    gx, gy = local_gradient(ramp, 3, 2)          # interior (Sobel-like)
    assert gx == pytest.approx(10.0) and gy == pytest.approx(0.0)
    gx, gy = local_gradient(ramp, 0, 0)          # corner (weighted differences)
    assert gx == pytest.approx(10.0)
    assert gy == pytest.approx(10.0 / 3.0)

def test_local_gradient_single_column():
    col = np.arange(5, dtype=np.float32).reshape(5, 1)
    gx, gy = local_gradient(col, 0, 2)
    assert gx == 0.0 and gy == pytest.approx(1.0)

def test_is_within_corners():
    assert not is_within(0, 0, 0, 5, 5)      # up
    assert is_within(0, 0, 3, 5, 5)          # down-right
    assert not is_within(4, 4, 2, 5, 5)      # right

def test_gradient_limits_anisotropic():
    tol2, aspect2 = gradient_limits(5.0, Calibration(pixel_width=2.0, pixel_height=1.0))
    assert tol2 == pytest.approx(100.0) and aspect2 == pytest.approx(4.0)
    # y component counts 4x
    assert is_large_gradient(0.0, 6.0, tol2, aspect2)
    assert not is_large_gradient(6.0, 0.0, tol2, aspect2)

def test_downhill_direction():
    # gradient points to +x: stepping right to a brighter pixel climbs
    assert not is_downhill(50.0, 10.0, 0.0, 2)
    assert is_downhill(-50.0, 10.0, 0.0, 2)
    assert is_downhill(50.0, 10.0, 0.0, 6)

def test_frontier_fifo_with_growth(rng):
    q = FrontierQueue()
    ref = deque()
    n = 0
    for _ in range(3000):
        if rng.random() < 0.6 or not ref:
            q.push(n)
            ref.append(n)
            n += 1
        else:
            assert q.pop() == ref.popleft()
        assert len(q) == len(ref)
    while ref:
        assert q.pop() == ref.popleft()
    assert not q
    assert q.growths >= 1 and q.capacity > FrontierQueue.INITIAL_CAPACITY

def test_frontier_rejects_bad_capacity_and_empty_pop():
    with pytest.raises(ValueError):
        FrontierQueue(12)
    with pytest.raises(IndexError):
        FrontierQueue().pop()
