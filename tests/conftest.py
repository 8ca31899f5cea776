import numpy as np
import pytest

@pytest.fixture
def rng():
    return np.random.default_rng(0)

@pytest.fixture
def noisy_gray(rng):
    # 64x64 синтетика: два "зерна" на шумному фоні
    img = (rng.normal(60, 12, (64, 64))).clip(0, 255).astype(np.uint8)
    img[10:30, 12:34] = np.clip(rng.normal(170, 8, (20, 22)), 0, 255).astype(np.uint8)
    img[40:56, 40:58] = np.clip(rng.normal(160, 8, (16, 18)), 0, 255).astype(np.uint8)
    return img

@pytest.fixture
def step_image():
    # 10x10, 0 for x<5, 100 for x>=5
    img = np.zeros((10, 10), np.uint8)
    img[:, 5:] = 100
    return img

@pytest.fixture
def ring_image():
    # square annulus of 100 (5..14) with a 4x4 hole of 0 (8..11)
    img = np.zeros((20, 20), np.uint8)
    img[5:15, 5:15] = 100
    img[8:12, 8:12] = 0
    return img
