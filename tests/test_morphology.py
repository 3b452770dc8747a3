import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pytest

from raster_lab.buffer import PixelBuffer
from raster_lab import morphology


def binary_image(mask) -> PixelBuffer:
    mask = np.asarray(mask, dtype=bool)
    rgb = np.repeat(np.where(mask, 255, 0).astype(np.uint8)[..., None], 3, axis=-1)
    return PixelBuffer.from_rgb(rgb)


def fg(buf: PixelBuffer) -> np.ndarray:
    return buf.data[..., 0] > 127


def random_mask(h=16, w=16, margin=0, seed=0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    mask = np.zeros((h, w), dtype=bool)
    mask[margin:h - margin, margin:w - margin] = rng.random((h - 2 * margin, w - 2 * margin)) > 0.6
    return mask


def test_structuring_elements():
    assert morphology.structuring_element(3, "square").tolist() == [[1] * 3] * 3
    assert morphology.structuring_element(3, "cross").tolist() == [[0, 1, 0], [1, 1, 1], [0, 1, 0]]
    assert morphology.structuring_element(5, "circle").tolist() == [
        [0, 0, 1, 0, 0],
        [0, 1, 1, 1, 0],
        [1, 1, 1, 1, 1],
        [0, 1, 1, 1, 0],
        [0, 0, 1, 0, 0],
    ]
    with pytest.raises(ValueError):
        morphology.structuring_element(3, "hexagon")


def test_to_binary_forces_black_and_white():
    img = PixelBuffer(2, 1)
    img.set_pixel(0, 0, 200, 200, 200, 90)
    img.set_pixel(1, 0, 50, 50, 50, 90)
    out = morphology.to_binary(img, 128)
    assert tuple(out.get_pixel(0, 0)) == (255, 255, 255, 90)
    assert tuple(out.get_pixel(1, 0)) == (0, 0, 0, 90)


def test_dilate_single_pixel_with_square():
    mask = np.zeros((5, 5), dtype=bool)
    mask[2, 2] = True
    out = morphology.dilate(binary_image(mask), morphology.structuring_element(3))
    expected = np.zeros((5, 5), dtype=bool)
    expected[1:4, 1:4] = True
    assert np.array_equal(fg(out), expected)


def test_asymmetric_element_is_reflected_for_dilation():
    se = [[0, 0, 0], [0, 1, 1], [0, 0, 0]]
    mask = np.zeros((5, 5), dtype=bool)
    mask[2, 2] = True
    dilated = fg(morphology.dilate(binary_image(mask), se))
    assert set(zip(*np.nonzero(dilated))) == {(2, 2), (2, 3)}
    eroded = fg(morphology.erode(binary_image(dilated), se))
    assert set(zip(*np.nonzero(eroded))) == {(2, 2)}


def test_erosion_treats_outside_as_background():
    img = binary_image(np.ones((5, 5), dtype=bool))
    out = fg(morphology.erode(img, morphology.structuring_element(3)))
    expected = np.zeros((5, 5), dtype=bool)
    expected[1:4, 1:4] = True
    assert np.array_equal(out, expected)


def test_iterations_repeat_the_operation():
    mask = np.zeros((9, 9), dtype=bool)
    mask[4, 4] = True
    se = morphology.structuring_element(3)
    twice = morphology.dilate(binary_image(mask), se, iterations=2)
    assert twice == morphology.dilate(morphology.dilate(binary_image(mask), se), se)
    assert int(fg(twice).sum()) == 25


@pytest.mark.parametrize("shape", morphology.SHAPES)
def test_opening_is_idempotent_and_anti_extensive(shape):
    se = morphology.structuring_element(3, shape)
    img = binary_image(random_mask(seed=1))
    once = morphology.opening(img, se)
    assert morphology.opening(once, se) == once
    assert not np.any(fg(once) & ~fg(img))


@pytest.mark.parametrize("shape", morphology.SHAPES)
def test_closing_is_idempotent_and_extensive(shape):
    se = morphology.structuring_element(5, shape)
    # keep foreground clear of the border, where erosion sees background
    img = binary_image(random_mask(margin=2, seed=2))
    once = morphology.closing(img, se)
    assert morphology.closing(once, se) == once
    assert not np.any(fg(img) & ~fg(once))


def test_hit_or_miss_finds_plus():
    mask = np.zeros((7, 7), dtype=bool)
    mask[3, 2:5] = True
    mask[2:5, 3] = True
    out = fg(morphology.hit_or_miss(binary_image(mask)))
    assert set(zip(*np.nonzero(out))) == {(3, 3)}


def test_hit_or_miss_skips_margin():
    img = binary_image(np.ones((5, 5), dtype=bool))
    only_center = [[0, 0, 0], [0, 1, 0], [0, 0, 0]]
    out = fg(morphology.hit_or_miss(img, only_center, np.zeros((3, 3))))
    expected = np.zeros((5, 5), dtype=bool)
    expected[1:4, 1:4] = True
    assert np.array_equal(out, expected)


def test_morphology_preserves_alpha():
    img = binary_image(random_mask(seed=3))
    img.data[..., 3] = 17
    se = morphology.structuring_element(3, "cross")
    for op in (morphology.dilate, morphology.erode, morphology.opening, morphology.closing):
        assert np.all(op(img, se).alpha == 17)


def test_even_sized_element_anchor():
    se = np.ones((2, 2))
    mask = np.zeros((5, 5), dtype=bool)
    mask[2, 2] = True
    dilated = fg(morphology.dilate(binary_image(mask), se))
    assert set(zip(*np.nonzero(dilated))) == {(1, 1), (1, 2), (2, 1), (2, 2)}
    eroded = fg(morphology.erode(binary_image(dilated), se))
    assert set(zip(*np.nonzero(eroded))) == {(2, 2)}


@pytest.mark.parametrize("seed", range(5))
@pytest.mark.parametrize("shape", morphology.SHAPES)
def test_closing_is_idempotent_when_touching_border(shape, seed):
    se = morphology.structuring_element(5, shape)
    mask = random_mask(h=12, w=15, seed=seed)
    mask[0, :] = True
    mask[:, -1] = True
    once = morphology.closing(binary_image(mask), se)
    assert morphology.closing(once, se) == once
