import os
import tempfile
import unittest

from PIL import Image

from watermarker.codec import DecodeError
from watermarker.placement import Position
from watermarker.watermark import (
    Options,
    apply,
    apply_from_paths,
    default_options,
    normalize_opacity,
    options_from_config,
    tile,
    tile_from_paths,
)


def _gradient(size=(30, 20)):
    img = Image.new("RGBA", size)
    px = img.load()
    for y in range(size[1]):
        for x in range(size[0]):
            px[x, y] = ((x * 7) % 256, (y * 11) % 256, (x + y) % 256, 255)
    return img


class TestOptions(unittest.TestCase):
    def test_default_options(self):
        opts = default_options()
        self.assertEqual(opts, Options(Position.BOTTOM_RIGHT, 0.5, 10, 10))

    def test_options_from_config(self):
        opts = options_from_config({"position": "top-right", "opacity": "0.8", "padding_x": 3})
        self.assertEqual(opts, Options(Position.TOP_RIGHT, 0.8, 3, 10))
        self.assertEqual(options_from_config(None), default_options())

    def test_normalize_opacity(self):
        self.assertEqual(normalize_opacity(0), 0.5)
        self.assertEqual(normalize_opacity(-3), 0.5)
        self.assertEqual(normalize_opacity(1.7), 1.0)
        self.assertEqual(normalize_opacity(0.25), 0.25)


class TestApply(unittest.TestCase):
    def setUp(self):
        self.base = _gradient()
        self.red = Image.new("RGBA", (4, 3), (255, 0, 0, 255))

    def test_base_is_not_mutated(self):
        before = self.base.tobytes()
        out = apply(self.base, self.red, Options(Position.CENTER, 1.0, 0, 0))
        self.assertIsNot(out, self.base)
        self.assertEqual(self.base.tobytes(), before)

    def test_empty_watermark_is_noop(self):
        empty = Image.new("RGBA", (0, 0))
        for position in Position:
            out = apply(self.base, empty, Options(position, 1.0, 2, 2))
            self.assertEqual(out.tobytes(), self.base.tobytes())

    def test_transparent_watermark_is_noop(self):
        clear = Image.new("RGBA", (10, 10), (255, 255, 255, 0))
        for position in Position:
            for opacity in [0, 0.3, 1, 5]:
                out = apply(self.base, clear, Options(position, opacity, 1, 1))
                self.assertEqual(out.tobytes(), self.base.tobytes())

    def test_full_opacity_top_left(self):
        out = apply(self.base, self.red, Options(Position.TOP_LEFT, 1.0, 2, 1))
        px, src = out.load(), self.base.load()
        for y in range(out.height):
            for x in range(out.width):
                if 2 <= x < 6 and 1 <= y < 4:
                    self.assertEqual(px[x, y], (255, 0, 0, 255))
                else:
                    self.assertEqual(px[x, y], src[x, y])

    def test_zero_opacity_means_half(self):
        zero = apply(self.base, self.red, Options(Position.CENTER, 0, 0, 0))
        half = apply(self.base, self.red, Options(Position.CENTER, 0.5, 0, 0))
        self.assertEqual(zero.tobytes(), half.tobytes())
        self.assertNotEqual(zero.tobytes(), self.base.tobytes())

    def test_opacity_above_one_is_capped(self):
        high = apply(self.base, self.red, Options(Position.CENTER, 3.0, 0, 0))
        one = apply(self.base, self.red, Options(Position.CENTER, 1.0, 0, 0))
        self.assertEqual(high.tobytes(), one.tobytes())

    def test_oversized_watermark_is_clipped(self):
        big = Image.new("RGBA", (50, 40), (0, 0, 255, 255))
        out = apply(self.base, big, Options(Position.CENTER, 1.0, 0, 0))
        self.assertEqual(out.size, self.base.size)
        self.assertEqual(set(out.getdata()), {(0, 0, 255, 255)})

    def test_negative_offset_is_clipped(self):
        # bottom-right with padding larger than the base -> negative offset
        out = apply(self.base, self.red, Options(Position.BOTTOM_RIGHT, 1.0, 29, 19))
        px = out.load()
        self.assertEqual(px[0, 0], (255, 0, 0, 255))
        self.assertEqual(px[1, 0], self.base.getpixel((1, 0)))
        self.assertEqual(px[0, 1], self.base.getpixel((0, 1)))

    def test_semi_transparent_watermark(self):
        base = Image.new("RGBA", (1, 1), (0, 0, 0, 255))
        half_white = Image.new("RGBA", (1, 1), (255, 255, 255, 128))
        out = apply(base, half_white, Options(Position.TOP_LEFT, 1.0, 0, 0))
        self.assertEqual(out.getpixel((0, 0)), (64, 64, 64, 255))

    def test_rgb_base_gets_opaque_rgba_output(self):
        base = Image.new("RGB", (8, 8), (10, 10, 10))
        out = apply(base, self.red, Options(Position.TOP_LEFT, 1.0, 0, 0))
        self.assertEqual(out.mode, "RGBA")
        self.assertEqual(out.getpixel((7, 7)), (10, 10, 10, 255))
        self.assertEqual(out.getpixel((0, 0)), (255, 0, 0, 255))


class TestTile(unittest.TestCase):
    def setUp(self):
        self.base = Image.new("RGBA", (100, 100), (0, 0, 0, 255))

    def test_back_to_back_tiles_cover_everything(self):
        green = Image.new("RGBA", (10, 10), (0, 255, 0, 255))
        out = tile(self.base, green, 1.0, 0)
        self.assertEqual(set(out.getdata()), {(0, 255, 0, 255)})

    def test_spacing_leaves_gaps(self):
        green = Image.new("RGBA", (10, 10), (0, 255, 0, 255))
        out = tile(self.base, green, 1.0, 5)
        self.assertEqual(out.getpixel((0, 0)), (0, 255, 0, 255))
        self.assertEqual(out.getpixel((12, 0)), (0, 0, 0, 255))
        self.assertEqual(out.getpixel((15, 15)), (0, 255, 0, 255))
        self.assertEqual(out.getpixel((88, 88)), (0, 0, 0, 255))
        # origin (90, 90) is the last one started
        self.assertEqual(out.getpixel((99, 99)), (0, 255, 0, 255))

    def test_partial_tiles_are_clipped(self):
        blue = Image.new("RGBA", (30, 30), (0, 0, 255, 255))
        out = tile(Image.new("RGBA", (45, 45), (0, 0, 0, 255)), blue, 1.0, 0)
        self.assertEqual(out.size, (45, 45))
        self.assertEqual(set(out.getdata()), {(0, 0, 255, 255)})

    def test_zero_opacity_is_not_replaced(self):
        green = Image.new("RGBA", (10, 10), (0, 255, 0, 255))
        out = tile(self.base, green, 0, 0)
        self.assertEqual(out.tobytes(), self.base.tobytes())

    def test_transparent_watermark_is_noop(self):
        clear = Image.new("RGBA", (7, 7), (255, 255, 255, 0))
        out = tile(self.base, clear, 0.8, 3)
        self.assertEqual(out.tobytes(), self.base.tobytes())

    def test_overlapping_tiles_blend_in_order(self):
        base = Image.new("RGBA", (4, 1), (0, 0, 0, 255))
        white = Image.new("RGBA", (2, 1), (255, 255, 255, 255))
        # stride 1: pixel 0 gets one tile, pixels 1..3 get two
        out = tile(base, white, 0.5, -1)
        self.assertEqual(out.getpixel((0, 0)), (127, 127, 127, 255))
        self.assertEqual(out.getpixel((1, 0)), (191, 191, 191, 255))

    def test_non_advancing_stride_stops(self):
        base = Image.new("RGBA", (6, 6), (0, 0, 0, 255))
        white = Image.new("RGBA", (2, 2), (255, 255, 255, 255))
        out = tile(base, white, 1.0, -2)
        self.assertEqual(out.getpixel((1, 1)), (255, 255, 255, 255))
        self.assertEqual(out.getpixel((2, 2)), (0, 0, 0, 255))

    def test_empty_watermark_is_noop(self):
        out = tile(self.base, Image.new("RGBA", (0, 0)), 1.0, 0)
        self.assertEqual(out.tobytes(), self.base.tobytes())


class TestFromPaths(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.src_path = os.path.join(self.tmp.name, "photo.png")
        self.wm_path = os.path.join(self.tmp.name, "logo.png")
        Image.new("RGBA", (20, 20), (0, 0, 0, 255)).save(self.src_path)
        Image.new("RGBA", (5, 5), (255, 255, 255, 255)).save(self.wm_path)

    def tearDown(self):
        self.tmp.cleanup()

    def test_apply_from_paths(self):
        out = apply_from_paths(self.src_path, self.wm_path, Options(Position.BOTTOM_RIGHT, 1.0, 0, 0))
        self.assertEqual(out.getpixel((19, 19)), (255, 255, 255, 255))
        self.assertEqual(out.getpixel((14, 14)), (0, 0, 0, 255))

    def test_tile_from_paths(self):
        out = tile_from_paths(self.src_path, self.wm_path, 1.0, 0)
        self.assertEqual(set(out.getdata()), {(255, 255, 255, 255)})

    def test_missing_file_raises(self):
        with self.assertRaises(FileNotFoundError):
            apply_from_paths(os.path.join(self.tmp.name, "nope.png"), self.wm_path)

    def test_undecodable_file_raises(self):
        bad = os.path.join(self.tmp.name, "bad.png")
        with open(bad, "wb") as f:
            f.write(b"definitely not an image")
        with self.assertRaises(DecodeError):
            apply_from_paths(self.src_path, bad)
        with self.assertRaises(IOError):
            apply_from_paths(bad, self.wm_path)


if __name__ == "__main__":
    unittest.main()
