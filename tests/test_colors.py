import unittest

from simplab.colors import hex_to_rgb, is_valid_hex, mix_colors, rgb_to_hex
from simplab.constants import NEUTRAL_COLOR


class TestColors(unittest.TestCase):
    def test_hex_round_trip(self):
        self.assertEqual(hex_to_rgb("#1E90FF"), (30, 144, 255))
        self.assertEqual(hex_to_rgb("1e90ff"), (30, 144, 255))
        self.assertEqual(rgb_to_hex(30, 144, 255), "#1e90ff")

    def test_invalid_hex(self):
        self.assertFalse(is_valid_hex("#FFF"))
        self.assertFalse(is_valid_hex("#GGGGGG"))
        self.assertFalse(is_valid_hex(None))
        # hex_to_rgb tolerates a bare "rrggbb"; stored colors must carry the hash
        self.assertFalse(is_valid_hex("1e90ff"))
        self.assertTrue(is_valid_hex("#1e90ff"))
        with self.assertRaises(ValueError):
            hex_to_rgb("blue")

    def test_rgb_out_of_range(self):
        with self.assertRaises(ValueError):
            rgb_to_hex(256, 0, 0)

    def test_mix_empty_is_neutral(self):
        self.assertEqual(mix_colors([]), NEUTRAL_COLOR)

    def test_mix_single_unchanged(self):
        self.assertEqual(mix_colors(["#8B008B"]), "#8B008B")

    def test_mix_identical_colors_unchanged(self):
        self.assertEqual(mix_colors(["#FFFFFF", "#FFFFFF"]), "#FFFFFF")
        self.assertEqual(mix_colors(["#F0FFFF", "#f0ffff", "#F0FFFF"]), "#F0FFFF")

    def test_mix_channel_mean_rounds_half_up(self):
        # (30 + 232) / 2 = 131, (144 + 244) / 2 = 194, (255 + 248) / 2 = 251.5
        self.assertEqual(mix_colors(["#1E90FF", "#E8F4F8"]), "#83c2fc")

    def test_mix_is_order_independent(self):
        colors = ["#1E90FF", "#CD853F", "#FFFFFF"]
        self.assertEqual(mix_colors(colors), mix_colors(list(reversed(colors))))


if __name__ == '__main__':
    unittest.main()
