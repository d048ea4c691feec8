import unittest

import numpy as np

from sync_skew_analyzer.ingest.demux import DualChannelDemultiplexer, StructuralBlockError, deinterleave


class TestDeinterleave(unittest.TestCase):
    def test_even_samples_to_a_odd_samples_to_b(self):
        buf = np.array([10.0, 20.0, 11.0, 21.0, 12.0, 22.0])
        a, b = deinterleave(buf, 3)
        self.assertTrue(np.array_equal(a, [10.0, 11.0, 12.0]))
        self.assertTrue(np.array_equal(b, [20.0, 21.0, 22.0]))

    def test_outputs_do_not_alias_input(self):
        buf = np.arange(8, dtype=float)
        a, b = deinterleave(buf, 4)
        buf[:] = -1.0
        self.assertTrue(np.array_equal(a, [0.0, 2.0, 4.0, 6.0]))
        self.assertTrue(np.array_equal(b, [1.0, 3.0, 5.0, 7.0]))

    def test_wrong_length_rejected(self):
        for size in (0, 5, 7, 10):
            with self.assertRaises(StructuralBlockError):
                deinterleave(np.zeros(size), 4)

    def test_two_dimensional_buffer_rejected(self):
        with self.assertRaises(StructuralBlockError):
            deinterleave(np.zeros((4, 2)), 4)

    def test_structural_error_is_a_value_error(self):
        self.assertTrue(issubclass(StructuralBlockError, ValueError))


class TestDualChannelDemultiplexer(unittest.TestCase):
    def test_split_round_trips_two_channels(self):
        a = np.sin(np.linspace(0, 1, 100))
        b = np.cos(np.linspace(0, 1, 100))
        buf = np.empty(200)
        buf[0::2] = a
        buf[1::2] = b
        out_a, out_b = DualChannelDemultiplexer(100).split(buf)
        self.assertTrue(np.array_equal(out_a, a))
        self.assertTrue(np.array_equal(out_b, b))

    def test_non_positive_size_rejected(self):
        with self.assertRaises(ValueError):
            DualChannelDemultiplexer(0)


if __name__ == "__main__":
    unittest.main()
