import shutil
import tempfile
import unittest
from pathlib import Path

import numpy as np
import soundfile as sf

from tonal_karaoke.audio.wav_input import WavFileCapture
from tonal_karaoke.core.errors import CaptureError

SAMPLE_RATE = 8000


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestWavFileCapture(unittest.TestCase):
    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.path = self.temp_dir / "take.wav"
        self.data = (np.arange(1000) * 7 % 2000 - 1000).astype(np.int16)
        sf.write(str(self.path), self.data, SAMPLE_RATE, subtype="PCM_16")
        self.clock = FakeClock()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_open_reads_sample_rate(self):
        capture = WavFileCapture(str(self.path), clock=self.clock)
        capture.open()
        self.assertEqual(capture.sample_rate, SAMPLE_RATE)

    def test_samples_arrive_in_real_time(self):
        capture = WavFileCapture(str(self.path), clock=self.clock)
        capture.open()
        capture.start()
        self.assertEqual(capture.samples_available(), 0)

        self.clock.now = 0.05
        self.assertEqual(capture.samples_available(), 400)
        np.testing.assert_array_equal(capture.read(300), self.data[:300])
        self.assertEqual(capture.samples_available(), 100)
        with self.assertRaises(CaptureError):
            capture.read(200)

    def test_recording_ends(self):
        capture = WavFileCapture(str(self.path), clock=self.clock)
        capture.open()
        capture.start()
        self.clock.now = 10.0
        self.assertEqual(capture.samples_available(), 1000)

    def test_loop_wraps_around(self):
        capture = WavFileCapture(str(self.path), loop=True, clock=self.clock)
        capture.open()
        capture.start()
        self.clock.now = 0.25
        capture.read(900)
        block = capture.read(200)
        np.testing.assert_array_equal(block[:100], self.data[900:])
        np.testing.assert_array_equal(block[100:], self.data[:100])

    def test_gain_clips(self):
        capture = WavFileCapture(str(self.path), gain=100.0, clock=self.clock)
        capture.open()
        capture.start()
        self.clock.now = 1.0
        block = capture.read(1000)
        self.assertEqual(block.dtype, np.int16)
        self.assertEqual(block.max(), 32767)
        self.assertEqual(block.min(), -32768)

    def test_start_before_open(self):
        with self.assertRaises(CaptureError):
            WavFileCapture(str(self.path)).start()

    def test_missing_file(self):
        with self.assertRaises(CaptureError):
            WavFileCapture(str(self.temp_dir / "missing.wav")).open()


if __name__ == "__main__":
    unittest.main()
