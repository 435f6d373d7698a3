import importlib
import sys
import types
import unittest
from unittest.mock import MagicMock, patch

import numpy  # noqa: F401  # load before patch.dict so it is not evicted from sys.modules
from timer import AlertError

# Load timer.tone against a stand-in sounddevice so no audio device is needed.
_SOUNDDEVICE = MagicMock()
with patch.dict(sys.modules, {"sounddevice": _SOUNDDEVICE}):
    sys.modules.pop("timer.tone", None)
    tone_module: types.ModuleType = importlib.import_module("timer.tone")


class SynthesizeToneTests(unittest.TestCase):
    def test_sample_count_follows_duration(self) -> None:
        wave = tone_module.synthesize_tone(440.0, 0.5, sample_rate_hz=8000)
        self.assertEqual(4000, len(wave))
        self.assertEqual("float32", str(wave.dtype))

    def test_tone_decays_towards_silence(self) -> None:
        wave = tone_module.synthesize_tone(440.0, 1.0, sample_rate_hz=8000)
        head = float(abs(wave[:400]).max())
        tail = float(abs(wave[-400:]).max())
        self.assertGreater(head, 0.5)
        self.assertLess(tail, 0.01)

    def test_tiny_duration_still_yields_one_sample(self) -> None:
        self.assertEqual(1, len(tone_module.synthesize_tone(440.0, 0.0)))


class SoundDeviceToneOutputTests(unittest.TestCase):
    def setUp(self) -> None:
        _SOUNDDEVICE.reset_mock()
        _SOUNDDEVICE.play.side_effect = None

    def test_play_tone_uses_configured_device_and_volume(self) -> None:
        output = tone_module.SoundDeviceToneOutput(
            duration_seconds=0.1,
            volume=0.25,
            output_device_index=3,
            sample_rate_hz=8000,
        )
        output.play_tone()

        _SOUNDDEVICE.play.assert_called_once()
        args, kwargs = _SOUNDDEVICE.play.call_args
        self.assertEqual(8000, kwargs["samplerate"])
        self.assertEqual(3, kwargs["device"])
        self.assertLessEqual(float(abs(args[0]).max()), 0.25)

    def test_playback_error_becomes_alert_error(self) -> None:
        _SOUNDDEVICE.play.side_effect = RuntimeError("PortAudio not initialized")
        output = tone_module.SoundDeviceToneOutput(duration_seconds=0.1)
        with self.assertRaises(AlertError):
            output.play_tone()


if __name__ == "__main__":
    unittest.main()
