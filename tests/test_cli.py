import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from click.testing import CliRunner

from tonal_karaoke.cli.main import main
from tonal_karaoke.core.errors import PlaybackError


class TestCli(unittest.TestCase):
    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.runner = CliRunner()
        self.common_args = [
            "--config-dir",
            str(self.temp_dir / "config"),
            "--log-file",
            str(self.temp_dir / "karaoke.log"),
        ]

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_missing_song_file(self):
        result = self.runner.invoke(main, [str(self.temp_dir / "missing.json")])
        self.assertEqual(result.exit_code, 2)

    def test_song_file_is_required(self):
        result = self.runner.invoke(main, [])
        self.assertEqual(result.exit_code, 2)

    def test_invalid_song_file(self):
        song = self.temp_dir / "song.json"
        song.write_text("{not json", encoding="utf-8")
        result = self.runner.invoke(main, [str(song)] + self.common_args)
        self.assertEqual(result.exit_code, 1)
        self.assertIn("error: could not parse song file", result.output)
        self.assertIn("caused by:", result.output)
        self.assertTrue((self.temp_dir / "config" / "capture.json").exists())
        self.assertTrue((self.temp_dir / "karaoke.log").exists())

    def test_invalid_config(self):
        config_dir = self.temp_dir / "config"
        config_dir.mkdir()
        (config_dir / "capture.json").write_text(json.dumps({"frames": 0}), encoding="utf-8")
        song = self.temp_dir / "song.json"
        song.write_text("{}", encoding="utf-8")
        result = self.runner.invoke(main, [str(song)] + self.common_args)
        self.assertEqual(result.exit_code, 1)
        self.assertIn("error: capture.frames must be a positive integer", result.output)

    def write_song(self):
        song = self.temp_dir / "song.json"
        song.write_text(
            json.dumps(
                {
                    "title": "Example",
                    "artist": "Somebody",
                    "bpm": 120,
                    "audio": "missing.ogg",
                    "lines": [
                        {"notes": [{"type": "regular", "start": 0, "duration": 4, "pitch": 60, "text": "la"}]}
                    ],
                }
            ),
            encoding="utf-8",
        )
        return song

    def test_missing_audio_is_fatal(self):
        song = self.write_song()
        with mock.patch.dict(os.environ, {"SDL_AUDIODRIVER": "dummy"}):
            result = self.runner.invoke(main, [str(song), "--no-mic"] + self.common_args)
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Playing Example by Somebody...", result.output)
        self.assertIn("error:", result.output)

    def test_mixer_is_released_when_audio_fails(self):
        song = self.write_song()
        with mock.patch("tonal_karaoke.audio.pygame_player.PygamePlayer") as player_class:
            player = player_class.return_value
            player.set_uri.side_effect = PlaybackError("can't load audio file missing.ogg")
            result = self.runner.invoke(main, [str(song), "--no-mic"] + self.common_args)
        self.assertEqual(result.exit_code, 1)
        self.assertIn("error: can't load audio file missing.ogg", result.output)
        player.close.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
