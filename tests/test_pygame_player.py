import unittest
from pathlib import Path
from unittest import mock

from tonal_karaoke.audio.pygame_player import PygamePlayer, uri_to_path
from tonal_karaoke.core.errors import PlaybackError
from tonal_karaoke.core.events import PlaybackEventType, PlayerState


class FakePygameError(Exception):
    pass


class TestPygamePlayer(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch("tonal_karaoke.audio.pygame_player.pygame")
        self.pygame = patcher.start()
        self.addCleanup(patcher.stop)
        self.pygame.error = FakePygameError
        self.music = self.pygame.mixer.music
        self.music.get_busy.return_value = True

    def test_uri_to_path(self):
        self.assertEqual(uri_to_path("file:///music/a%20b.ogg"), Path("/music/a b.ogg"))
        self.assertEqual(uri_to_path("song.ogg"), Path("song.ogg"))

    def test_mixer_failure(self):
        self.pygame.mixer.init.side_effect = FakePygameError("no audio device")
        with self.assertRaises(PlaybackError):
            PygamePlayer()

    def test_set_uri_and_play(self):
        player = PygamePlayer()
        self.pygame.mixer.init.assert_called_once_with(frequency=44100)

        player.set_uri("file:///music/song.ogg")
        self.music.load.assert_called_once_with(str(Path("/music/song.ogg")))
        event = player.pop_event(1)
        self.assertIs(event.type, PlaybackEventType.STATE_CHANGED)
        self.assertIs(event.new_state, PlayerState.PAUSED)

        player.play()
        event = player.pop_event(1)
        self.assertIs(event.new_state, PlayerState.PLAYING)
        self.assertIsNone(player.pop_event(1))

    def test_play_without_uri(self):
        with self.assertRaises(PlaybackError):
            PygamePlayer().play()

    def test_load_failure(self):
        self.music.load.side_effect = FakePygameError("unsupported format")
        with self.assertRaises(PlaybackError):
            PygamePlayer().set_uri("file:///music/song.xyz")

    def test_end_of_stream(self):
        player = PygamePlayer()
        player.set_uri("song.ogg")
        player.play()
        player.pop_event(1)
        player.pop_event(1)

        self.music.get_busy.return_value = False
        self.assertIs(player.pop_event(1).type, PlaybackEventType.END_OF_STREAM)
        self.assertIsNone(player.pop_event(1))

    def test_stop(self):
        player = PygamePlayer()
        player.set_uri("song.ogg")
        player.pop_event(1)
        player.stop()
        self.music.stop.assert_called_once_with()
        self.assertIs(player.pop_event(1).new_state, PlayerState.NULL)

    def test_close_releases_the_mixer(self):
        player = PygamePlayer()
        player.set_uri("song.ogg")
        player.close()
        player.close()
        self.music.stop.assert_called_once_with()
        self.pygame.mixer.quit.assert_called_once_with()

    def test_position(self):
        player = PygamePlayer()
        self.music.get_pos.return_value = -1
        self.assertIsNone(player.query_position_ms())
        self.music.get_pos.return_value = 1500
        self.assertEqual(player.query_position_ms(), 1500.0)

    def test_duration(self):
        player = PygamePlayer()
        self.assertIsNone(player.query_duration_ms())
        player.set_uri("song.ogg")
        with mock.patch("tonal_karaoke.audio.pygame_player.sf") as soundfile:
            soundfile.info.return_value.duration = 2.5
            self.assertEqual(player.query_duration_ms(), 2500.0)
            soundfile.info.side_effect = RuntimeError("unknown format")
            self.assertIsNone(player.query_duration_ms())


if __name__ == "__main__":
    unittest.main()
