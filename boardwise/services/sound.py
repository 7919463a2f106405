"""Sound playback (placeholder: sound names are logged, not played)."""

import logging

logger = logging.getLogger(__name__)


class SoundPlayer:
    """Plays named sounds. Subclass to hook real audio; the base class only logs."""

    def play(self, sound_name: str) -> None:
        logger.debug("PLAY_SOUND_EVENT: %s", sound_name)


class RecordingSoundPlayer(SoundPlayer):
    """Keeps the names of played sounds in order."""

    def __init__(self):
        self.played: list[str] = []

    def play(self, sound_name: str) -> None:
        self.played.append(sound_name)
        super().play(sound_name)
