"""
Voice Recorder.

Attaches audio clips to notes. The capture device is an opaque boundary:
start() begins recording, stop() returns one encoded blob. The blob is
stored inline on the note as a ``data:`` URL together with a duration
estimate derived from its size.

A recording that is cancelled, or whose window closes before stop(), is
dropped without writing anything.
"""

import base64
from dataclasses import dataclass
from typing import Protocol

from modules.sticky.core.exceptions import CaptureDeniedError
from modules.sticky.core.logging import get_logger
from modules.sticky.models.note import Note
from modules.sticky.services.note import NoteService

logger = get_logger(__name__)

# Size-based estimate used by existing stores: one second per 16 kB of encoded audio
BYTES_PER_SECOND = 16000


@dataclass
class CapturedAudio:
    """One finished recording."""

    blob: bytes
    mime_type: str = "audio/webm"

    @property
    def duration(self) -> int:
        return round(len(self.blob) / BYTES_PER_SECOND)

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.blob).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


class AudioCapture(Protocol):
    """Recording device boundary."""

    def start(self) -> None:
        """
        Begin recording.

        Raises:
            CaptureDeniedError: If there is no device or permission was refused
        """
        ...

    def stop(self) -> CapturedAudio:
        """Finish recording and return the encoded clip."""
        ...


class VoiceRecorder:
    """Start/stop recording for one window, one clip at a time."""

    def __init__(self, capture: AudioCapture, notes: NoteService) -> None:
        self.capture = capture
        self.notes = notes
        self._recording_note_id: str | None = None

    @property
    def recording_note_id(self) -> str | None:
        return self._recording_note_id

    @property
    def is_recording(self) -> bool:
        return self._recording_note_id is not None

    def toggle(self, note_id: str) -> Note | None:
        """
        Start recording for a note, or stop the running recording and attach it.

        The clip is attached to the note the recording was started for.

        Returns:
            The note with the new clip after a stop, otherwise None

        Raises:
            CaptureDeniedError: If recording cannot start; nothing is attached
        """
        if self.is_recording:
            return self.stop()
        self.start(note_id)
        return None

    def start(self, note_id: str) -> None:
        if self.is_recording:
            return
        try:
            self.capture.start()
        except CaptureDeniedError:
            logger.warning("Audio capture denied", extra={"note_id": note_id})
            raise
        self._recording_note_id = note_id
        logger.debug("Recording started", extra={"note_id": note_id})

    def stop(self) -> Note | None:
        if not self.is_recording:
            return None
        note_id = self._recording_note_id
        self._recording_note_id = None

        audio = self.capture.stop()
        note = self.notes.add_voice_note(note_id, audio.to_data_url(), audio.duration)
        logger.info(
            "Voice note attached",
            extra={"note_id": note_id, "bytes": len(audio.blob), "duration": audio.duration},
        )
        return note

    def cancel(self) -> None:
        """Abandon the running recording without attaching it."""
        if not self.is_recording:
            return
        note_id = self._recording_note_id
        self._recording_note_id = None
        self.capture.stop()
        logger.debug("Recording abandoned", extra={"note_id": note_id})
