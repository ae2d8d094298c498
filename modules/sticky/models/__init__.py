# Note domain models
from modules.sticky.models.note import PALETTE, Note, Recurrence, VoiceNote

__all__ = [
    "Note",
    "PALETTE",
    "Recurrence",
    "VoiceNote",
]
