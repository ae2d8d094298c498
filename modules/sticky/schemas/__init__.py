# Pydantic schemas package
from modules.sticky.schemas.note import TEMPLATES, NoteTemplate, NoteUpdate, get_template
from modules.sticky.schemas.notification import ReminderNotification

__all__ = [
    "NoteTemplate",
    "NoteUpdate",
    "ReminderNotification",
    "TEMPLATES",
    "get_template",
]
