"""
Application Modules.

- sticky/: Sticky notes core (storage, repository, broadcast, reminders, lock, voice)
"""
