"""
Background Tasks Package.

Reminder polling runs as an asyncio task inside each window:

    from modules.sticky.tasks.reminders import ReminderScheduler

    scheduler = ReminderScheduler(repo, sink)
    scheduler.start()
"""
