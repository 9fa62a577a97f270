"""
taskdesk: a small task list with local persistence and time-based reminders.
"""

__version__ = "0.1.0"
