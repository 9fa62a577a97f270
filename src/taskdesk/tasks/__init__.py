"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, TaskDraft, TaskUpdate, ...)
- task_validation.py: field rules, all violations collected
- task_store.py: SQLite-backed whole-collection storage
- task_manager.py: CRUD, filtering, search and statistics
- reminder_service.py: polling loop that fires due reminders
- task_api.py: thin façade accepting plain mappings
"""
