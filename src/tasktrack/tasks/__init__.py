"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, Priority, Recurrence)
- recurrence.py: next due date for recurring tasks
- task_store.py: in-memory collection with trash/undo, bulk ops and rollover
- views.py: filter/sort helpers for listings
"""
