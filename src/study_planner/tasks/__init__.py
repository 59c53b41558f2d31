"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority) and input coercion
- task_store.py: per-user task list persisted in a KeyValueStore
- export.py: JSON export/import of a task list (study_plan_tasks.json)
"""
