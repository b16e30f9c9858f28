"""
Task subsystem.

Components:
- errors.py: scheduler error kinds (InvalidDelay, UnknownTask, ...)
- task_models.py: data structures (Task, TaskState, TaskHandle)
- task_scheduler.py: the dispatch loop (Scheduler) and its asyncio driver
- task_api.py: small high-level helpers for common chain shapes
"""
