"""
Scheduled task execution for time-delayed actions.

- **deletion_scheduler.py**: Deletes short-lived bot messages (blacklist
  warnings) after a delay. Min-heap ordered, cancellable, drops pending work
  on shutdown.
"""
