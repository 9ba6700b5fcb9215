"""
Task subsystem.

Components:
- task_models.py: enumerations (TaskStatus, ExecutionOrder)
- task.py: Task tree node, durations, status timers, active/critical path propagation
- task_codec.py: JSON interchange form of task trees
"""
