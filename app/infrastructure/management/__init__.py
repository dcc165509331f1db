"""
Management bounded context: infrastructure adapters.

SQLAlchemy Core repositories over the users, projects, tasks and
task_assignees tables, plus the credential verifier and notifier.
"""
