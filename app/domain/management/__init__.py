"""
Management bounded context: domain layer.

This module contains all domain logic for the management context:
- Users, projects and tasks
- Field validation rules
- Task status transition policy
- Password hashing
"""
