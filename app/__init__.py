"""
Taskboard: user, project and task management API.

Application package root. This is a modular monolith using
hexagonal architecture (ports & adapters) with domain-driven design.

Bounded contexts:
    - management: Users, projects and tasks with their assignments.

Layers:
    - domain: Pure business logic, entities, validation rules, ports (ABCs), errors.
    - application: Services, DTOs, read-view mapping.
    - infrastructure: Adapters (SQLAlchemy repositories, credentials, notifier).
    - interfaces: FastAPI routers, Pydantic schemas.
    - shared: Cross-cutting concerns (errors, security, logging).
"""
