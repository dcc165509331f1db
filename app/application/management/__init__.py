"""
Application layer for the management bounded context.

One service per entity (users, projects, tasks) composes the validation
rules, the transition policy and the repository ports.
"""
