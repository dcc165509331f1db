"""
Shared module package.

Contains cross-cutting concerns used across the application:
- Error handling and mapping
- Security (basic auth, headers, rate limiting, request size)
- Logging configuration
"""
