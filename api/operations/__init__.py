"""Operations layer for the archive signature core.

This package handles administrator-triggered maintenance:
- Component re-indexing (ComponentReindexer)

Principles:
- Single Responsibility Principle
- Dependency Injection
"""
