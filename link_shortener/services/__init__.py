"""Service layer for the link shortener.

This package contains service classes implementing the business logic of the application.
Services orchestrate interactions between repositories and provide domain-specific operations:

- ``allocator``: short code allocation
- ``links``: link management and redirect resolution
- ``clicks``: fire-and-forget click counting
- ``auth``: accounts and access tokens
"""
