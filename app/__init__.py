"""
Rair users service.

This package contains the user-resource implementation:
- models: User document shape and projections
- schemas: Request bodies
- services: Store access, uploads, export, age verification
- pipelines: Orchestration for multi-step handlers
- routers: HTTP endpoints
- config: Application settings

Uses generic infrastructure from the common/ package.
"""

from app.config import settings

__all__ = ["settings"]
