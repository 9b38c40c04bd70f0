"""
Pipeline functions for orchestrating multi-step user operations.
"""

from app.pipelines import user

__all__ = ["user"]
