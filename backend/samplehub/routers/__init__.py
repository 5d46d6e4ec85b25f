"""
API Routers module.
"""
from samplehub.routers import admins, catalog, health, users

__all__ = ["admins", "catalog", "health", "users"]
