"""SQLModel database models for the application."""

from sqlmodel import SQLModel  # Required for metadata.create_all

from .base import JobStatus, MachineStatus, OrderStatus, Priority
from .production import Machine, ProductionJob, ProductionOrder
from .user import User

__all__ = [
    "SQLModel",
    # Enums
    "Priority",
    "OrderStatus",
    "JobStatus",
    "MachineStatus",
    # Production models
    "Machine",
    "ProductionOrder",
    "ProductionJob",
    # User management models
    "User",
]
