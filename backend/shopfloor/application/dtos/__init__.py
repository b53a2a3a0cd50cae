"""
Data Transfer Objects for API communication.

All DTOs serialize with camelCase keys.
"""

from .auth_dtos import (
    AuthResponse,
    LoginRequest,
    Message,
    ProfileResponse,
    RegisterRequest,
    RegisterResponse,
    UserDto,
)
from .production_dtos import (
    CreateProductionJobRequest,
    CreateProductionOrderRequest,
    MachineResponse,
    MachineStatisticsResponse,
    OrderStatisticsResponse,
    ProductionJobResponse,
    ProductionOrderResponse,
    ReorderJobsRequest,
    UpdateMachineStatusRequest,
    UpdateProductionJobRequest,
    UpdateProductionOrderRequest,
)

__all__ = [
    # Auth
    "RegisterRequest",
    "LoginRequest",
    "UserDto",
    "AuthResponse",
    "RegisterResponse",
    "ProfileResponse",
    "Message",
    # Production
    "ProductionOrderResponse",
    "CreateProductionOrderRequest",
    "UpdateProductionOrderRequest",
    "OrderStatisticsResponse",
    "ProductionJobResponse",
    "CreateProductionJobRequest",
    "UpdateProductionJobRequest",
    "ReorderJobsRequest",
    "MachineResponse",
    "UpdateMachineStatusRequest",
    "MachineStatisticsResponse",
]
