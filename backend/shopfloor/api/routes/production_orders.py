"""
Production Orders API Routes.

CRUD and summary statistics for production orders. Deleting an order hides it
and its jobs (soft delete).
"""

from fastapi import APIRouter, Response, status

from shopfloor.api.deps import CurrentClaims, OrderServiceDep
from shopfloor.application.dtos import (
    CreateProductionOrderRequest,
    OrderStatisticsResponse,
    ProductionOrderResponse,
    UpdateProductionOrderRequest,
)
from shopfloor.services.production import order_response

router = APIRouter(prefix="/productionorders", tags=["production-orders"])


@router.get(
    "",
    summary="List production orders",
    description="All orders, newest first, each with its jobs in queue order.",
    response_model=list[ProductionOrderResponse],
)
def list_production_orders(
    service: OrderServiceDep, _: CurrentClaims
) -> list[ProductionOrderResponse]:
    return service.list_orders()


@router.get(
    "/statistics",
    summary="Production order statistics",
    response_model=OrderStatisticsResponse,
)
def get_statistics(service: OrderServiceDep, _: CurrentClaims) -> OrderStatisticsResponse:
    return service.statistics()


@router.get(
    "/{order_id}",
    summary="Get production order",
    response_model=ProductionOrderResponse,
    responses={404: {"description": "Order not found"}},
)
def get_production_order(
    order_id: int, service: OrderServiceDep, _: CurrentClaims
) -> ProductionOrderResponse:
    return order_response(service.get_order(order_id))


@router.post(
    "",
    summary="Create production order",
    description="Allocates the next order number and creates the order as pending.",
    response_model=ProductionOrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid order data"}},
)
def create_production_order(
    request: CreateProductionOrderRequest,
    response: Response,
    service: OrderServiceDep,
    claims: CurrentClaims,
) -> ProductionOrderResponse:
    order = service.create_order(request, created_by=claims.get("name"))
    response.headers["Location"] = f"/api/productionorders/{order.id}"
    return order_response(order)


@router.put(
    "/{order_id}",
    summary="Update production order",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Order not found"}},
)
def update_production_order(
    order_id: int,
    request: UpdateProductionOrderRequest,
    service: OrderServiceDep,
    _: CurrentClaims,
) -> Response:
    service.update_order(order_id, request)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{order_id}",
    summary="Delete production order",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Order not found"}},
)
def delete_production_order(
    order_id: int, service: OrderServiceDep, _: CurrentClaims
) -> Response:
    service.delete_order(order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
