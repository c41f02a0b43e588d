from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from logistics.config import settings
from logistics.domain.models import OrderStatus, Principal
from logistics.domain.exceptions import DomainException
from logistics.presentation.schemas import (
    OrderCreateRequest, OrderUpdateRequest, OrderStatusRequest, OrderResponse,
    OrderStatResponse, PageResponse, DeletedResponse, ErrorResponse
)
from logistics.presentation.dependencies import get_uow, get_principal
from logistics.presentation.errors import to_http_exception
from logistics.application.expand import OrderView
from logistics.application.create_order import CreateOrderUseCase, CreateOrderDTO
from logistics.application.get_order import GetOrderUseCase
from logistics.application.list_orders import ListOrdersUseCase, ListOrdersDTO
from logistics.application.update_order import UpdateOrderUseCase, UpdateOrderDTO
from logistics.application.change_order_status import ChangeOrderStatusUseCase
from logistics.application.delete_order import DeleteOrderUseCase
from logistics.application.order_stats import OrderStatsUseCase

router = APIRouter(prefix="/orders", tags=["orders"])

_errors = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# Use case factories
def get_create_order_use_case(uow=Depends(get_uow)):
    return CreateOrderUseCase(uow, allow_initial_status=settings.ORDERS_ALLOW_INITIAL_STATUS)


def get_list_orders_use_case(uow=Depends(get_uow)):
    return ListOrdersUseCase(uow)


def get_get_order_use_case(uow=Depends(get_uow)):
    return GetOrderUseCase(uow)


def get_update_order_use_case(uow=Depends(get_uow)):
    return UpdateOrderUseCase(uow)


def get_change_status_use_case(uow=Depends(get_uow)):
    return ChangeOrderStatusUseCase(uow)


def get_delete_order_use_case(uow=Depends(get_uow)):
    return DeleteOrderUseCase(uow)


def get_order_stats_use_case(uow=Depends(get_uow)):
    return OrderStatsUseCase(uow)


@router.post("", response_model=OrderResponse, responses=_errors, status_code=status.HTTP_201_CREATED)
async def create_order(
    request: OrderCreateRequest,
    principal: Principal = Depends(get_principal),
    use_case: CreateOrderUseCase = Depends(get_create_order_use_case)
):
    """Create an order"""
    try:
        dto = CreateOrderDTO(
            truck=request.truck,
            pickup=request.pickup,
            dropoff=request.dropoff,
            status=request.status
        )
        order = await use_case(dto, principal)
        return OrderView.from_order(order)
    except DomainException as e:
        raise to_http_exception(e)


@router.get("", response_model=PageResponse[OrderResponse], responses=_errors)
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, gt=0),
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    truck: Optional[str] = None,
    user: Optional[str] = None,
    expand: bool = False,
    principal: Principal = Depends(get_principal),
    use_case: ListOrdersUseCase = Depends(get_list_orders_use_case)
):
    """List orders, most recent first"""
    try:
        query = ListOrdersDTO(
            page=page, limit=limit, status=status_filter, truck=truck, user=user, expand=expand
        )
        result = await use_case(query, principal)
        return PageResponse[OrderResponse].from_page(result, result.items)
    except DomainException as e:
        raise to_http_exception(e)


@router.get("/stats/status", response_model=List[OrderStatResponse], responses=_errors)
async def order_stats(
    principal: Principal = Depends(get_principal),
    use_case: OrderStatsUseCase = Depends(get_order_stats_use_case)
):
    """Order count per status"""
    stats = await use_case(principal)
    return [OrderStatResponse(status=s.status, total=s.total) for s in stats]


@router.get("/{order_id}", response_model=OrderResponse, responses=_errors)
async def get_order(
    order_id: str,
    expand: bool = False,
    principal: Principal = Depends(get_principal),
    use_case: GetOrderUseCase = Depends(get_get_order_use_case)
):
    """Get an order by id"""
    try:
        return await use_case(order_id, expand=expand, principal=principal)
    except DomainException as e:
        raise to_http_exception(e)


@router.patch("/{order_id}", response_model=OrderResponse, responses=_errors)
async def update_order(
    order_id: str,
    request: OrderUpdateRequest,
    principal: Principal = Depends(get_principal),
    use_case: UpdateOrderUseCase = Depends(get_update_order_use_case)
):
    """Reassign truck, pickup or dropoff"""
    try:
        dto = UpdateOrderDTO(truck=request.truck, pickup=request.pickup, dropoff=request.dropoff)
        order = await use_case(order_id, dto, principal)
        return OrderView.from_order(order)
    except DomainException as e:
        raise to_http_exception(e)


@router.patch("/{order_id}/status", response_model=OrderResponse, responses=_errors)
async def change_order_status(
    order_id: str,
    request: OrderStatusRequest,
    principal: Principal = Depends(get_principal),
    use_case: ChangeOrderStatusUseCase = Depends(get_change_status_use_case)
):
    """Move an order along created -> in_transit -> completed"""
    try:
        order = await use_case(order_id, request.status, principal)
        return OrderView.from_order(order)
    except DomainException as e:
        raise to_http_exception(e)


@router.delete("/{order_id}", response_model=DeletedResponse, responses=_errors)
async def delete_order(
    order_id: str,
    principal: Principal = Depends(get_principal),
    use_case: DeleteOrderUseCase = Depends(get_delete_order_use_case)
):
    """Delete an order"""
    try:
        return await use_case(order_id, principal)
    except DomainException as e:
        raise to_http_exception(e)
