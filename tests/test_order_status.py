from datetime import datetime, timezone

import pytest

from logistics.domain.models import ALLOWED_TRANSITIONS, Order, OrderStatus, Page, new_id
from logistics.domain.exceptions import InvalidTransitionError
from logistics.application.change_order_status import ChangeStatusDTO


def make_order(status: OrderStatus) -> Order:
    now = datetime.now(timezone.utc)
    return Order(
        id=new_id(), user_id=new_id(), truck_id=new_id(), pickup_id=new_id(), dropoff_id=new_id(),
        status=status, created_at=now, updated_at=now
    )


def test_every_status_has_an_entry():
    assert set(ALLOWED_TRANSITIONS) == set(OrderStatus)


@pytest.mark.parametrize(
    "current,allowed",
    [
        (OrderStatus.CREATED, {OrderStatus.IN_TRANSIT}),
        (OrderStatus.IN_TRANSIT, {OrderStatus.COMPLETED}),
        (OrderStatus.COMPLETED, set()),
    ],
)
def test_transitions_are_directional(current, allowed):
    order = make_order(current)
    for target in OrderStatus:
        assert order.can_transition_to(target) is (target in allowed)


def test_same_state_is_not_a_transition():
    for status in OrderStatus:
        assert not make_order(status).can_transition_to(status)


def test_invalid_transition_names_both_states():
    err = InvalidTransitionError(OrderStatus.CREATED, OrderStatus.COMPLETED)
    assert "created" in str(err)
    assert "completed" in str(err)
    assert err.current == OrderStatus.CREATED
    assert err.requested == OrderStatus.COMPLETED


@pytest.mark.parametrize("raw", ["in_transit", "In Transit", " in-transit ", "IN_TRANSIT"])
def test_status_input_is_normalized(raw):
    assert ChangeStatusDTO(status=raw).status == OrderStatus.IN_TRANSIT


def test_unknown_status_is_rejected():
    with pytest.raises(ValueError):
        ChangeStatusDTO(status="delivered")


@pytest.mark.parametrize(
    "total,limit,pages",
    [(0, 10, 1), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 5, 5), (7, 1, 7), (0, 1, 1)],
)
def test_page_count_has_a_floor_of_one(total, limit, pages):
    assert Page.count_pages(total, limit) == pages
