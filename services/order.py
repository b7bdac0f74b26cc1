import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_commit
from enums.order_status import OrderStatus
from enums.return_status import ReturnAction, ReturnStatus
from exceptions.order import InvalidOrderInputException, InvalidOrderStateException, OrderNotFoundException
from models.order import OrderDTO
from repositories.order import OrderRepository
from utils.order_state_machine import OrderStateMachine

logger = logging.getLogger(__name__)


class OrderService:

    @staticmethod
    async def get_order(order_id: int, session: Session | AsyncSession) -> OrderDTO:
        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        return order

    @staticmethod
    async def get_orders_for_user(user_id: str, session: Session | AsyncSession) -> list[OrderDTO]:
        return await OrderRepository.get_by_user_id(user_id, session)

    @staticmethod
    async def _get_owned_order(order_id: int, user_id: str, session: Session | AsyncSession) -> OrderDTO:
        # Someone else's order is reported exactly like a missing one
        order = await OrderRepository.get_by_id_for_user(order_id, user_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        return order

    @staticmethod
    def _check_transition(order: OrderDTO, new_status: OrderStatus, by_admin: bool) -> None:
        if not OrderStateMachine.validate_transition(order.id, order.order_status, new_status, by_admin=by_admin):
            allowed = [s.value for s in OrderStateMachine.get_valid_transitions(order.order_status)]
            raise InvalidOrderStateException(
                order.id,
                order.order_status.value,
                f"one of: {', '.join(allowed)}" if allowed else "non-final status"
            )

    @staticmethod
    async def update_status(
        order_id: int,
        new_status: OrderStatus,
        session: Session | AsyncSession,
        note: str | None = None
    ) -> OrderDTO:
        """
        Admin status change with a timeline entry.

        Raises:
            OrderNotFoundException: If the order doesn't exist
            InvalidOrderStateException: If the transition is not allowed
        """
        order = await OrderService.get_order(order_id, session)
        OrderService._check_transition(order, new_status, by_admin=True)

        updated = await OrderRepository.update(
            order_id,
            {'order_status': new_status},
            session,
            timeline_status=new_status.value,
            timeline_note=note or f"Status updated to {new_status.value}"
        )
        await session_commit(session)
        return updated

    @staticmethod
    async def add_tracking(
        order_id: int,
        carrier: str,
        tracking_code: str,
        session: Session | AsyncSession,
        tracking_url: str | None = None
    ) -> OrderDTO:
        """
        Attach carrier tracking and move the order to SHIPPED.

        Raises:
            InvalidOrderInputException: If carrier or tracking code is blank
            OrderNotFoundException: If the order doesn't exist
            InvalidOrderStateException: If the order can no longer ship
        """
        if not carrier or not carrier.strip() or not tracking_code or not tracking_code.strip():
            raise InvalidOrderInputException("carrier and tracking code are required")

        order = await OrderService.get_order(order_id, session)
        OrderService._check_transition(order, OrderStatus.SHIPPED, by_admin=True)

        updated = await OrderRepository.update(
            order_id,
            {
                'order_status': OrderStatus.SHIPPED,
                'tracking_carrier': carrier.strip(),
                'tracking_code': tracking_code.strip(),
                'tracking_url': tracking_url,
            },
            session,
            timeline_status=OrderStatus.SHIPPED.value,
            timeline_note=f"Order shipped via {carrier.strip()}. Tracking: {tracking_code.strip()}"
        )
        await session_commit(session)
        logger.info(f"Tracking added to order {order_id}: {carrier.strip()} {tracking_code.strip()}")
        return updated

    @staticmethod
    async def cancel_by_customer(
        order_id: int,
        user_id: str,
        reason: str,
        session: Session | AsyncSession
    ) -> OrderDTO:
        """
        Customer cancellation, allowed only while the order is PROCESSING.

        Raises:
            OrderNotFoundException: If the order doesn't exist or belongs to another user
            InvalidOrderStateException: If the order is past PROCESSING
        """
        order = await OrderService._get_owned_order(order_id, user_id, session)
        if order.order_status != OrderStatus.PROCESSING:
            raise InvalidOrderStateException(order_id, order.order_status.value, OrderStatus.PROCESSING.value)
        OrderService._check_transition(order, OrderStatus.CANCELLED, by_admin=False)

        updated = await OrderRepository.update(
            order_id,
            {
                'order_status': OrderStatus.CANCELLED,
                'cancellation_reason': reason,
                'cancelled_at': datetime.now(),
            },
            session,
            timeline_status=OrderStatus.CANCELLED.value,
            timeline_note=f"Order cancelled by customer. Reason: {reason}"
        )
        await session_commit(session)
        logger.info(f"Order {order_id} cancelled by user {user_id}")
        return updated

    @staticmethod
    async def request_return(
        order_id: int,
        user_id: str,
        reason: str,
        session: Session | AsyncSession
    ) -> OrderDTO:
        """
        Customer return request, allowed only for DELIVERED orders.

        Raises:
            OrderNotFoundException: If the order doesn't exist or belongs to another user
            InvalidOrderStateException: If the order is not DELIVERED
        """
        order = await OrderService._get_owned_order(order_id, user_id, session)
        if order.order_status != OrderStatus.DELIVERED:
            raise InvalidOrderStateException(order_id, order.order_status.value, OrderStatus.DELIVERED.value)
        OrderService._check_transition(order, OrderStatus.RETURN_REQUESTED, by_admin=False)

        updated = await OrderRepository.update(
            order_id,
            {
                'order_status': OrderStatus.RETURN_REQUESTED,
                'return_reason': reason,
                'return_status': ReturnStatus.PENDING,
                'return_requested_at': datetime.now(),
            },
            session,
            timeline_status=OrderStatus.RETURN_REQUESTED.value,
            timeline_note=f"Return requested by customer. Reason: {reason}"
        )
        await session_commit(session)
        logger.info(f"Return requested for order {order_id} by user {user_id}")
        return updated

    @staticmethod
    async def handle_return(
        order_id: int,
        action: ReturnAction,
        session: Session | AsyncSession,
        refund_amount: float | None = None
    ) -> OrderDTO:
        """
        Admin decision on a return request.

        APPROVED  : RETURN_REQUESTED -> RETURNED, pickup to be scheduled
        REJECTED  : RETURN_REQUESTED -> DELIVERED
        COMPLETED : RETURN_REQUESTED or approved RETURNED -> RETURNED with refund

        Raises:
            OrderNotFoundException: If the order doesn't exist
            InvalidOrderStateException: If there is no open return to act on
            InvalidOrderInputException: If a completed return has no valid refund amount
        """
        order = await OrderService.get_order(order_id, session)
        current = order.order_status

        if action == ReturnAction.COMPLETED:
            if refund_amount is None or refund_amount < 0 or refund_amount > order.total_amount:
                raise InvalidOrderInputException(
                    f"refund amount must be between 0 and {order.total_amount:.2f} (got {refund_amount})"
                )
            approved_return = current == OrderStatus.RETURNED and order.return_status == ReturnStatus.APPROVED
            if current != OrderStatus.RETURN_REQUESTED and not approved_return:
                raise InvalidOrderStateException(order_id, current.value, OrderStatus.RETURN_REQUESTED.value)
            values = {
                'order_status': OrderStatus.RETURNED,
                'return_status': ReturnStatus.COMPLETED,
                'refund_amount': refund_amount,
            }
            timeline_status = "REFUNDED"
            timeline_note = f"Return completed. Refund of ₹{refund_amount:.2f} processed."
        else:
            if current != OrderStatus.RETURN_REQUESTED:
                raise InvalidOrderStateException(order_id, current.value, OrderStatus.RETURN_REQUESTED.value)
            if action == ReturnAction.APPROVED:
                new_status = OrderStatus.RETURNED
                timeline_status = "RETURN_APPROVED"
                timeline_note = "Return request approved. Pickup will be scheduled."
            else:
                new_status = OrderStatus.DELIVERED
                timeline_status = "RETURN_REJECTED"
                timeline_note = "Return request rejected."
            OrderService._check_transition(order, new_status, by_admin=True)
            values = {
                'order_status': new_status,
                'return_status': ReturnStatus(action.value),
            }

        updated = await OrderRepository.update(
            order_id,
            values,
            session,
            timeline_status=timeline_status,
            timeline_note=timeline_note
        )
        await session_commit(session)
        logger.info(f"Return for order {order_id} {action.value.lower()}")
        return updated
