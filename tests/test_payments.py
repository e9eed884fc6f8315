"""Payment events and their effect on fulfillment status."""

import pytest

from services.order_service.exceptions import OrderNotFound
from services.payment_service.schemas import PaymentEvent
from services.payment_service.service import PaymentService


@pytest.fixture
async def buyer(marketplace):
    return await marketplace.buyer()


class TestPaymentEvents:
    async def test_deposit_moves_pending_order_to_processing(self, db, marketplace, buyer):
        order = await marketplace.order(buyer, status="pending", total_amount=100)

        updated = await PaymentService.apply_event(db, order.id, PaymentEvent.DEPOSIT_PAID, "txn-1")

        assert updated.status == "processing"
        assert updated.payment_status == "deposit_paid"
        assert updated.deposit_paid_at is not None
        assert updated.transaction_id == "txn-1"

    async def test_full_payment_is_held_in_escrow(self, db, marketplace, buyer):
        order = await marketplace.order(buyer, status="confirmed", total_amount=100)

        updated = await PaymentService.apply_event(db, order.id, PaymentEvent.FULL_PAID)

        assert updated.status == "processing"
        assert updated.payment_status == "escrow_hold"
        assert updated.full_payment_paid_at is not None

    async def test_escrow_hold_leaves_fulfillment_alone(self, db, marketplace, buyer):
        order = await marketplace.order(buyer, status="pending", total_amount=100)

        updated = await PaymentService.apply_event(db, order.id, PaymentEvent.ESCROW_HOLD)

        assert updated.status == "pending"
        assert updated.payment_status == "escrow_hold"

    @pytest.mark.parametrize("status", ["shipped", "out_for_delivery", "delivered"])
    async def test_late_payment_never_rewinds_fulfillment(self, db, marketplace, buyer, status):
        order = await marketplace.order(buyer, status=status, total_amount=100)

        updated = await PaymentService.apply_event(db, order.id, PaymentEvent.FULL_PAID)

        assert updated.status == status
        assert updated.payment_status == "escrow_hold"

    @pytest.mark.parametrize("status", ["cancelled", "returned"])
    async def test_void_orders_stay_void(self, db, marketplace, buyer, status):
        order = await marketplace.order(buyer, status=status, total_amount=100)

        updated = await PaymentService.apply_event(db, order.id, PaymentEvent.DEPOSIT_PAID)

        assert updated.status == status
        assert updated.payment_status == "deposit_paid"

    async def test_unknown_order(self, db):
        with pytest.raises(OrderNotFound):
            await PaymentService.apply_event(db, 31337, PaymentEvent.DEPOSIT_PAID)
