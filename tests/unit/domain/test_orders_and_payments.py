from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from travel_booking.domain.entities.order import Order, OrderStatus, OrderStatusIntent
from travel_booking.domain.entities.payment import Payment, PaymentMethod, PaymentStatus
from travel_booking.domain.entities.quote import Quote, QuoteItem, ServiceType
from travel_booking.domain.entities.sub_booking import BookingStatus, SubBooking
from travel_booking.domain.errors import (
    InvalidOrderTransitionError,
    PaymentAlreadyProcessedError,
    ValidationError,
)
from travel_booking.domain.value_objects.booking_reference import BookingReference
from travel_booking.domain.value_objects.order_number import OrderNumber, to_base36
from travel_booking.domain.value_objects.traveler import TravelerType, describe_travelers

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def _order(status: OrderStatus = OrderStatus.PENDING) -> Order:
    return Order(
        id="order-1",
        user_id="user-1",
        order_number="ORD-TEST-0001",
        status=status,
        bookings=[
            SubBooking(id="b-1", order_id="order-1", service_type="flight", provider_booking_reference="FLT-000001"),
            SubBooking(id="b-2", order_id="order-1", service_type="hotel", provider_booking_reference="HTL-000001"),
        ],
    )


class TestOrderStateMachine:
    def test_status_intent_mapping(self):
        assert OrderStatusIntent.PENDING.to_status() == OrderStatus.PENDING
        assert OrderStatusIntent.CONFIRMED.to_status() == OrderStatus.CONFIRMED
        assert OrderStatusIntent.UNDER_REVIEW.to_status() == OrderStatus.PROCESSING

    @pytest.mark.parametrize(
        "source, target",
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (OrderStatus.CONFIRMED, OrderStatus.PROCESSING),
            (OrderStatus.PROCESSING, OrderStatus.COMPLETED),
            (OrderStatus.COMPLETED, OrderStatus.REFUNDED),
            (OrderStatus.CANCELLED, OrderStatus.REFUNDED),
        ],
    )
    def test_allowed_transitions(self, source, target):
        order = _order(source)
        order.transition_to(target)
        assert order.status == target

    @pytest.mark.parametrize(
        "source, target",
        [
            (OrderStatus.PENDING, OrderStatus.COMPLETED),
            (OrderStatus.REFUNDED, OrderStatus.PENDING),
            (OrderStatus.COMPLETED, OrderStatus.CONFIRMED),
        ],
    )
    def test_rejected_transitions(self, source, target):
        with pytest.raises(InvalidOrderTransitionError):
            _order(source).transition_to(target)

    def test_cancel_cascades_to_bookings(self):
        order = _order(OrderStatus.CONFIRMED)
        order.cancel(NOW, "changed plans")

        assert order.status == OrderStatus.CANCELLED
        assert order.cancelled_at == NOW
        assert order.cancellation_reason == "changed plans"
        assert all(b.status == BookingStatus.CANCELLED for b in order.bookings)
        assert all(b.cancelled_at == NOW for b in order.bookings)

    def test_cancel_twice_is_rejected(self):
        order = _order(OrderStatus.CANCELLED)
        with pytest.raises(InvalidOrderTransitionError, match="already cancelled"):
            order.cancel(NOW)

    def test_completed_order_cannot_be_cancelled(self):
        with pytest.raises(InvalidOrderTransitionError, match="Completed orders"):
            _order(OrderStatus.COMPLETED).cancel(NOW)

    def test_refund_marks_bookings(self):
        order = _order(OrderStatus.COMPLETED)
        order.refund()
        assert order.status == OrderStatus.REFUNDED
        assert all(b.status == BookingStatus.REFUNDED for b in order.bookings)


class TestPayment:
    def _payment(self, **overrides) -> Payment:
        data = {
            "id": "pay-1",
            "user_id": "user-1",
            "order_id": "order-1",
            "idempotency_key": "idem-1",
            "amount": Decimal("115.00"),
            "method": PaymentMethod.CARD,
        }
        data.update(overrides)
        return Payment(**data)

    def test_card_requires_3ds(self):
        payment = self._payment()
        assert payment.requires_3ds is True
        assert payment.redirect_url == "/payment/3ds/pay-1"
        assert self._payment(method=PaymentMethod.MADA).requires_3ds is False

    def test_complete_then_callback_again_is_rejected(self):
        payment = self._payment()
        payment.complete(NOW, "gw-123")

        assert payment.status == PaymentStatus.COMPLETED
        assert payment.gateway_reference == "gw-123"
        with pytest.raises(PaymentAlreadyProcessedError):
            payment.fail(NOW, "late failure")

    def test_partial_then_full_refund(self):
        payment = self._payment(status=PaymentStatus.COMPLETED)

        assert payment.refund(Decimal("15.00")) is False
        assert payment.status == PaymentStatus.PARTIALLY_REFUNDED
        assert payment.refund() is True
        assert payment.status == PaymentStatus.REFUNDED
        assert payment.refunded_amount == Decimal("115.00")

    def test_refund_above_remaining_is_rejected(self):
        payment = self._payment(status=PaymentStatus.COMPLETED)
        with pytest.raises(ValidationError):
            payment.refund(Decimal("115.01"))

    def test_pending_payment_cannot_be_refunded(self):
        with pytest.raises(PaymentAlreadyProcessedError):
            self._payment().refund()


class TestQuote:
    def test_recalculate_and_expired_items(self):
        quote = Quote(
            id="q-1",
            user_id="user-1",
            items=[
                QuoteItem(id="i-1", service_type=ServiceType.FLIGHT, service_name="A", price=Decimal("60")),
                QuoteItem(
                    id="i-2",
                    service_type=ServiceType.HOTEL,
                    service_name="B",
                    price=Decimal("40"),
                    expires_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
                ),
            ],
        )
        quote.recalculate(Decimal("0.15"))

        assert quote.total == Decimal("115.00")
        assert quote.service_types == ["flight", "hotel"]
        assert [i.id for i in quote.expired_items(NOW)] == ["i-2"]

    def test_clear_promo_resets_discount(self):
        quote = Quote(id="q-1", items=[QuoteItem(id="i-1", price=Decimal("100"))])
        quote.attach_promo("SAVE50", "fixed", Decimal("50"))
        quote.recalculate(Decimal("0"))
        assert quote.discount == Decimal("50.00")

        quote.clear_promo()
        quote.recalculate(Decimal("0"))
        assert quote.discount == Decimal("0.00")
        assert quote.promo_terms is None


class TestValueObjects:
    def test_order_number_format(self):
        number = OrderNumber.generate(timestamp_ms=1_700_000_000_000).value
        prefix, stamp, suffix = number.split("-")

        assert prefix == "ORD"
        assert stamp == to_base36(1_700_000_000_000)
        assert len(suffix) == 4

    def test_booking_reference_uses_last_six_digits(self):
        assert BookingReference.generate("flight", 1_700_000_123_456).value == "FLT-123456"
        assert BookingReference.generate("hajj", 42).value == "HJJ-000042"

    def test_booking_reference_accepts_service_type_enum(self):
        assert BookingReference.generate(ServiceType.FLIGHT, 1_700_000_123_456).value == "FLT-123456"
        assert BookingReference.generate(ServiceType.PACKAGE, 7).value == "PKG-000007"

    def test_traveler_types_by_age_on_service_date(self):
        travelers = describe_travelers(
            [
                {"first_name": "Omar", "last_name": "Ali", "date_of_birth": "1985-06-01"},
                {"firstName": "Lina", "lastName": "Ali", "dateOfBirth": "2015-03-10"},
                {"first_name": "Yusuf", "last_name": "Ali", "date_of_birth": "2024-05-20"},
                {"name": "Huda Ali", "type": "child"},
            ],
            date(2025, 3, 1),
        )

        assert [t["type"] for t in travelers] == ["adult", "child", "infant", "child"]
        assert travelers[1]["name"] == "Lina Ali"
        assert TravelerType("infant") == TravelerType.INFANT

    def test_child_turns_adult_on_birthday(self):
        payload = [{"first_name": "A", "last_name": "B", "date_of_birth": "2013-03-01"}]
        assert describe_travelers(payload, date(2025, 2, 28))[0]["type"] == "child"
        assert describe_travelers(payload, date(2025, 3, 1))[0]["type"] == "adult"

    def test_malformed_date_of_birth_names_the_traveler(self):
        payload = [
            {"first_name": "Omar", "last_name": "Ali", "date_of_birth": "1985-06-01"},
            {"first_name": "Lina", "last_name": "Ali", "dateOfBirth": "10/03/2015"},
        ]

        with pytest.raises(ValidationError) as exc_info:
            describe_travelers(payload, date(2025, 3, 1))

        assert exc_info.value.field == "travelers[1].date_of_birth"
