from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from travel_booking.application.interfaces.id_generator import IdGenerator
from travel_booking.application.use_cases.get_cart import CartMutation
from travel_booking.domain.entities.quote import Quote, QuoteItem, ServiceType
from travel_booking.domain.errors import ValidationError
from travel_booking.domain.value_objects.money import round_money
from travel_booking.domain.value_objects.traveler import describe_travelers


@dataclass
class AddCartItemCommand:
    service_type: ServiceType
    service_id: str
    service_name: str
    price: Decimal
    service_details: dict[str, Any] = field(default_factory=dict)
    travelers: list[dict[str, Any]] | None = None
    currency: str | None = None
    expires_at: datetime | None = None
    service_date: date | None = None


class AddCartItemUseCase(CartMutation):
    def __init__(self, *args: Any, id_generator: IdGenerator, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._id_generator = id_generator

    async def execute(self, user_id: str, command: AddCartItemCommand) -> Quote:
        if command.price is None or command.price < 0:
            raise ValidationError("price", "Price must be 0 or greater")

        async with self._transaction_manager.start():
            quote = await self._draft_loader.load(user_id)
            currency = (command.currency or quote.currency).upper()
            if currency != quote.currency:
                raise ValidationError(
                    "currency", f"Item currency {currency} does not match cart currency {quote.currency}"
                )

            now = self._clock.now()
            reference_date = command.service_date or now.date()
            item = await self._quote_repo.add_item(
                QuoteItem(
                    id=self._id_generator.new_id(),
                    quote_id=quote.id,
                    service_type=ServiceType(command.service_type),
                    service_id=command.service_id,
                    service_name=command.service_name,
                    service_details=dict(command.service_details or {}),
                    travelers=describe_travelers(command.travelers, reference_date)
                    if command.travelers
                    else None,
                    price=round_money(command.price),
                    currency=currency,
                    expires_at=command.expires_at,
                    created_at=now,
                )
            )
            quote.items.append(item)
            quote = await self._recalculate_and_save(quote)

        self._logger.info(
            "Cart item added",
            extra={"quote_id": quote.id, "item_id": item.id, "service_type": item.service_type.value},
        )
        return quote
