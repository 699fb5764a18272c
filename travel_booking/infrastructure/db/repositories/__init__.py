from travel_booking.infrastructure.db.repositories.order_repo_sql import OrderRepoSQL
from travel_booking.infrastructure.db.repositories.outbox_repo_sql import OutboxRepoSQL
from travel_booking.infrastructure.db.repositories.payment_repo_sql import PaymentRepoSQL
from travel_booking.infrastructure.db.repositories.promo_code_repo_sql import PromoCodeRepoSQL
from travel_booking.infrastructure.db.repositories.quote_repo_sql import QuoteRepoSQL

__all__ = [
    "OrderRepoSQL",
    "OutboxRepoSQL",
    "PaymentRepoSQL",
    "PromoCodeRepoSQL",
    "QuoteRepoSQL",
]
