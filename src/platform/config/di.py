"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.database.orm_db_setting import Database
from src.platform.state.distributed_lock import DistributedLock
from src.service.cinema_booking.driven_adapter.notification.mock_notification_sender_impl import (
    MockNotificationSenderImpl,
)
from src.service.cinema_booking.driven_adapter.payment.mock_payment_gateway_impl import (
    MockPaymentGatewayImpl,
)
from src.service.cinema_booking.driven_adapter.repo.booking_command_repo_impl import (
    BookingCommandRepoImpl,
)
from src.service.cinema_booking.driven_adapter.repo.booking_query_repo_impl import (
    BookingQueryRepoImpl,
)
from src.service.cinema_booking.driven_adapter.repo.seat_ledger_query_repo_impl import (
    SeatLedgerQueryRepoImpl,
)
from src.service.cinema_booking.driven_adapter.repo.showtime_query_repo_impl import (
    ShowtimeQueryRepoImpl,
)
from src.service.cinema_booking.driven_adapter.state.kvrocks_showtime_lock_impl import (
    KvrocksShowtimeLockImpl,
)
from src.service.cinema_booking.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Database: primary for writes and finalize reads, replica (if any) for listings
    database = providers.Singleton(Database, read_only=False)
    read_database = providers.Singleton(Database, read_only=True)

    # Repositories (stateless - open a session per call)
    booking_command_repo = providers.Singleton(
        BookingCommandRepoImpl, session_factory=database.provided.session
    )
    booking_query_repo = providers.Singleton(
        BookingQueryRepoImpl, session_factory=read_database.provided.session
    )
    seat_ledger_query_repo = providers.Singleton(
        SeatLedgerQueryRepoImpl, session_factory=read_database.provided.session
    )
    showtime_query_repo = providers.Singleton(
        ShowtimeQueryRepoImpl, session_factory=read_database.provided.session
    )

    # Finalize serialization point (Kvrocks)
    distributed_lock = providers.Singleton(DistributedLock)
    showtime_lock = providers.Singleton(KvrocksShowtimeLockImpl, distributed_lock=distributed_lock)

    # External collaborators
    payment_gateway = providers.Singleton(MockPaymentGatewayImpl)
    notification_sender = providers.Singleton(MockNotificationSenderImpl)

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth)


container = Container()
