from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from fastapi import Depends

from salon_booking.core.config import settings
from salon_booking.application.exceptions import BackendNotConfiguredError
from salon_booking.application.ports.auth_provider import AuthProviderPort
from salon_booking.application.ports.booking_repository import BookingRepositoryPort
from salon_booking.application.ports.draft_store import DraftStorePort
from salon_booking.application.ports.notifier import EmailSenderPort, SmsSenderPort
from salon_booking.application.ports.payment_gateway import PaymentGatewayPort
from salon_booking.application.ports.profile_repository import ProfileRepositoryPort
from salon_booking.application.ports.service_catalog import ServiceCatalogPort
from salon_booking.application.ports.waitlist_repository import WaitlistRepositoryPort
from salon_booking.application.use_cases.auth import AuthUseCase
from salon_booking.application.use_cases.availability import AvailabilityUseCase
from salon_booking.application.use_cases.booking_wizard import BookingWizardUseCase
from salon_booking.application.use_cases.dashboard import DashboardUseCase
from salon_booking.application.use_cases.notifications import BookingNotifier, SendBookingNotificationUseCase
from salon_booking.application.use_cases.payments import (
    CreateCheckoutSessionUseCase,
    HandlePaymentWebhookUseCase,
    VerifyCheckoutSessionUseCase,
)
from salon_booking.application.utils.slot_rules import OpeningHours
from salon_booking.infrastructure.catalog.service_catalog_store import ServiceCatalogStore
from salon_booking.infrastructure.notifications.mock_sender import MockEmailSender, MockSmsSender
from salon_booking.infrastructure.notifications.resend_client import ResendEmailSender
from salon_booking.infrastructure.notifications.twilio_client import TwilioSmsSender
from salon_booking.infrastructure.store.json_store import JsonDraftStore
from salon_booking.infrastructure.store.memory_backend import (
    MemoryAuthProvider,
    MemoryBookingRepository,
    MemoryProfileRepository,
    MemoryWaitlistRepository,
)
from salon_booking.infrastructure.store.memory_store import MemoryDraftStore
from salon_booking.infrastructure.stripe.mock_gateway import MockPaymentGateway
from salon_booking.infrastructure.stripe.stripe_client import StripeGateway
from salon_booking.infrastructure.supabase.auth_provider import SupabaseAuthProvider
from salon_booking.infrastructure.supabase.booking_repository import SupabaseBookingRepository
from salon_booking.infrastructure.supabase.profile_repository import SupabaseProfileRepository
from salon_booking.infrastructure.supabase.rest_client import SupabaseClient
from salon_booking.infrastructure.supabase.waitlist_repository import SupabaseWaitlistRepository


logger = logging.getLogger(__name__)

_draft_store: MemoryDraftStore | JsonDraftStore | None = None


@lru_cache
def get_supabase_client() -> SupabaseClient | None:
    if not settings.supabase_configured:
        return None
    return SupabaseClient(
        url=settings.SUPABASE_URL,
        service_key=settings.SUPABASE_SERVICE_ROLE_KEY,
        anon_key=settings.SUPABASE_ANON_KEY,
        timeout=settings.HTTP_TIMEOUT,
    )


@lru_cache
def _memory_profiles() -> MemoryProfileRepository:
    return MemoryProfileRepository()


@lru_cache
def _memory_bookings() -> MemoryBookingRepository:
    return MemoryBookingRepository(capacity=settings.SLOT_CAPACITY)


@lru_cache
def _memory_waitlist() -> MemoryWaitlistRepository:
    return MemoryWaitlistRepository()


@lru_cache
def _memory_auth() -> MemoryAuthProvider:
    return MemoryAuthProvider(profiles=_memory_profiles())


def _require_local_backend(what: str) -> None:
    if not settings.is_local:
        raise BackendNotConfiguredError(
            f"Supabase is not configured (SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY missing) for {what}."
        )
    logger.info("Using in-memory %s (Supabase not configured, ENV=%s)", what, settings.ENV)


def get_booking_repository() -> BookingRepositoryPort:
    client = get_supabase_client()
    if client is not None:
        return SupabaseBookingRepository(client)
    _require_local_backend("bookings")
    return _memory_bookings()


def get_waitlist_repository() -> WaitlistRepositoryPort:
    client = get_supabase_client()
    if client is not None:
        return SupabaseWaitlistRepository(client)
    _require_local_backend("waitlist")
    return _memory_waitlist()


def get_profile_repository() -> ProfileRepositoryPort:
    client = get_supabase_client()
    if client is not None:
        return SupabaseProfileRepository(client)
    _require_local_backend("profiles")
    return _memory_profiles()


def get_auth_provider() -> AuthProviderPort:
    client = get_supabase_client()
    if client is not None:
        return SupabaseAuthProvider(client)
    _require_local_backend("auth")
    return _memory_auth()


def get_draft_store() -> DraftStorePort:
    global _draft_store
    if _draft_store is None:
        if settings.is_local:
            _draft_store = JsonDraftStore(settings.DRAFT_STORE_DIR)
        else:
            _draft_store = MemoryDraftStore()
    return _draft_store


def get_service_catalog() -> ServiceCatalogPort:
    return ServiceCatalogStore()


@lru_cache
def get_payment_gateway() -> PaymentGatewayPort | None:
    if settings.STRIPE_SECRET_KEY:
        logger.info("Using real StripeGateway")
        return StripeGateway(
            secret_key=settings.STRIPE_SECRET_KEY,
            base_url=settings.STRIPE_API_BASE,
            timeout=settings.HTTP_TIMEOUT,
        )
    if settings.is_local:
        logger.info("Using MockPaymentGateway (STRIPE_SECRET_KEY missing, ENV=dev/local)")
        return MockPaymentGateway()
    return None


@lru_cache
def get_email_sender() -> EmailSenderPort:
    if not settings.RESEND_API_KEY and settings.is_local:
        return MockEmailSender()
    return ResendEmailSender(
        api_key=settings.RESEND_API_KEY,
        from_email=settings.RESEND_FROM_EMAIL,
        endpoint=settings.RESEND_API_URL,
        timeout=settings.HTTP_TIMEOUT,
    )


@lru_cache
def get_sms_sender() -> SmsSenderPort:
    if not settings.TWILIO_ACCOUNT_SID and settings.is_local:
        return MockSmsSender()
    return TwilioSmsSender(
        account_sid=settings.TWILIO_ACCOUNT_SID,
        auth_token=settings.TWILIO_AUTH_TOKEN,
        from_number=settings.TWILIO_FROM_NUMBER,
        api_base=settings.TWILIO_API_BASE,
        timeout=settings.HTTP_TIMEOUT,
    )


def get_opening_hours() -> OpeningHours:
    return OpeningHours(
        weekdays=frozenset(settings.OPEN_WEEKDAYS),
        open_start=settings.OPEN_START,
        open_end=settings.OPEN_END,
        step_minutes=settings.SLOT_STEP_MINUTES,
        max_days_ahead=settings.MAX_DAYS_AHEAD,
    )


def get_notifier(
    email: EmailSenderPort = Depends(get_email_sender),
    sms: SmsSenderPort = Depends(get_sms_sender),
) -> BookingNotifier:
    return BookingNotifier(email=email, sms=sms, business_name=settings.BUSINESS_NAME)


def get_availability_use_case(
    bookings: BookingRepositoryPort = Depends(get_booking_repository),
) -> AvailabilityUseCase:
    return AvailabilityUseCase(bookings=bookings, hours=get_opening_hours(), capacity=settings.SLOT_CAPACITY)


def get_booking_wizard_use_case(
    drafts: DraftStorePort = Depends(get_draft_store),
    catalog: ServiceCatalogPort = Depends(get_service_catalog),
    bookings: BookingRepositoryPort = Depends(get_booking_repository),
    waitlist: WaitlistRepositoryPort = Depends(get_waitlist_repository),
    availability: AvailabilityUseCase = Depends(get_availability_use_case),
    notifier: BookingNotifier = Depends(get_notifier),
) -> BookingWizardUseCase:
    return BookingWizardUseCase(
        drafts=drafts,
        catalog=catalog,
        bookings=bookings,
        waitlist=waitlist,
        availability=availability,
        notifier=notifier,
        timezone=ZoneInfo(settings.BUSINESS_TIMEZONE),
        business_name=settings.BUSINESS_NAME,
        business_address=settings.BUSINESS_ADDRESS,
    )


def get_dashboard_use_case(
    bookings: BookingRepositoryPort = Depends(get_booking_repository),
    waitlist: WaitlistRepositoryPort = Depends(get_waitlist_repository),
    profiles: ProfileRepositoryPort = Depends(get_profile_repository),
    notifier: BookingNotifier = Depends(get_notifier),
) -> DashboardUseCase:
    return DashboardUseCase(bookings=bookings, waitlist=waitlist, profiles=profiles, notifier=notifier)


def get_auth_use_case(
    provider: AuthProviderPort = Depends(get_auth_provider),
    profiles: ProfileRepositoryPort = Depends(get_profile_repository),
) -> AuthUseCase:
    return AuthUseCase(provider=provider, profiles=profiles)


def get_create_checkout_use_case(
    gateway: PaymentGatewayPort | None = Depends(get_payment_gateway),
    bookings: BookingRepositoryPort = Depends(get_booking_repository),
    profiles: ProfileRepositoryPort = Depends(get_profile_repository),
) -> CreateCheckoutSessionUseCase:
    return CreateCheckoutSessionUseCase(
        gateway=gateway,
        bookings=bookings,
        profiles=profiles,
        allowed_origin=settings.ALLOWED_ORIGIN,
        currency=settings.STRIPE_CURRENCY,
    )


def get_verify_checkout_use_case(
    gateway: PaymentGatewayPort | None = Depends(get_payment_gateway),
    bookings: BookingRepositoryPort = Depends(get_booking_repository),
    profiles: ProfileRepositoryPort = Depends(get_profile_repository),
) -> VerifyCheckoutSessionUseCase:
    return VerifyCheckoutSessionUseCase(gateway=gateway, bookings=bookings, profiles=profiles)


def get_payment_webhook_use_case(
    gateway: PaymentGatewayPort | None = Depends(get_payment_gateway),
    bookings: BookingRepositoryPort = Depends(get_booking_repository),
) -> HandlePaymentWebhookUseCase:
    return HandlePaymentWebhookUseCase(
        gateway=gateway,
        bookings=bookings,
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
    )


def get_send_notification_use_case(
    bookings: BookingRepositoryPort = Depends(get_booking_repository),
    profiles: ProfileRepositoryPort = Depends(get_profile_repository),
    notifier: BookingNotifier = Depends(get_notifier),
) -> SendBookingNotificationUseCase:
    return SendBookingNotificationUseCase(bookings=bookings, profiles=profiles, notifier=notifier)
