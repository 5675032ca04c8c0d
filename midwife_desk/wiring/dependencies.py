from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from midwife_desk.core.config import settings
from midwife_desk.application.ports.midwife_api import MidwifeApiPort
from midwife_desk.application.ports.service_catalog import ServiceCatalogPort
from midwife_desk.application.use_cases.account import AccountUseCase
from midwife_desk.application.use_cases.bookings_overview import BookingsOverviewUseCase
from midwife_desk.application.use_cases.bulk_cancel import BulkCancelUseCase
from midwife_desk.application.use_cases.client_requests import ClientRequestsUseCase
from midwife_desk.application.use_cases.patient_appointments import PatientAppointmentsUseCase
from midwife_desk.application.use_cases.scheduling import AppointmentSchedulingUseCase
from midwife_desk.application.utils.dates import today_in
from midwife_desk.infrastructure.backend.http_client import MidwifeApiClient
from midwife_desk.infrastructure.backend.mock_backend import build_demo_backend
from midwife_desk.infrastructure.catalog.service_catalog_store import ServiceCatalogStore

DEFAULT_API_BASE_URL = "http://localhost:3000"


def use_mock_backend() -> bool:
    if settings.USE_MOCK_BACKEND:
        return True
    return settings.ENV.lower() in {"dev", "local"} and settings.MIDWIFE_API_BASE_URL == DEFAULT_API_BASE_URL


@lru_cache
def get_midwife_api() -> MidwifeApiPort:
    logger = logging.getLogger(__name__)
    logger.info("ENV=%s", settings.ENV)
    if use_mock_backend():
        logger.info("Using in-memory mock backend")
        return build_demo_backend(today_in(settings.BUSINESS_TIMEZONE))

    logger.info("Using midwife API at %s", settings.MIDWIFE_API_BASE_URL)
    return MidwifeApiClient(
        base_url=settings.MIDWIFE_API_BASE_URL,
        timeout=settings.MIDWIFE_API_TIMEOUT_SECONDS,
    )


def get_service_catalog() -> ServiceCatalogPort:
    return ServiceCatalogStore(default_duration=settings.DEFAULT_SERVICE_DURATION_MINUTES)


def get_timezone() -> ZoneInfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


def get_scheduling_use_case() -> AppointmentSchedulingUseCase:
    return AppointmentSchedulingUseCase(
        api=get_midwife_api(),
        catalog=get_service_catalog(),
        timezone=get_timezone(),
        step_minutes=settings.CUSTOM_TIME_STEP_MINUTES,
        detect_overlaps=settings.SLOT_OVERLAP_CHECK,
    )


def get_patient_appointments_use_case() -> PatientAppointmentsUseCase:
    return PatientAppointmentsUseCase(api=get_midwife_api())


def get_bulk_cancel_use_case() -> BulkCancelUseCase:
    return BulkCancelUseCase(api=get_midwife_api(), timezone=get_timezone())


def get_client_requests_use_case() -> ClientRequestsUseCase:
    return ClientRequestsUseCase(api=get_midwife_api(), scheduling=get_scheduling_use_case())


def get_bookings_overview_use_case() -> BookingsOverviewUseCase:
    return BookingsOverviewUseCase(api=get_midwife_api(), timezone=get_timezone())


def get_account_use_case() -> AccountUseCase:
    return AccountUseCase(api=get_midwife_api())
