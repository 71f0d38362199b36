# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta
from functools import cached_property

from medcourier.application.services.fleet_visibility import FleetVisibilityService
from medcourier.application.services.password_hashing import WerkzeugPasswordHasher
from medcourier.application.use_cases.accounts.drivers import DriverAccounts
from medcourier.application.use_cases.accounts.notifications import NotificationInbox
from medcourier.application.use_cases.accounts.shippers import FacilityCatalog, ShipperAccounts
from medcourier.application.use_cases.admin.create_admin import CreateAdminUseCase
from medcourier.application.use_cases.admin.dashboard_stats import GetDashboardStatsUseCase
from medcourier.application.use_cases.admin.lockouts import (
    CleanupAuthUseCase,
    ClearLockoutUseCase,
    ListLockedAccountsUseCase,
)
from medcourier.application.use_cases.auth.change_password import ChangePasswordUseCase
from medcourier.application.use_cases.auth.login import LoginUseCase
from medcourier.application.use_cases.auth.password_reset import (
    ForgotPasswordUseCase,
    ResetPasswordUseCase,
)
from medcourier.application.use_cases.auth.resolve_session import ResolveSessionUseCase
from medcourier.application.use_cases.auth.signup import SignupUseCase
from medcourier.application.use_cases.compliance.reminders import ComplianceRemindersUseCase
from medcourier.application.use_cases.compliance.vehicle_expiry import VehicleExpiryCheckUseCase
from medcourier.application.use_cases.geocoding.lookup import (
    GeocodeAddressUseCase,
    ReverseGeocodeUseCase,
)
from medcourier.application.use_cases.invoices.generate import GenerateInvoiceUseCase
from medcourier.application.use_cases.invoices.manage import (
    InvoiceQueries,
    UpdateInvoiceStatusUseCase,
)
from medcourier.application.use_cases.loads.create import CreateLoadUseCase
from medcourier.application.use_cases.loads.documents import LoadDocuments
from medcourier.application.use_cases.loads.lifecycle import (
    AcceptQuoteUseCase,
    AssignDriverUseCase,
    CancelLoadUseCase,
    QuoteLoadUseCase,
    RateDriverUseCase,
    UpdateLoadStatusUseCase,
)
from medcourier.application.use_cases.loads.queries import (
    GetLoadUseCase,
    ListLoadsUseCase,
    TrackLoadUseCase,
)
from medcourier.infrastructure.auth.login_attempts import SqlAlchemyLoginAttemptStore
from medcourier.infrastructure.auth.password_reset import SqlAlchemyResetTokenStore
from medcourier.infrastructure.auth.session_cookie import SessionCookieCodec, build_session_codec
from medcourier.infrastructure.cache import InMemoryTTLCache
from medcourier.infrastructure.db import SessionFactory
from medcourier.infrastructure.geocoding import GoogleGeocodingClient
from medcourier.infrastructure.mailer import LoggingMailer
from medcourier.infrastructure.repositories.accounts import (
    SqlAlchemyAccountRepository,
    SqlAlchemyFleetMemberRepository,
)
from medcourier.infrastructure.repositories.compliance import SqlAlchemyComplianceRepository
from medcourier.infrastructure.repositories.drivers import SqlAlchemyDriverRepository
from medcourier.infrastructure.repositories.invoices import SqlAlchemyInvoiceRepository
from medcourier.infrastructure.repositories.loads import SqlAlchemyLoadRepository
from medcourier.infrastructure.repositories.notifications import (
    SqlAlchemyNotificationRepository,
)
from medcourier.infrastructure.repositories.shippers import (
    SqlAlchemyFacilityRepository,
    SqlAlchemyShipperRepository,
)
from medcourier.interfaces.http.controllers.admin_controller import AdminController
from medcourier.interfaces.http.controllers.auth_controller import AuthController
from medcourier.interfaces.http.controllers.compliance_controller import ComplianceController
from medcourier.interfaces.http.controllers.drivers_controller import DriversController
from medcourier.interfaces.http.controllers.geocoding_controller import GeocodingController
from medcourier.interfaces.http.controllers.invoices_controller import InvoicesController
from medcourier.interfaces.http.controllers.loads_controller import LoadsController
from medcourier.interfaces.http.controllers.misc_controller import MiscController
from medcourier.interfaces.http.controllers.notifications_controller import (
    NotificationsController,
)
from medcourier.interfaces.http.controllers.shippers_controller import ShippersController
from medcourier.shared.config import AppConfig, load_config


class Container:
    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config

    @cached_property
    def config(self) -> AppConfig:
        return self._config or load_config()

    # Infrastructure

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher()

    @cached_property
    def cache(self) -> InMemoryTTLCache:
        return InMemoryTTLCache(
            ttl_seconds=self.config.cache.ttl_seconds, max_size=self.config.cache.max_size
        )

    @cached_property
    def session_codec(self) -> SessionCookieCodec:
        return build_session_codec(self.config)

    @cached_property
    def mailer(self) -> LoggingMailer:
        return LoggingMailer()

    @cached_property
    def geocoding_client(self) -> GoogleGeocodingClient:
        return GoogleGeocodingClient.from_config(self.config, self.cache)

    @cached_property
    def login_attempts(self) -> SqlAlchemyLoginAttemptStore:
        return SqlAlchemyLoginAttemptStore.from_config(SessionFactory, self.config)

    @cached_property
    def reset_tokens(self) -> SqlAlchemyResetTokenStore:
        return SqlAlchemyResetTokenStore(
            SessionFactory, ttl=timedelta(minutes=self.config.password_reset.token_ttl_minutes)
        )

    # Repositories

    @cached_property
    def account_repository(self) -> SqlAlchemyAccountRepository:
        return SqlAlchemyAccountRepository(SessionFactory)

    @cached_property
    def fleet_member_repository(self) -> SqlAlchemyFleetMemberRepository:
        return SqlAlchemyFleetMemberRepository(SessionFactory)

    @cached_property
    def driver_repository(self) -> SqlAlchemyDriverRepository:
        return SqlAlchemyDriverRepository(SessionFactory)

    @cached_property
    def shipper_repository(self) -> SqlAlchemyShipperRepository:
        return SqlAlchemyShipperRepository(SessionFactory)

    @cached_property
    def facility_repository(self) -> SqlAlchemyFacilityRepository:
        return SqlAlchemyFacilityRepository(SessionFactory)

    @cached_property
    def load_repository(self) -> SqlAlchemyLoadRepository:
        return SqlAlchemyLoadRepository(SessionFactory)

    @cached_property
    def invoice_repository(self) -> SqlAlchemyInvoiceRepository:
        return SqlAlchemyInvoiceRepository(SessionFactory)

    @cached_property
    def notification_repository(self) -> SqlAlchemyNotificationRepository:
        return SqlAlchemyNotificationRepository(SessionFactory)

    @cached_property
    def compliance_repository(self) -> SqlAlchemyComplianceRepository:
        return SqlAlchemyComplianceRepository(SessionFactory)

    # Services and use cases

    @cached_property
    def fleet_visibility(self) -> FleetVisibilityService:
        return FleetVisibilityService(self.fleet_member_repository)

    @cached_property
    def login_use_case(self) -> LoginUseCase:
        return LoginUseCase(
            accounts=self.account_repository,
            attempts=self.login_attempts,
            password_hasher=self.password_hasher,
            sessions=self.session_codec,
        )

    @cached_property
    def signup_use_case(self) -> SignupUseCase:
        return SignupUseCase(
            accounts=self.account_repository,
            password_hasher=self.password_hasher,
            sessions=self.session_codec,
        )

    @cached_property
    def resolve_session_use_case(self) -> ResolveSessionUseCase:
        return ResolveSessionUseCase(accounts=self.account_repository, sessions=self.session_codec)

    @cached_property
    def forgot_password_use_case(self) -> ForgotPasswordUseCase:
        return ForgotPasswordUseCase(
            accounts=self.account_repository,
            tokens=self.reset_tokens,
            mailer=self.mailer,
            public_base_url=self.config.public_base_url,
        )

    @cached_property
    def reset_password_use_case(self) -> ResetPasswordUseCase:
        return ResetPasswordUseCase(
            accounts=self.account_repository,
            tokens=self.reset_tokens,
            attempts=self.login_attempts,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def change_password_use_case(self) -> ChangePasswordUseCase:
        return ChangePasswordUseCase(
            accounts=self.account_repository, password_hasher=self.password_hasher
        )

    @cached_property
    def create_admin_use_case(self) -> CreateAdminUseCase:
        return CreateAdminUseCase(
            accounts=self.account_repository, password_hasher=self.password_hasher
        )

    @cached_property
    def clear_lockout_use_case(self) -> ClearLockoutUseCase:
        return ClearLockoutUseCase(self.login_attempts)

    @cached_property
    def list_locked_accounts_use_case(self) -> ListLockedAccountsUseCase:
        return ListLockedAccountsUseCase(self.login_attempts)

    @cached_property
    def cleanup_auth_use_case(self) -> CleanupAuthUseCase:
        return CleanupAuthUseCase(attempts=self.login_attempts, tokens=self.reset_tokens)

    @cached_property
    def dashboard_stats_use_case(self) -> GetDashboardStatsUseCase:
        return GetDashboardStatsUseCase(
            loads=self.load_repository,
            drivers=self.driver_repository,
            shippers=self.shipper_repository,
            cache=self.cache,
        )

    @cached_property
    def driver_accounts(self) -> DriverAccounts:
        return DriverAccounts(
            drivers=self.driver_repository,
            visibility=self.fleet_visibility,
            cache=self.cache,
            ratings_ttl=self.config.cache.ttl_seconds,
        )

    @cached_property
    def shipper_accounts(self) -> ShipperAccounts:
        return ShipperAccounts(self.shipper_repository)

    @cached_property
    def facility_catalog(self) -> FacilityCatalog:
        return FacilityCatalog(self.facility_repository)

    @cached_property
    def notification_inbox(self) -> NotificationInbox:
        return NotificationInbox(self.notification_repository)

    @cached_property
    def list_loads_use_case(self) -> ListLoadsUseCase:
        return ListLoadsUseCase(self.load_repository)

    @cached_property
    def vehicle_expiry_check_use_case(self) -> VehicleExpiryCheckUseCase:
        return VehicleExpiryCheckUseCase(
            compliance=self.compliance_repository,
            notifications=self.notification_repository,
            mailer=self.mailer,
        )

    # Controllers

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            signup_use_case=self.signup_use_case,
            login_use_case=self.login_use_case,
            resolve_session_use_case=self.resolve_session_use_case,
            forgot_password_use_case=self.forgot_password_use_case,
            reset_password_use_case=self.reset_password_use_case,
        )

    @cached_property
    def drivers_controller(self) -> DriversController:
        return DriversController(
            driver_accounts=self.driver_accounts,
            change_password_use_case=self.change_password_use_case,
            list_loads_use_case=self.list_loads_use_case,
        )

    @cached_property
    def shippers_controller(self) -> ShippersController:
        return ShippersController(
            shipper_accounts=self.shipper_accounts,
            facilities=self.facility_catalog,
            change_password_use_case=self.change_password_use_case,
            list_loads_use_case=self.list_loads_use_case,
        )

    @cached_property
    def loads_controller(self) -> LoadsController:
        loads = self.load_repository
        return LoadsController(
            create_load=CreateLoadUseCase(loads=loads, facilities=self.facility_repository),
            list_loads=self.list_loads_use_case,
            get_load=GetLoadUseCase(loads),
            quote_load=QuoteLoadUseCase(loads),
            accept_quote=AcceptQuoteUseCase(loads),
            assign_driver=AssignDriverUseCase(
                loads=loads,
                drivers=self.driver_repository,
                notifications=self.notification_repository,
            ),
            update_status=UpdateLoadStatusUseCase(loads),
            cancel_load=CancelLoadUseCase(loads),
            rate_driver=RateDriverUseCase(loads=loads, cache=self.cache),
            documents=LoadDocuments(loads),
            track_load=TrackLoadUseCase(loads),
        )

    @cached_property
    def invoices_controller(self) -> InvoicesController:
        return InvoicesController(
            generate_invoice=GenerateInvoiceUseCase(
                invoices=self.invoice_repository,
                loads=self.load_repository,
                shippers=self.shipper_repository,
            ),
            invoice_queries=InvoiceQueries(self.invoice_repository),
            update_invoice_status=UpdateInvoiceStatusUseCase(self.invoice_repository),
        )

    @cached_property
    def notifications_controller(self) -> NotificationsController:
        return NotificationsController(self.notification_inbox)

    @cached_property
    def compliance_controller(self) -> ComplianceController:
        return ComplianceController(
            reminders=ComplianceRemindersUseCase(self.compliance_repository),
            vehicle_expiry_check=self.vehicle_expiry_check_use_case,
        )

    @cached_property
    def geocoding_controller(self) -> GeocodingController:
        return GeocodingController(
            geocode=GeocodeAddressUseCase(self.geocoding_client),
            reverse_geocode=ReverseGeocodeUseCase(self.geocoding_client),
        )

    @cached_property
    def admin_controller(self) -> AdminController:
        return AdminController(
            driver_accounts=self.driver_accounts,
            shipper_accounts=self.shipper_accounts,
            get_dashboard_stats=self.dashboard_stats_use_case,
            clear_lockout=self.clear_lockout_use_case,
            list_locked_accounts=self.list_locked_accounts_use_case,
        )

    @cached_property
    def misc_controller(self) -> MiscController:
        return MiscController()

    def controllers(self) -> list:
        return [
            self.auth_controller,
            self.drivers_controller,
            self.shippers_controller,
            self.loads_controller,
            self.invoices_controller,
            self.notifications_controller,
            self.compliance_controller,
            self.geocoding_controller,
            self.admin_controller,
            self.misc_controller,
        ]


container = Container()

__all__ = ["Container", "container"]
