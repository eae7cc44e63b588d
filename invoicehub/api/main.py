"""FastAPI application for the InvoiceHub API.

Provides the application factory with routers, the fetch runtime
lifespan, and exception handlers configured.
"""

import logging
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from invoicehub import __version__
from invoicehub.api.routes import accounts, deliveries, documents, fetch, providers, settings
from invoicehub.cli.config import InvoiceHubConfig, load_config_or_default
from invoicehub.db.connection import (
    SessionFactory,
    get_db,
    init_db,
    make_session_factory,
    session_scope,
)
from invoicehub.errors import (
    ConflictError,
    DomainError,
    InvoiceHubError,
    NotFoundError,
    ValidationError,
)
from invoicehub.orchestrator.runtime import FetchRuntime, build_runtime
from invoicehub.services.account_service import AccountService
from invoicehub.services.keyring_store import KeyringVault
from invoicehub.services.settings_service import SettingsService
from invoicehub.utils.logging_config import configure_logging, set_debug_mode
from invoicehub.utils.paths import ensure_dirs_exist, get_log_dir

logger = logging.getLogger(__name__)


def _status_for(exc: DomainError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ConflictError):
        return 409
    if isinstance(exc, ValidationError):
        return 400
    return 422


def _db_dependency(factory: SessionFactory):
    """Build a get_db replacement bound to a configured database."""

    def _get_db():
        db = factory()
        try:
            yield db
        finally:
            db.close()

    return _get_db


def _startup(runtime: FetchRuntime) -> None:
    """Secure legacy credentials and apply the persisted debug switch."""
    with session_scope(runtime.session_factory) as db:
        secured = AccountService(db, runtime.vault).secure_legacy_records()
        if secured:
            logger.info("Secured %d legacy account(s) at startup", secured)
        snapshot = SettingsService(db).snapshot()
    if snapshot.debug_mode:
        set_debug_mode(True, runtime.log_dir)


def create_app(
    runtime: FetchRuntime | None = None,
    config: InvoiceHubConfig | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        runtime: Prebuilt fetch runtime (tests); built at startup if omitted.
        config: Loaded configuration; loaded from the standard locations if omitted.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Async lifespan: build the fetch runtime, cancel it on shutdown."""
        cfg = config or load_config_or_default()
        configure_logging(cfg.server.log_level, cfg.server.log_format, cfg.server.log_file)

        rt = runtime
        if rt is None:
            factory = make_session_factory(cfg.storage.database_url)
            init_db(bind=factory.kw["bind"])
            if cfg.storage.database_url:
                app.dependency_overrides.setdefault(get_db, _db_dependency(factory))
            rt = build_runtime(
                factory,
                vault=KeyringVault(cfg.vault.service_name),
                code_timeout=cfg.fetch.code_timeout_seconds,
                output_dir=cfg.storage.output_dir,
                log_dir=get_log_dir(),
            )
            ensure_dirs_exist(rt.output_dir)
            try:
                _startup(rt)
            except Exception as e:
                logger.error("Startup migration failed (non-blocking): %s", e)
        app.state.runtime = rt

        yield

        await rt.shutdown()

    app = FastAPI(
        title="InvoiceHub API",
        description="Collects billing documents from online accounts",
        version=__version__,
        lifespan=lifespan,
    )

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        """Translate domain errors to JSON with their message key."""
        return JSONResponse(
            status_code=_status_for(exc),
            content={
                "error_code": getattr(exc, "code", None),
                "message": str(exc),
                "message_key": exc.message_key,
            },
        )

    @app.exception_handler(InvoiceHubError)
    async def invoicehub_error_handler(request: Request, exc: InvoiceHubError) -> JSONResponse:
        """Handle InvoiceHubError exceptions with consistent format."""
        return JSONResponse(
            status_code=400,
            content={
                "error_code": exc.code,
                "message": exc.message,
                "message_key": exc.message_key,
                "remediation": exc.remediation,
            },
        )

    app.include_router(accounts.router, prefix="/api/v1")
    app.include_router(providers.router, prefix="/api/v1")
    app.include_router(fetch.router, prefix="/api/v1")
    app.include_router(documents.router, prefix="/api/v1")
    app.include_router(deliveries.router, prefix="/api/v1")
    app.include_router(settings.router, prefix="/api/v1")

    @app.get("/health")
    def health_check(request: Request) -> dict:
        """Health check endpoint with fetch status."""
        try:
            version = _pkg_version("invoicehub")
        except PackageNotFoundError:
            version = __version__
        rt = getattr(request.app.state, "runtime", None)
        return {
            "status": "ok",
            "version": version,
            "fetch_running": bool(rt and rt.orchestrator.is_running),
            "pending_codes": len(rt.relay.pending_requests()) if rt else 0,
        }

    return app


app = create_app()
