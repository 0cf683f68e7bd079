"""
Helpdesk Realtime Service - Main Application
=============================================

Modules:
- Realtime: ticket chat rooms over WebSocket
- SLA Monitoring: periodic breach scan with email escalation
- Tickets: collaborator endpoints (status changes, chat history)

Clean Architecture Layers:
- Interfaces: FastAPI routers / WebSocket handler
- Application: Services, DTOs, store interfaces
- Domain: Entities and value objects
- Infrastructure: Database, room registry, SMTP, scheduler
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from helpdesk.config import settings
from helpdesk.infrastructure.database import init_database, close_database, create_tables
from helpdesk.realtime.application import RealtimeGateway
from helpdesk.realtime.infrastructure import InMemoryRoomRegistry
from helpdesk.realtime.interfaces import realtime_router
from helpdesk.sla.application import INotifier, SLAMonitor
from helpdesk.sla.infrastructure import SmtpNotifier
from helpdesk.sla.interfaces import sla_router
from helpdesk.tickets.application import ITicketStore, IUserDirectory
from helpdesk.tickets.infrastructure import SQLAlchemyTicketStore, SQLAlchemyUserDirectory
from helpdesk.tickets.interfaces import tickets_router
from helpdesk.shared.api.middleware import install_middleware
from helpdesk.shared.infrastructure.heartbeat import HeartbeatClient
from helpdesk.shared.infrastructure.logging import setup_logging, get_logger
from helpdesk.shared.infrastructure.scheduler import IntervalScheduler

logger = get_logger(__name__)


def create_app(
    ticket_store: Optional[ITicketStore] = None,
    user_directory: Optional[IUserDirectory] = None,
    notifier: Optional[INotifier] = None,
    enable_scheduler: bool = True,
) -> FastAPI:
    """
    Build the application.

    Collaborators default to the SQLAlchemy stores and the SMTP notifier;
    tests inject in-memory ones and skip the database entirely.
    """
    use_database = ticket_store is None or user_directory is None

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        """
        STARTUP:
        1. Setup structured logging
        2. Initialize database (unless stores were injected)
        3. Build room registry, gateway and SLA monitor
        4. Start scheduler (SLA scan, heartbeat)

        SHUTDOWN:
        1. Stop scheduler
        2. Close heartbeat client
        3. Close database connections
        """
        setup_logging(settings.log_level, settings.environment)
        logger.info("Starting Helpdesk Realtime Service", extra={
            "version": settings.app_version,
            "environment": settings.environment
        })

        if use_database:
            logger.info("Initializing database")
            init_database()
            try:
                await create_tables()
            except Exception as e:
                logger.warning(f"Database not available - running in degraded mode: {e}")

        store = ticket_store or SQLAlchemyTicketStore()
        users = user_directory or SQLAlchemyUserDirectory()

        registry = InMemoryRoomRegistry()
        gateway = RealtimeGateway(registry, store, users)
        monitor = SLAMonitor(store, users, notifier or SmtpNotifier())

        scheduler = IntervalScheduler()
        heartbeat = HeartbeatClient(settings.heartbeat_url, settings.heartbeat_timeout_seconds) \
            if settings.heartbeat_url else None

        if enable_scheduler:
            if settings.sla_scan_interval_seconds > 0:
                scheduler.add_interval_job(
                    "sla_scan", monitor.scan,
                    settings.sla_scan_interval_seconds,
                    name="SLA Breach Scan",
                )
            if heartbeat:
                scheduler.add_interval_job(
                    "heartbeat", heartbeat.beat,
                    settings.heartbeat_interval_seconds,
                    name="Uptime Heartbeat",
                    run_immediately=True,
                )
            if scheduler.job_ids:
                await scheduler.start()

        app.state.ticket_store = store
        app.state.user_directory = users
        app.state.registry = registry
        app.state.gateway = gateway
        app.state.sla_monitor = monitor
        app.state.scheduler = scheduler

        logger.info("Helpdesk Realtime Service started successfully")

        yield  # Application runs here

        logger.info("Shutting down Helpdesk Realtime Service")
        await scheduler.stop()
        if heartbeat:
            await heartbeat.close()
        if use_database:
            await close_database()
        logger.info("Helpdesk Realtime Service shutdown complete")

    app = FastAPI(
        title="Helpdesk Realtime API",
        description="Ticket chat rooms over WebSocket and SLA breach escalation.",
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_middleware(app)

    app.include_router(realtime_router)
    app.include_router(tickets_router)
    app.include_router(sla_router)

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Liveness plus a snapshot of rooms, connections and the scheduler."""
        state = request.app.state
        registry: InMemoryRoomRegistry = state.registry
        scheduler: IntervalScheduler = state.scheduler
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
            "checks": {
                "rooms": registry.room_count,
                "connections": registry.connection_count,
                "scheduler": "running" if scheduler.is_running else "stopped",
                "jobs": scheduler.job_ids,
            }
        }

    return app


app = create_app()


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "helpdesk.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
