"""
sub2api - subscription metering and upstream account maintenance

Process host: creates tables and runs the background refreshers for the
lifetime of the FastAPI application.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import settings
from app.utils.clock import utcnow

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_background_tasks() -> dict:
    """Wire repositories, clients and schedulers."""
    from app.repositories import AccountRepository, ProxyRepository, UserSubscriptionRepository
    from app.services.antigravity_oauth import AntigravityOAuthService
    from app.services.antigravity_quota_refresher import AntigravityQuotaRefresher
    from app.services.scheduler import PeriodicTask
    from app.services.subscription_usage_service import SubscriptionUsageService
    from app.services.token_refresh_service import TokenRefreshService
    from app.services.token_refresher import AntigravityTokenRefresher

    account_repo = AccountRepository()
    proxy_repo = ProxyRepository()
    config = settings.token_refresh

    oauth_service = AntigravityOAuthService(proxy_repo=proxy_repo)
    subscription_usage = SubscriptionUsageService(UserSubscriptionRepository())

    return {
        "token_refresh": TokenRefreshService(
            account_repo,
            [AntigravityTokenRefresher(oauth_service)],
            config=config,
        ),
        "antigravity_quota": AntigravityQuotaRefresher(account_repo, proxy_repo, config=config),
        "subscription_expiry": PeriodicTask(
            "Subscription expiry",
            subscription_usage.expire_subscriptions,
            settings.subscription_expiry_check_minutes,
        ),
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown.
    """
    # Startup
    logger.info("sub2api starting up...")

    # Create database tables
    from app.database import engine, Base
    from app import models  # noqa: F401  registers tables

    Base.metadata.create_all(bind=engine)

    tasks = build_background_tasks()
    for task in tasks.values():
        task.start()
    app.state.background_tasks = tasks

    yield

    # Shutdown
    logger.info("sub2api shutting down...")
    for task in tasks.values():
        task.stop()


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)


@app.get("/health")
async def health():
    """Health check endpoint."""
    tasks = getattr(app.state, "background_tasks", {})
    return {
        "status": "healthy",
        "timestamp": utcnow().isoformat(),
        "schedulers": {
            name: task.get_status()
            for name, task in tasks.items()
        },
    }
