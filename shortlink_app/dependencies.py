"""
FastAPI dependencies for dependency injection.

Shared handles (store, cache, background tasks, click recorder, rate
limiters) are built once in the application lifespan and kept on
`app.state`. These dependencies hand them to services per request, so
nothing here is a module-level singleton and tests can build an app
around their own handles.
"""

import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from shortlink_app.background import BackgroundTasks
from shortlink_app.cache.strategies import CacheStrategy
from shortlink_app.config import Settings
from shortlink_app.exceptions import RateLimitExceeded
from shortlink_app.hit_processor.click_recorder import ClickRecorder
from shortlink_app.services.admin_service import AdminService
from shortlink_app.services.code_generator import RandomCodeGenerator
from shortlink_app.services.redirect_service import RedirectService
from shortlink_app.services.shorten_service import ShortenService
from shortlink_app.services.stats_service import StatsService
from shortlink_app.storage.strategies import UrlStore

http_basic = HTTPBasic(realm="shortlink-admin")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> UrlStore:
    return request.app.state.store


def get_cache(request: Request) -> CacheStrategy:
    return request.app.state.cache


def get_background_tasks(request: Request) -> BackgroundTasks:
    return request.app.state.background_tasks


def get_click_recorder(request: Request) -> ClickRecorder:
    return request.app.state.click_recorder


def get_shorten_service(
    store: UrlStore = Depends(get_store),
    cache: CacheStrategy = Depends(get_cache),
    tasks: BackgroundTasks = Depends(get_background_tasks),
    settings: Settings = Depends(get_settings)
) -> ShortenService:
    return ShortenService(
        store=store,
        cache=cache,
        tasks=tasks,
        generator=RandomCodeGenerator(settings.code_length),
        max_retries=settings.max_retries,
        max_url_length=settings.max_url_length,
        cache_ttl=settings.cache_ttl
    )


def get_redirect_service(
    store: UrlStore = Depends(get_store),
    cache: CacheStrategy = Depends(get_cache),
    tasks: BackgroundTasks = Depends(get_background_tasks),
    clicks: ClickRecorder = Depends(get_click_recorder),
    settings: Settings = Depends(get_settings)
) -> RedirectService:
    return RedirectService(
        store=store, cache=cache, tasks=tasks, clicks=clicks, cache_ttl=settings.cache_ttl
    )


def get_admin_service(
    store: UrlStore = Depends(get_store),
    cache: CacheStrategy = Depends(get_cache)
) -> AdminService:
    return AdminService(store=store, cache=cache)


def get_stats_service(
    store: UrlStore = Depends(get_store),
    cache: CacheStrategy = Depends(get_cache),
    settings: Settings = Depends(get_settings)
) -> StatsService:
    return StatsService(store=store, cache=cache, stats_cache_ttl=settings.stats_cache_ttl)


def client_key(request: Request) -> str:
    """Rate-limit identity: the peer address"""
    return request.client.host if request.client else "unknown"


def rate_limit(route: str):
    """
    Dependency factory enforcing the token bucket for `route`.

    Attach it through the route decorator's `dependencies=[...]` so it runs
    before anything touches the cache or the store.
    """
    async def check(request: Request) -> None:
        limiter = request.app.state.rate_limiters.get(route)
        allowed, retry_after = limiter.acquire(client_key(request))
        if not allowed:
            raise RateLimitExceeded(retry_after)

    return check


def require_admin(
    credentials: HTTPBasicCredentials = Depends(http_basic),
    settings: Settings = Depends(get_settings)
) -> str:
    """Pass/fail check of the admin credentials; 401 on mismatch"""
    username_ok = secrets.compare_digest(
        credentials.username.encode("utf-8"), settings.admin_username.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        credentials.password.encode("utf-8"), settings.admin_password.encode("utf-8")
    )
    if not (username_ok and password_ok):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username
