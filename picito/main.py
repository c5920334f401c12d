from fastapi import FastAPI

from picito.config import settings
from picito.errors import register_error_handlers
from picito.logs import configure_logging
from picito.routes.admin import router as admin_router
from picito.routes.auth import router as auth_router
from picito.routes.health import router as health_router
from picito.routes.iframe import router as iframe_router
from picito.routes.organizations import router as organizations_router
from picito.routes.settings import router as settings_router
from picito.routes.version import router as version_router

def create_app() -> FastAPI:
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(title="picito", version="0.1.0")
    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(organizations_router)
    app.include_router(admin_router)
    app.include_router(settings_router)
    app.include_router(iframe_router)
    app.include_router(version_router)
    return app

app = create_app()
