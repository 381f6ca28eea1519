import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from foodmap.core.config import get_settings
from foodmap.core.lifespan import lifespan
from foodmap.core.logging import configure_logging
from foodmap.api.error_handlers import register_error_handlers
from foodmap.api.v1.routers.health import router as health_router
from foodmap.api.v1.routers.stores import router as stores_router
from foodmap.api.v1.routers.users import router as users_router

settings = get_settings()
configure_logging(level=logging.DEBUG if settings.DEBUG else logging.INFO)

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# ------- CORS -------
# ALLOWED_ORIGINS is a CSV, e.g. "https://foodmap.example,https://www.foodmap.example"
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins(),
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)

register_error_handlers(app)

# ------- Routes -------
app.include_router(health_router)
app.include_router(stores_router, prefix=settings.api_prefix)
app.include_router(users_router, prefix=settings.api_prefix)
