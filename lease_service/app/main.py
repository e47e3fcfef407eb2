import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import Base, lease_engine
from shared.exception_handler import setup_exception_handlers

from . import models  # noqa: F401  registers every table on Base.metadata
from .router.lease_builder import lease_builder_router
from .router.lease_documents import lease_documents_router, sign_router
from .router.lease_templates import lease_templates_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s]: %(message)s"
)

app = FastAPI(title="Lease Service API")

# Create all tables
Base.metadata.create_all(bind=lease_engine)

origins = [
    "http://localhost:8080",
    "http://127.0.0.1:8003",
    settings.APP_BASE_URL,
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# Include routers
app.include_router(lease_builder_router.router)
app.include_router(lease_documents_router.router)
app.include_router(lease_templates_router.router)
app.include_router(sign_router.router)
