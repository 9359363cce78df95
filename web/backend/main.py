from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from kgic.core.config import load_config
from kgic.core.output import setup_from_config


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_from_config(load_config().logging)
    logger.info("KGIC web API started")
    yield
    logger.info("KGIC web API stopped")


app = FastAPI(title="KGIC Web API", version="1.0.0", lifespan=lifespan)

# CORS: ALLOWED_ORIGINS overrides the configured origins
allowed_origins = load_config().site.allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
from web.backend.routers import admin, auth, content, podcasts

app.include_router(podcasts.router, prefix="/api", tags=["podcasts"])
app.include_router(content.router, prefix="/api", tags=["content"])
app.include_router(auth.router, prefix="/api", tags=["auth"])
app.include_router(admin.router, prefix="/api", tags=["admin"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
