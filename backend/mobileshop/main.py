import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mobileshop.api import alerts, auth, categories, products
from mobileshop.core.config import settings
from mobileshop.core.exceptions import ShopError
from mobileshop.core.logging_config import setup_logging
from mobileshop.db.base import build_store
from mobileshop.db.seed_catalog import seed_catalog

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)
    app.state.store = build_store(settings)
    logger.info(f"Document store: {settings.STORE_BACKEND}")
    if settings.SEED_DEMO_DATA:
        await seed_catalog(app.state.store, settings.DEFAULT_LOW_STOCK_THRESHOLD)
    yield


app = FastAPI(
    title="Mobile Shop Admin API",
    description="Catalog categories and stock alerts for the shop back office",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ShopError)
async def shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, **exc.extra()},
    )


# Routers
app.include_router(auth.router)
app.include_router(categories.router)
app.include_router(products.router)
app.include_router(alerts.router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "version": "0.1.0"}
