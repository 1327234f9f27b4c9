"""
Receipt tracker backend, FastAPI application entry-point.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import engine
from app.errors import AnalysisError, NotFoundError, ReceiptSaveError, StorageError
from app.migrations import Migrator

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(name)-30s  %(levelname)-5s  %(message)s",
)
logger = logging.getLogger(__name__)

migrator = Migrator(engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: ensure data dir exists and the schema is current
    os.makedirs(settings.DATA_DIR, exist_ok=True)
    migrator.run()
    logger.info("Database ready (%s)", engine.url.render_as_string(hide_password=True))
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Receipt Tracker",
    description="Receipt photo → structured line items → spending history",
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


# ── Error mapping ────────────────────────────────────────────────────────
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    # Details were logged where the error was raised
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.exception_handler(ReceiptSaveError)
async def receipt_save_error_handler(request: Request, exc: ReceiptSaveError):
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(AnalysisError)
async def analysis_error_handler(request: Request, exc: AnalysisError):
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.get("/")
async def root():
    return {"service": "Receipt Tracker", "version": "0.1.0", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# ── Register API routers ─────────────────────────────────────────────────
from app.routers.auth import router as auth_router  # noqa: E402
from app.routers.cards import router as cards_router  # noqa: E402
from app.routers.folders import router as folders_router  # noqa: E402
from app.routers.products import router as products_router  # noqa: E402
from app.routers.receipts import router as receipts_router  # noqa: E402
from app.routers.stores import router as stores_router  # noqa: E402
from app.routers.tags import router as tags_router  # noqa: E402

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(tags_router, prefix="/api", tags=["Tags"])
app.include_router(receipts_router, prefix="/api", tags=["Receipts"])
app.include_router(stores_router, prefix="/api", tags=["Stores"])
app.include_router(products_router, prefix="/api", tags=["Products"])
app.include_router(cards_router, prefix="/api", tags=["Cards"])
app.include_router(folders_router, prefix="/api", tags=["Folders"])
