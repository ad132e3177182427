import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

load_dotenv()

from app.core.exceptions import (  # noqa: E402
    Conflict,
    IllegalTransition,
    InvalidTarget,
    NotFound,
    ValidationError,
    VerificationError,
)
from app.core.logging_config import configure_logging  # noqa: E402
from app.db.db import init_db  # noqa: E402
from app.routers import admin, claims, items  # noqa: E402

configure_logging()
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    ValidationError: 400,
    NotFound: 404,
    InvalidTarget: 409,
    IllegalTransition: 409,
    Conflict: 409,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database initialized")
    yield


app = FastAPI(lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(VerificationError)
async def verification_error_handler(request: Request, exc: VerificationError):
    return JSONResponse(
        status_code=ERROR_STATUS_CODES.get(type(exc), 400),
        content=exc.to_dict(),
    )


# Register routers
app.include_router(items.router, prefix="/items", tags=["Items"])
app.include_router(claims.router, prefix="/claims", tags=["Claims"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])


@app.get("/")
def root():
    return {"status": "ok"}
