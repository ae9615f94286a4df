import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from library_app.db import SessionLocal, engine, init_db
from library_app.api import books, loans, users
from library_app.errors import InvalidArgument, InvalidState, NotFound
from library_app.seed import seed_sample_data

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SEED_SAMPLE_DATA = os.getenv("SEED_SAMPLE_DATA", "false").lower() == "true"

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(engine)
    if SEED_SAMPLE_DATA:
        db = SessionLocal()
        try:
            seed_sample_data(db)
        finally:
            db.close()
    yield


app = FastAPI(title="Library Lending API", version="0.1.0", lifespan=lifespan)


def _error_body(status: int, error: str, message: str) -> dict:
    return {
        "timestamp": datetime.now().isoformat(),
        "status": status,
        "error": error,
        "message": message,
    }


@app.exception_handler(InvalidArgument)
async def invalid_argument_handler(request: Request, exc: InvalidArgument):
    logger.warning("Invalid argument on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content=_error_body(400, "Bad Request", str(exc)))


@app.exception_handler(InvalidState)
async def invalid_state_handler(request: Request, exc: InvalidState):
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=409, content=_error_body(409, "Conflict", str(exc)))


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    logger.info("Not found on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=404, content=_error_body(404, "Not Found", str(exc)))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error("Unexpected error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=_error_body(500, "Internal Server Error", "An internal server error occurred."),
    )


@app.get("/healthz")
def health():
    return {"ok": True}


app.include_router(books.router, prefix="/api/books", tags=["books"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(loans.router, prefix="/api/loans", tags=["loans"])
