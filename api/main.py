import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from timestate import __version__
from timestate.errors import Cancelled, ConfigurationError, DuplicateRecordError, FormatError, TransitionError
from timestate.settings import API_DEBUG, API_HOST, API_PORT, settings

logging.basicConfig(level=settings.log_level.upper(), format=settings.log_format)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="timestate API",
    version=__version__,
    description="HTTP layer over the temporal state engine: pinned timestamps, rotation and delays.",
    debug=API_DEBUG,
)

# --- CORS ----------------------------------------------------------
# Dev-only origins; tighten for production.
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


# --- Error mapping ------------------------------------------------------------
@app.exception_handler(FormatError)
@app.exception_handler(ConfigurationError)
@app.exception_handler(TransitionError)
async def invalid_input_handler(request: Request, exc: Exception):
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(DuplicateRecordError)
async def duplicate_handler(request: Request, exc: DuplicateRecordError):
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(Cancelled)
async def cancelled_handler(request: Request, exc: Cancelled):
    logger.warning(f"{request.method} {request.url.path} cancelled: {exc}")
    return JSONResponse(status_code=408, content={"detail": str(exc), "elapsed_seconds": exc.elapsed})


# --- Include Routers ----------------------------------------------------------
from .records import router as records_router  # noqa: E402
from .sleep import router as sleep_router  # noqa: E402
from .functions import router as functions_router  # noqa: E402

app.include_router(records_router)
app.include_router(sleep_router)
app.include_router(functions_router)


# ---------- health-check ----------
@app.get("/")
def root():
    return {"status": "ok", "msg": "timestate API is alive"}


if __name__ == "__main__":
    # Requires the optional "server" extra.
    import uvicorn

    uvicorn.run("api.main:app", host=API_HOST, port=API_PORT, reload=API_DEBUG)
