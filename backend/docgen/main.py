import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from docgen.config import settings
from docgen.database import init_db
from docgen.exceptions import DocgenError
from docgen.routers import documents, receipts

logger = logging.getLogger("docgen")

GENERIC_ERROR = "Failed to generate document. Please try again."


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Startup: bring an existing store up to the current schema
    if settings.db_path.exists():
        try:
            init_db(settings.db_path)
            logger.info("Database schema checked at %s", settings.db_path)
        except Exception as exc:
            logger.error("Could not run startup migrations: %s", exc)
    else:
        logger.warning("No database at %s; document routes will fail until it exists", settings.db_path)
    yield


app = FastAPI(
    title="Field Service Docgen",
    description="Renders quotes, invoices, job summaries and payment receipts as PDF or HTML",
    version="0.2.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["POST", "OPTIONS", "GET"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.exception_handler(DocgenError)
async def docgen_error_handler(request: Request, exc: DocgenError):
    if exc.status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc.message, exc_info=exc.original_error)
    else:
        logger.info("%s: %s", type(exc).__name__, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"{field}: {first.get('msg', 'invalid input')}" if field else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error in %s", request.url.path)
    return JSONResponse(status_code=500, content={"error": GENERIC_ERROR})


app.include_router(documents.router, prefix=settings.api_prefix)
app.include_router(receipts.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.2.0"}


def run():
    import uvicorn

    uvicorn.run("docgen.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
