import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from reconnect.config import CORS_ORIGINS, LOG_LEVEL, UPLOAD_DIR
from reconnect.db.db import check_database, create_db_and_tables
from reconnect.routers import found_items, search
from reconnect.utils.errors import ServiceError
from reconnect.utils.media_store import LocalMediaStore

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # An unreachable database is logged but does not stop the server
    try:
        create_db_and_tables()
    except SQLAlchemyError as e:
        logger.error("Could not create tables: %s", e)

    if check_database():
        logger.info("Database connected successfully")

    yield


app = FastAPI(title="ReConnect Lost & Found API", lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Static uploads directory
LocalMediaStore(UPLOAD_DIR).ensure_directory()
app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR), name="uploads")


# Error handlers
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    reasons = []
    for err in exc.errors():
        field = err["loc"][-1] if err.get("loc") else "request"
        reasons.append(f"Invalid {field}: {err['msg']}")

    return JSONResponse(status_code=400, content={"message": "; ".join(reasons) or "Invalid request."})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Unhandled database error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"message": "Database error.", "error": str(exc)})


# Register routers
app.include_router(found_items.router, prefix="/api", tags=["Found Items"])
app.include_router(search.router, prefix="/api", tags=["Search"])


@app.get("/")
def root():
    database = check_database()
    return {"status": "ok" if database else "degraded", "database": database}
