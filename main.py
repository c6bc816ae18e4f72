import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
import uvicorn

from config import get_settings
from database import check_connection
from routers import payments_router, portone_router
from services.portone_client import PortOneClient

# Load .env
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fails fast with ConfigurationError when credentials are missing
    settings = get_settings()
    app.state.settings = settings
    app.state.portone_client = PortOneClient(
        api_secret=settings.portone_api_secret,
        api_base=settings.portone_api_base,
        timeout=settings.portone_timeout_seconds,
    )
    logger.info("PortOne client ready (base=%s, currency=%s)", settings.portone_api_base, settings.currency)
    try:
        yield
    finally:
        app.state.portone_client.session.close()


# App instance
app = FastAPI(title="Subscription Billing", lifespan=lifespan)

# CORS
origins = [origin for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(portone_router)
app.include_router(payments_router)


@app.get("/api/health")
def health():
    database_ok = check_connection()
    return {"status": "ok" if database_ok else "degraded", "database": database_ok}


# 404 Fallback Middleware
@app.middleware("http")
async def not_found_middleware(request: Request, call_next):
    try:
        response = await call_next(request)
        if response.status_code == 404:
            return JSONResponse(status_code=404, content={"error": "Route not found"})
        return response
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


if __name__ == "__main__":
    port = int(os.getenv("PORT", 10000))
    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=True)
