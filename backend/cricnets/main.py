import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cricnets.database import init_db
from cricnets.routes import bookings, config, tools

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Cricnets Booking API")

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(bookings.router, prefix="/api", tags=["bookings"])
app.include_router(config.router, prefix="/api", tags=["config"])
# Typed command endpoints for tool-calling clients
app.include_router(tools.router, prefix="/api", tags=["tools"])


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info(f"Cricnets Booking API started with {len(app.routes)} routes")


@app.get("/api/health")
def health_check():
    return {"app_name": "Cricnets Booking API", "status": "healthy"}
