import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .config import settings
from .database import SessionLocal
from .redis_client import redis_client
from .routers import slots, swaps, users
from .services.errors import SlotSwapError

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="SlotSwap API")

app.include_router(users.router)
app.include_router(slots.router)
app.include_router(swaps.router)


@app.exception_handler(SlotSwapError)
async def slotswap_error_handler(request: Request, exc: SlotSwapError):
    """Render domain errors as {"detail", "error", ...} with their own status code."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} → {exc.kind}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health")
def health():
    db = SessionLocal()
    try:
        db_ok = db.execute(text("SELECT 1")).scalar() == 1
    except Exception as e:
        logger.error(f"Health check: database unavailable: {e}")
        db_ok = False
    finally:
        db.close()

    try:
        redis_ok = bool(redis_client.ping())
    except Exception as e:
        logger.error(f"Health check: redis unavailable: {e}")
        redis_ok = False

    return {"database": db_ok, "redis": redis_ok}
