import asyncio
import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status, APIRouter
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from campus_connect.api.v1.routes import (
    events as events_router,
    health as health_router,
    rsvps as rsvps_router,
    sessions as sessions_router,
    users as users_router,
)
from campus_connect.db.session import engine, Base
from campus_connect.events.consumer import run_worker
from campus_connect.events.publisher import close_connection
from campus_connect.cache.redis_client import cache
from campus_connect.notifications.mailer import verify_email_configuration
from campus_connect.core.config import settings
from campus_connect.core.logging import logger
from campus_connect.core.rate_limit import limiter


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    email_config = await verify_email_configuration()
    if email_config["configured"]:
        logger.info("Email service configured and ready")
    else:
        logger.warning(f"Email service not configured: {email_config['message']}")

    # With RUN_EMBEDDED_WORKER off, run python -m campus_connect.events.consumer separately
    worker = None
    if settings.RUN_EMBEDDED_WORKER:
        worker = asyncio.create_task(run_worker())

    yield

    if worker:
        worker.cancel()
        try:
            await worker
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Notification worker exited with error: {e}")
    await close_connection()
    await cache.close()
    await engine.dispose()


app = FastAPI(title="Campus Connect", lifespan=lifespan)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report body/query validation failures as 400 with a readable message."""
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())[1:])
        problems.append(f"{field}: {error.get('msg')}" if field else error.get("msg"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "; ".join(problems) or "Invalid request"},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(users_router.router)
api_router.include_router(sessions_router.router)
api_router.include_router(events_router.router)
api_router.include_router(rsvps_router.router)
api_router.include_router(health_router.router)

app.include_router(api_router)


def run():
    """Serve the API with uvicorn (``campus-connect`` console script)."""
    uvicorn.run("campus_connect.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
