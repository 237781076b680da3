# sponsoring/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from sponsoring.api.v1.api import api_router
from sponsoring.core.config import settings
from sponsoring.core.limiter import limiter
from sponsoring.db.session import engine
from sponsoring.models import Base

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Sponsoring service starting up (ENV={settings.ENV})")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables checked and created if necessary")
    if not settings.EMAIL_ENABLED:
        logger.warning("RESEND_API_KEY not configured - sponsor emails disabled")
    yield
    logger.info("Sponsoring service shutting down")


app = FastAPI(
    title="Sponsoring Service",
    version="1.0.0",
    description="""
        **Sponsoring back-office for event editions**

        ## Features

        * **Packages**: Sponsorship levels with prices, capacity and benefits
        * **Pipeline**: Sponsorships from prospect to confirmed, paid or refunded
        * **Deliverables**: Track each contracted benefit until it is delivered
        * **Sponsor Portal**: Token links giving sponsors a view of their progress
        * **Statistics**: Sponsor counts, revenue against target, pipeline conversion

        ## Authentication

        Organizer endpoints require JWT authentication via the `Authorization: Bearer <token>` header.
        The portal endpoint under `/public/` is authenticated by the portal token.
        """,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.CORS_ORIGINS.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"status": "Sponsoring Service is running"}
