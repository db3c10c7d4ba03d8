from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import logging
import os
from .database import Base, engine
from . import models, campaign_models, donation_models  # noqa: F401  (register tables)
from .errors import DonationPlatformError
from .campaign_routes import router as campaign_router
from .donation_routes import router as donation_router
from .user_routes import router as user_router

logging.basicConfig(
    level=os.getenv('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Charity Donation API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DonationPlatformError)
async def platform_error_handler(request: Request, exc: DonationPlatformError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    # not retried; a stale aggregate is repaired by the next recalculation
    logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Server error"})


@app.get('/')
def root():
    return {"ok": True, "service": "Charity Donation API"}


app.include_router(campaign_router)
app.include_router(donation_router)
app.include_router(user_router)
