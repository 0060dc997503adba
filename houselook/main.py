# File: houselook/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from houselook.api.api_v1.router import api_router
from houselook.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Rental listings, saved houses and admin analytics for HouseLook",
    version="0.1.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
)

# Set up CORS
if settings.BACKEND_CORS_ORIGINS:
    logger.info(f"Setting up CORS with origins: {settings.BACKEND_CORS_ORIGINS}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"Request: {request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(f"Response status: {response.status_code}")
    return response


@app.on_event("startup")
async def on_startup():
    logger.info("Application startup...")
    # Import here to avoid circular imports
    from houselook.db.database import init_store
    from houselook.services.dashboard_service import get_dashboard_loader

    try:
        store = init_store()
    except Exception as e:
        logger.error(f"Error initialising record store: {e}")
        return
    if settings.DASHBOARD_REFRESH_SECONDS > 0:
        (await get_dashboard_loader(store)).start()


@app.on_event("shutdown")
async def on_shutdown():
    from houselook.services.dashboard_service import stop_dashboard_loader

    await stop_dashboard_loader()
    logger.info("Application shutdown complete")


@app.get("/")
def root():
    return {"message": "Welcome to the HouseLook API", "docs": "/docs"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("houselook.main:app", host="0.0.0.0", port=8000, reload=True)
