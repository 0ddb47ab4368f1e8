from contextlib import asynccontextmanager
import logging
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from PartsCatalogue import __version__
from PartsCatalogue.config.settings import get_settings
from PartsCatalogue.handlers.exception_handlers import register_exception_handlers
from PartsCatalogue.routers import application_routes, bom_routes, parts_routes

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up...")
    # Fail fast on an unusable store configuration
    settings.validate_backend()
    logger.info(f"Using '{settings.store_backend}' store backend, applications under '{settings.applications_path}'")
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="PartsCatalogue API",
    description="Parts catalogue, bill-of-materials lookup and new part applications",
    version=__version__,
    lifespan=lifespan,
)

register_exception_handlers(app)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(parts_routes.router, prefix="/api/parts", tags=["parts"])
app.include_router(bom_routes.router, prefix="/api/bom", tags=["BoM"])
app.include_router(application_routes.router, prefix="/api/applications", tags=["Part Applications"])


@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__, "store_backend": settings.store_backend}


if __name__ == "__main__":
    uvicorn.run("PartsCatalogue.main:app", host=settings.host, port=settings.port, reload=True)
