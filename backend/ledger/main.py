import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ledger.api.endpoints import imports
from ledger.core.database import Base, engine
from ledger.core.settings import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Ledger Import API")

# Configure CORS
origins = settings.resolved_cors_origins()
if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.on_event("startup")
def startup() -> None:
    if settings.db_auto_create:
        Base.metadata.create_all(bind=engine)
    logger.info("app.startup environment=%s db_auto_create=%s", settings.environment, settings.db_auto_create)


# API Routes
app.include_router(imports.router, prefix="/api", tags=["import"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
