import asyncio
import contextlib
import logging
from fastapi import FastAPI
from datetime import datetime
from product_importer.core.config import settings
from product_importer.core.logging_config import setup_logging
from product_importer.middleware.metrics import MetricsMiddleware, new_metrics
from product_importer.routes import system
from product_importer.database.connection import Base, engine
from product_importer.models import backup_snapshot, price_entry, product  # noqa: F401  registers tables
from product_importer.routes.catalog import router as catalog_router
from product_importer.routes.products import router as product_router
from product_importer.routes.backups import router as backups_router
from product_importer.services.scheduler_service import backup_scheduler_loop

setup_logging()
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Product Catalog Importer")

app.add_middleware(MetricsMiddleware)


app.include_router(catalog_router)
app.include_router(product_router)
app.include_router(backups_router)
app.include_router(system.router)

@app.on_event("startup")
async def startup_event():
    if settings.SCHEDULER_ENABLED:
        app.state.backup_task = asyncio.create_task(backup_scheduler_loop())
    else:
        logger.info("Backup scheduler disabled")
    app.state.start_time = datetime.utcnow()
    app.state.metrics = new_metrics()


@app.on_event("shutdown")
async def shutdown_event():
    task = getattr(app.state, "backup_task", None)
    if task is not None:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
