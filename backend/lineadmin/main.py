import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lineadmin import config, db
from lineadmin.routers import health, lock_status
from lineadmin.services.lock_store import ensure_schema

app = FastAPI(title="LineAdmin Lock Check API", version="0.1.0")
logger = logging.getLogger("lineadmin.api")

# Allow local/dev origins for FE preview and Docker usage.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(lock_status.router)


@app.on_event("startup")
def _startup():
    db.init_pool()
    # In tests we assume migrations (or a prepared DB) are present.
    # Running best-effort DDL here can hang if the DB is busy/locked.
    if config.APP_ENV != "test":
        _ensure_schema()


@app.on_event("shutdown")
def _shutdown():
    db.close_pool()


def _ensure_schema():
    """Best-effort schema bootstrap for local/dev.

    Keeps the lock check usable even if migrations were not applied.
    """
    with db.get_conn() as conn:
        cur = conn.cursor()
        ensure_schema(cur)
        conn.commit()
    logger.info("schema_ensured tables=accounts,daily_stats")
