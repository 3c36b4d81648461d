from __future__ import annotations

import logging
import uvicorn
from fastapi import FastAPI
from pymongo import MongoClient
from dotenv import load_dotenv
load_dotenv()
from recipe_engine.api.routes import router
from recipe_engine.core.config import (
    MONGO_URI,
    MONGO_DB,
    MONGO_INGREDIENTS_COL,
    MONGO_PREPARATIONS_COL,
    MONGO_DISHES_COL,
    MONGO_UNITS_COL,
    FINGERPRINT_DIGEST,
    RESOLUTION_TTL_SECONDS,
    ResolutionPolicy,
)
from recipe_engine.infrastructure.mongo_catalog import MongoCatalogStore
from recipe_engine.infrastructure.session_store import InMemoryResolutionStore

log = logging.getLogger("app")
app = FastAPI(title="Recipe Engine")
app.include_router(router)

_mongo_client: MongoClient | None = None


@app.on_event("startup")
def on_startup() -> None:
    global _mongo_client

    _mongo_client = MongoClient(MONGO_URI, serverSelectionTimeoutMS=3000)
    db = _mongo_client[MONGO_DB]
    catalog = MongoCatalogStore(
        ingredients=db[MONGO_INGREDIENTS_COL],
        preparations=db[MONGO_PREPARATIONS_COL],
        dishes=db[MONGO_DISHES_COL],
        units=db[MONGO_UNITS_COL],
    )

    # DI for routes.py
    app.state.catalog = catalog
    app.state.policy = ResolutionPolicy.from_env()
    app.state.fingerprint_digest = FINGERPRINT_DIGEST
    app.state.resolutions = InMemoryResolutionStore(ttl_seconds=RESOLUTION_TTL_SECONDS)

    log.info("Startup complete (db=%s)", MONGO_DB)


@app.on_event("shutdown")
def on_shutdown() -> None:
    global _mongo_client
    if _mongo_client:
        _mongo_client.close()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8081, reload=False)
