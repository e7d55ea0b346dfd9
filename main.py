from __future__ import annotations

# -------- IMPORTS --------
import logging
from datetime import datetime, timezone
from typing import Any, Dict

# FastAPI core
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from errors import ChainError
from routes import RESOURCES, get_stores, login_router, resource_router
from stores import Stores, open_database

# ---------- Logging ----------
logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger("chain")

# ---------- App ----------
app = FastAPI(
    title="API CHAIN",
    version="1.0.0",
    description="API CHAIN - special education records management",
    docs_url="/chain",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.CORS_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------- Errors ----------
@app.exception_handler(ChainError)
async def chain_error_handler(request: Request, exc: ChainError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # same 400 shape as the rule set: first problem only
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(p) for p in first.get("loc", ()) if p != "body"]
    field = loc[-1] if loc else None
    message = first.get("msg", "invalid request")
    content: Dict[str, Any] = {"error": f"{field}: {message}" if field else message}
    if field:
        content["field"] = field
    return JSONResponse(status_code=400, content=content)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "internal error"})

# ---------- Startup / Shutdown ----------
@app.on_event("startup")
async def startup():
    database = open_database()
    await database.ensure_indexes()
    app.state.stores = Stores(database)
    logger.info("CHAIN started with %s backend", database.kind)


@app.on_event("shutdown")
async def shutdown():
    stores = getattr(app.state, "stores", None)
    if stores:
        await stores.database.close()

# ---------- Health -----------
@app.get("/health")
async def health(stores: Stores = Depends(get_stores)):
    """
    Health endpoint returns {"status":"ok","db": True/False,"backend": kind}
    """
    return {"status": "ok", "db": await stores.database.ping(), "backend": stores.database.kind}

# ---------- root ----------
@app.get("/")
async def root():
    return {"service": config.SERVICE_NAME, "time": datetime.now(timezone.utc).isoformat()}

# ---------- Resources ----------
# login first so it never falls through to a /users/{id} handler
app.include_router(login_router)
for _name in RESOURCES:
    app.include_router(resource_router(_name))

# ---------- run ----------
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=config.PORT)
