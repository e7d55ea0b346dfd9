import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request

from models.login import LoginIn, LoginOut
from rules import RULES
from stores import Stores

logger = logging.getLogger("chain.routes")

# mounted in this order under /<name>
RESOURCES = ("appointments", "users", "events", "professionals", "students", "teachers")


# ---------- DB ----------
async def get_stores(request: Request) -> Stores:
    stores = getattr(request.app.state, "stores", None)
    if stores is None:
        raise HTTPException(status_code=503, detail="db-not-configured")
    return stores


# ---------- Resources ----------
def resource_router(name: str) -> APIRouter:
    """GET/POST on /<name>, GET/PUT/DELETE on /<name>/{id}, one store behind them."""
    tag = RULES[name].entity + "s"
    router = APIRouter(prefix=f"/{name}", tags=[tag])

    @router.get("", response_model=List[Dict[str, Any]], summary=f"List {name}")
    async def list_records(stores: Stores = Depends(get_stores)):
        return await stores[name].list()

    @router.get("/{record_id}", response_model=Dict[str, Any], summary=f"Get one of {name} by id")
    async def get_record(record_id: str, stores: Stores = Depends(get_stores)):
        return await stores[name].get_by_id(record_id)

    @router.post("", response_model=Dict[str, Any], status_code=201, summary=f"Create one of {name}")
    async def create_record(payload: Dict[str, Any], stores: Stores = Depends(get_stores)):
        return await stores[name].create(payload)

    @router.put("/{record_id}", response_model=Dict[str, Any], summary=f"Replace one of {name}")
    async def update_record(record_id: str, payload: Dict[str, Any], stores: Stores = Depends(get_stores)):
        return await stores[name].update(record_id, payload)

    @router.delete("/{record_id}", response_model=Dict[str, Any], summary=f"Delete one of {name}")
    async def delete_record(record_id: str, stores: Stores = Depends(get_stores)):
        return await stores[name].delete(record_id)

    return router


# ---------- Login ----------
login_router = APIRouter(tags=["Users"])


@login_router.post("/users/login", response_model=LoginOut)
async def login(payload: LoginIn, stores: Stores = Depends(get_stores)):
    # no session or token: the client keeps the level for the dashboard choice
    level = await stores.users.authenticate(payload.email, payload.senha)
    return {"level": level}
