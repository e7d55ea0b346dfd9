from typing import Any, Dict, List, Optional

import httpx


class ChainAPIError(Exception):
    """A non-2xx answer from the CHAIN API."""

    def __init__(self, status_code: int, message: str, field: Optional[str] = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.field = field


class ChainClient:
    """Async client for the CHAIN REST API, one method per HTTP operation."""

    def __init__(self, base_url: str = "http://localhost:5000", timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self._http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "ChainClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        resp = await self._http.request(method, path, json=json)
        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            raise ChainAPIError(resp.status_code, body.get("error") or resp.text, body.get("field"))
        return resp.json()

    async def list(self, resource: str) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/{resource}")

    async def get(self, resource: str, record_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/{resource}/{record_id}")

    async def create(self, resource: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", f"/{resource}", json=data)

    async def update(self, resource: str, record_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", f"/{resource}/{record_id}", json=data)

    async def delete(self, resource: str, record_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/{resource}/{record_id}")

    async def login(self, email: str, senha: str) -> Dict[str, Any]:
        return await self._request("POST", "/users/login", json={"email": email, "senha": senha})
