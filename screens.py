"""
Screen state for the CHAIN admin UI.

A ResourceScreen holds what one entity page shows: the fetched records, the
form being filled, whether the form edits an existing record, the id filter
and the last error. Rendering is left to whatever front end drives it.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from client import ChainAPIError, ChainClient
from rules import ID_SHORT, RULES, RuleSet

logger = logging.getLogger("chain.screens")

# level -> screens on the dashboard, in menu order
DASHBOARDS: Dict[str, Tuple[str, ...]] = {
    "1": ("users", "teachers", "students", "professionals", "events", "appointments"),
    "2": ("events", "appointments"),
}


def dashboard_for(level: Optional[str]) -> Tuple[str, ...]:
    return DASHBOARDS.get(str(level), ()) if level is not None else ()


def form_fields(rules: RuleSet) -> Tuple[str, ...]:
    """Fields a user types in: derived fields are left out, ids the user may choose are in."""
    derived = set(rules.reference.copy) if rules.reference else set()
    fields = [f for f in rules.fields if f not in derived]
    if rules.reference or rules.id_policy == ID_SHORT:
        fields.insert(0, "id")
    return tuple(fields)


class ResourceScreen:
    def __init__(self, client: ChainClient, resource: str):
        self.client = client
        self.resource = resource
        self.rules = RULES[resource]
        self.fields = form_fields(self.rules)
        self.records: List[Dict[str, Any]] = []
        self.form: Dict[str, str] = self._blank_form()
        self.edit_mode = False
        self.current_id: Optional[str] = None
        self.filter_text = ""
        self.error = ""
        self.field_errors: Dict[str, str] = {}

    def _blank_form(self) -> Dict[str, str]:
        return {f: "" for f in self.fields}

    def reset_form(self) -> None:
        self.form = self._blank_form()
        self.edit_mode = False
        self.current_id = None

    def set_field(self, name: str, value: str) -> None:
        if name not in self.form:
            raise KeyError(name)
        self.form[name] = value

    async def mount(self) -> None:
        try:
            self.records = await self.client.list(self.resource)
            self.error = ""
        except (ChainAPIError, httpx.HTTPError) as e:
            logger.warning("Loading %s failed: %s", self.resource, e)
            self.error = f"Failed to load {self.resource}."

    def edit(self, record: Dict[str, Any]) -> None:
        self.form = {f: str(record.get(f) or "") for f in self.fields}
        self.current_id = record["id"]
        self.edit_mode = True

    async def submit(self) -> Optional[Dict[str, Any]]:
        """Create, or update when in edit mode; the saved record lands in ``records``."""
        data = dict(self.form)
        try:
            if self.edit_mode:
                saved = await self.client.update(self.resource, self.current_id, data)
                self.records = [saved if r.get("id") == self.current_id else r for r in self.records]
            else:
                saved = await self.client.create(self.resource, data)
                self.records.append(saved)
        except ChainAPIError as e:
            logger.warning("Saving %s failed: %s", self.rules.entity, e)
            self.error = f"Failed to save {self.rules.entity.lower()}."
            self.field_errors = {e.field: e.message} if e.field else {}
            return None
        except httpx.HTTPError as e:
            logger.warning("Saving %s failed: %s", self.rules.entity, e)
            self.error = f"Failed to save {self.rules.entity.lower()}."
            self.field_errors = {}
            return None
        self.reset_form()
        self.error = ""
        self.field_errors = {}
        return saved

    async def remove(self, record_id: str, confirm: Callable[[str], bool]) -> bool:
        if not confirm(f"Delete this {self.rules.entity.lower()}?"):
            return False
        try:
            await self.client.delete(self.resource, record_id)
        except (ChainAPIError, httpx.HTTPError) as e:
            logger.warning("Deleting %s %s failed: %s", self.rules.entity, record_id, e)
            self.error = f"Failed to delete {self.rules.entity.lower()}."
            return False
        self.records = [r for r in self.records if r.get("id") != record_id]
        return True

    def rows(self) -> List[Dict[str, Any]]:
        # local filter, no round-trip
        needle = self.filter_text.strip().lower()
        if not needle:
            return list(self.records)
        return [r for r in self.records if needle in str(r.get("id", "")).lower()]


class LoginScreen:
    def __init__(self, client: ChainClient):
        self.client = client
        self.email = ""
        self.level: Optional[str] = None
        self.error = ""

    @property
    def logged_in(self) -> bool:
        return self.level is not None

    async def submit(self, email: str, senha: str) -> Optional[str]:
        try:
            data = await self.client.login(email, senha)
        except (ChainAPIError, httpx.HTTPError) as e:
            logger.info("Login rejected: %s", e)
            self.level = None
            self.error = "Invalid email or password."
            return None
        self.email = email
        self.level = str(data["level"])
        self.error = ""
        return self.level

    def dashboard(self) -> Tuple[str, ...]:
        return dashboard_for(self.level)

    def open_screens(self) -> Dict[str, ResourceScreen]:
        return {name: ResourceScreen(self.client, name) for name in self.dashboard()}
