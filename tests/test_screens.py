import pytest

from client import ChainAPIError, ChainClient
from screens import LoginScreen, ResourceScreen, dashboard_for, form_fields
from rules import RULES
from tests.conftest import make_payload


def fill(screen: ResourceScreen, data):
    for key, value in data.items():
        screen.set_field(key, value)


def test_form_fields_leave_out_derived_name():
    assert form_fields(RULES["students"])[0] == "id"
    assert "name" not in form_fields(RULES["students"])
    assert "name" not in form_fields(RULES["teachers"])
    assert form_fields(RULES["professionals"])[0] == "id"
    assert "id" not in form_fields(RULES["events"])


def test_dashboards_by_level():
    assert len(dashboard_for("1")) == 6
    assert dashboard_for("2") == ("events", "appointments")
    assert dashboard_for(None) == ()
    assert dashboard_for("9") == ()


@pytest.mark.asyncio
async def test_mount_loads_records(api: ChainClient):
    await api.create("events", make_payload("events"))
    screen = ResourceScreen(api, "events")

    await screen.mount()

    assert len(screen.records) == 1
    assert screen.error == ""


@pytest.mark.asyncio
async def test_submit_creates_then_edit_updates_in_place(api: ChainClient):
    screen = ResourceScreen(api, "events")
    await screen.mount()

    fill(screen, make_payload("events"))
    created = await screen.submit()
    assert created is not None
    assert screen.records == [created]
    assert screen.form == {"description": "", "comments": "", "date": ""}

    screen.edit(created)
    assert screen.edit_mode
    screen.set_field("description", "Moved")
    updated = await screen.submit()

    assert updated["id"] == created["id"]
    assert [r["description"] for r in screen.records] == ["Moved"]
    assert not screen.edit_mode
    assert screen.current_id is None


@pytest.mark.asyncio
async def test_failed_save_keeps_form_and_reports_field(api: ChainClient):
    screen = ResourceScreen(api, "events")
    fill(screen, {"description": "Talk", "comments": "c"})

    assert await screen.submit() is None

    assert screen.error == "Failed to save event."
    assert screen.field_errors == {"date": "date is required"}
    assert screen.form["description"] == "Talk"
    assert screen.records == []


@pytest.mark.asyncio
async def test_remove_asks_first(api: ChainClient):
    screen = ResourceScreen(api, "events")
    fill(screen, make_payload("events"))
    created = await screen.submit()
    prompts = []

    def decline(prompt):
        prompts.append(prompt)
        return False

    assert not await screen.remove(created["id"], decline)
    assert prompts == ["Delete this event?"]
    assert len(screen.records) == 1

    assert await screen.remove(created["id"], lambda prompt: True)
    assert screen.records == []
    with pytest.raises(ChainAPIError) as exc:
        await api.get("events", created["id"])
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_failed_remove_keeps_row(api: ChainClient):
    screen = ResourceScreen(api, "events")
    screen.records = [{"id": "gone", "description": "d"}]

    assert not await screen.remove("gone", lambda prompt: True)

    assert screen.error == "Failed to delete event."
    assert len(screen.records) == 1


@pytest.mark.asyncio
async def test_filter_by_id_is_local_and_case_insensitive(api: ChainClient):
    screen = ResourceScreen(api, "professionals")
    for pid in ("ABC123", "abd999", "zzz000"):
        payload = make_payload("professionals")
        payload["id"] = pid
        fill(screen, payload)
        await screen.submit()

    screen.filter_text = "ab"
    assert [r["id"] for r in screen.rows()] == ["ABC123", "abd999"]

    screen.filter_text = ""
    assert len(screen.rows()) == 3


@pytest.mark.asyncio
async def test_student_screen_links_to_user(api: ChainClient):
    user = await api.create("users", make_payload("users"))
    screen = ResourceScreen(api, "students")

    fill(screen, make_payload("students", user_id=user["id"]))
    created = await screen.submit()

    assert created["name"] == user["name"]
    assert created["studentId"]


@pytest.mark.asyncio
async def test_user_edit_needs_password_again(api: ChainClient):
    screen = ResourceScreen(api, "users")
    fill(screen, make_payload("users"))
    created = await screen.submit()

    screen.edit(created)
    assert screen.form["pwd"] == ""
    assert await screen.submit() is None
    assert screen.field_errors == {"pwd": "pwd is required"}

    screen.set_field("pwd", "nova-senha")
    assert await screen.submit() is not None


@pytest.mark.asyncio
async def test_login_screen(api: ChainClient):
    payload = make_payload("users")
    payload["level"] = "2"
    await api.create("users", payload)
    screen = LoginScreen(api)

    assert await screen.submit(payload["email"], "wrong") is None
    assert screen.error == "Invalid email or password."
    assert not screen.logged_in

    assert await screen.submit(payload["email"], "senha123") == "2"
    assert screen.logged_in
    assert screen.error == ""
    assert set(screen.open_screens()) == {"events", "appointments"}
