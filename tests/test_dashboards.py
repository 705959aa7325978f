"""Tests for the role dashboards and the two-step confirmation flow."""

import fnmatch

import httpx
import pytest
from conftest import ADMIN, DINER, FRANCHISE_DETAIL, FRANCHISEE, body_of

from jwt_pizza.dashboards import (
    AdminDashboard,
    ConfirmFlow,
    ConfirmState,
    DinerDashboard,
    FranchiseeDashboard,
    dashboard_for,
)
from jwt_pizza.errors import ValidationError
from jwt_pizza.models import User


class AdminBackendState:
    """Mutable franchise and user tables behind the admin endpoints."""

    def __init__(self, backend):
        self.franchises = [
            {"id": 1, "name": "LotaPizza", "admins": [], "stores": []},
            {"id": 2, "name": "PizzaCorp", "admins": [], "stores": []},
        ]
        self.users = [dict(ADMIN), dict(DINER), dict(FRANCHISEE)]
        backend.route("GET", r"/api/franchise", self.list_franchises)
        backend.route("POST", r"/api/franchise", self.add_franchise)
        backend.route("DELETE", r"/api/franchise/[^/]+", self.remove_franchise)
        backend.route("GET", r"/api/user", self.list_users)
        backend.route("DELETE", r"/api/user/[^/]+", self.remove_user)

    @staticmethod
    def _matching(rows, request):
        pattern = request.url.params.get("name", "*")
        return [row for row in rows if fnmatch.fnmatch(row["name"], pattern)]

    def list_franchises(self, request):
        rows = self._matching(self.franchises, request)
        return httpx.Response(200, json={"franchises": rows, "more": False})

    def add_franchise(self, request):
        payload = body_of(request)
        franchise = {"id": len(self.franchises) + 10, "name": payload["name"], "admins": payload["admins"], "stores": []}
        self.franchises.append(franchise)
        return httpx.Response(200, json=franchise)

    def remove_franchise(self, request):
        franchise_id = request.url.path.rsplit("/", 1)[1]
        self.franchises = [row for row in self.franchises if str(row["id"]) != franchise_id]
        return httpx.Response(200, json={"message": "franchise deleted"})

    def list_users(self, request):
        rows = self._matching(self.users, request)
        return httpx.Response(200, json={"users": rows, "more": False})

    def remove_user(self, request):
        user_id = request.url.path.rsplit("/", 1)[1]
        self.users = [row for row in self.users if str(row["id"]) != user_id]
        return httpx.Response(200, json={"message": "user deleted"})


class TestConfirmFlow:
    @pytest.mark.asyncio
    async def test_cancel_returns_to_idle_without_action(self):
        flow = ConfirmFlow()
        calls = []

        async def action(target):
            calls.append(target)

        flow.request("Lehi")
        assert flow.state == ConfirmState.CONFIRMING
        flow.cancel()

        assert flow.state == ConfirmState.IDLE
        assert flow.target is None
        with pytest.raises(ValidationError):
            await flow.confirm(action)
        assert calls == []

    @pytest.mark.asyncio
    async def test_confirm_runs_action_once(self):
        flow = ConfirmFlow()
        calls = []

        async def action(target):
            calls.append(target)
            return target.upper()

        flow.request("lehi")
        assert await flow.confirm(action) == "LEHI"
        assert calls == ["lehi"]
        assert flow.state == ConfirmState.IDLE

    @pytest.mark.asyncio
    async def test_failed_action_still_resets(self):
        flow = ConfirmFlow()

        async def action(target):
            raise RuntimeError("boom")

        flow.request("lehi")
        with pytest.raises(RuntimeError):
            await flow.confirm(action)
        assert flow.state == ConfirmState.IDLE


class TestDinerDashboard:
    @pytest.mark.asyncio
    async def test_loads_first_page_of_history(self, service, backend):
        dashboard = DinerDashboard(service, User.from_json(DINER))
        await dashboard.load()

        assert len(dashboard.history.orders) == 1
        assert backend.calls_to("GET", "/api/order")[0].url.params["page"] == "1"

    @pytest.mark.asyncio
    async def test_paging(self, service, backend):
        dashboard = DinerDashboard(service, User.from_json(DINER))
        await dashboard.load()
        await dashboard.next_page()
        await dashboard.previous_page()

        pages = [call.url.params["page"] for call in backend.calls_to("GET", "/api/order")]
        assert pages == ["1", "2", "1"]


class TestFranchiseeDashboard:
    @pytest.mark.asyncio
    async def test_loads_owned_franchise(self, service):
        dashboard = FranchiseeDashboard(service, User.from_json(FRANCHISEE))
        await dashboard.load()

        assert dashboard.title == "LotaPizza"
        assert [store.name for store in dashboard.franchise.stores] == ["Lehi", "Springville"]

    @pytest.mark.asyncio
    async def test_without_franchise_shows_pitch(self, service, backend):
        dashboard = FranchiseeDashboard(service, User.from_json(DINER))
        await dashboard.load()
        assert dashboard.title == "So you want a piece of the pie?"
        assert backend.calls_to("GET", "/api/franchise/1") == []

    @pytest.mark.asyncio
    async def test_create_store_appends(self, service, backend):
        backend.route(
            "POST",
            r"/api/franchise/1/store",
            lambda request: httpx.Response(200, json={"id": 9, "name": body_of(request)["name"]}),
        )
        dashboard = FranchiseeDashboard(service, User.from_json(FRANCHISEE))
        await dashboard.load()

        store = await dashboard.create_store("  Orem ")

        assert store.name == "Orem"
        assert [item.name for item in dashboard.franchise.stores] == ["Lehi", "Springville", "Orem"]

    @pytest.mark.asyncio
    async def test_blank_store_name_is_rejected(self, service, backend):
        dashboard = FranchiseeDashboard(service, User.from_json(FRANCHISEE))
        await dashboard.load()
        with pytest.raises(ValidationError):
            await dashboard.create_store("   ")
        assert backend.calls_to("POST", "/api/franchise/1/store") == []

    @pytest.mark.asyncio
    async def test_cancelled_close_sends_nothing(self, service, backend):
        dashboard = FranchiseeDashboard(service, User.from_json(FRANCHISEE))
        await dashboard.load()

        dashboard.request_close_store(dashboard.franchise.stores[0])
        dashboard.cancel_close_store()

        assert backend.calls_to("DELETE", "/api/franchise/1/store/4") == []
        assert len(dashboard.franchise.stores) == 2

    @pytest.mark.asyncio
    async def test_confirmed_close_removes_store(self, service, backend):
        backend.route("DELETE", r"/api/franchise/1/store/[^/]+", {"message": "store deleted"})
        dashboard = FranchiseeDashboard(service, User.from_json(FRANCHISEE))
        await dashboard.load()

        dashboard.request_close_store(dashboard.franchise.stores[0])
        closed = await dashboard.confirm_close_store()

        assert closed.name == "Lehi"
        assert len(backend.calls_to("DELETE", "/api/franchise/1/store/4")) == 1
        assert [store.name for store in dashboard.franchise.stores] == ["Springville"]

    @pytest.mark.asyncio
    async def test_explicit_franchise_id(self, service, backend):
        backend.route("GET", r"/api/franchise/[^/]+", [dict(FRANCHISE_DETAIL, id="6", name="Other")])
        dashboard = FranchiseeDashboard(service, User.from_json(ADMIN), franchise_id="6")
        await dashboard.load()
        assert dashboard.title == "Other"
        assert backend.calls_to("GET", "/api/franchise/6")


class TestAdminDashboard:
    @pytest.mark.asyncio
    async def test_load_uses_paging_and_wildcard(self, service, backend):
        AdminBackendState(backend)
        dashboard = AdminDashboard(service, User.from_json(ADMIN))
        await dashboard.load()

        franchise_call = backend.calls_to("GET", "/api/franchise")[0]
        assert franchise_call.url.params["page"] == "0"
        assert franchise_call.url.params["limit"] == "3"
        assert franchise_call.url.params["name"] == "*"
        assert backend.calls_to("GET", "/api/user")[0].url.params["limit"] == "10"
        assert len(dashboard.users.users) == 3

    @pytest.mark.asyncio
    async def test_filter_users(self, service, backend):
        AdminBackendState(backend)
        dashboard = AdminDashboard(service, User.from_json(ADMIN))
        await dashboard.load()
        dashboard.user_query.page = 2

        await dashboard.filter_users("Kai")

        assert backend.calls_to("GET", "/api/user")[-1].url.params["name"] == "*Kai*"
        assert dashboard.user_query.page == 0
        assert [user.name for user in dashboard.users.users] == ["Kai Chen"]

    @pytest.mark.asyncio
    async def test_filter_franchises_blank_matches_all(self, service, backend):
        AdminBackendState(backend)
        dashboard = AdminDashboard(service, User.from_json(ADMIN))
        await dashboard.filter_franchises("  ")
        assert backend.calls_to("GET", "/api/franchise")[-1].url.params["name"] == "*"
        assert len(dashboard.franchises.franchises) == 2

    @pytest.mark.asyncio
    async def test_next_page_stops_without_more(self, service, backend):
        AdminBackendState(backend)
        dashboard = AdminDashboard(service, User.from_json(ADMIN))
        await dashboard.load()
        await dashboard.user_page(1)
        assert dashboard.user_query.page == 0
        assert len(backend.calls_to("GET", "/api/user")) == 1

    @pytest.mark.asyncio
    async def test_create_franchise_refetches(self, service, backend):
        state = AdminBackendState(backend)
        dashboard = AdminDashboard(service, User.from_json(ADMIN))
        await dashboard.load()

        franchise = await dashboard.create_franchise("New Franchise", "new@franchise.com")

        assert franchise.name == "New Franchise"
        assert len(state.franchises) == 3
        assert "New Franchise" in [item.name for item in dashboard.franchises.franchises]

    @pytest.mark.asyncio
    async def test_create_franchise_requires_fields(self, service, backend):
        dashboard = AdminDashboard(service, User.from_json(ADMIN))
        with pytest.raises(ValidationError):
            await dashboard.create_franchise("New Franchise", " ")
        assert backend.calls_to("POST", "/api/franchise") == []

    @pytest.mark.asyncio
    async def test_close_franchise_after_confirmation(self, service, backend):
        AdminBackendState(backend)
        dashboard = AdminDashboard(service, User.from_json(ADMIN))
        await dashboard.load()

        dashboard.request_close_franchise(dashboard.franchises.franchises[1])
        dashboard.cancel_close_franchise()
        assert backend.calls_to("DELETE", "/api/franchise/2") == []

        dashboard.request_close_franchise(dashboard.franchises.franchises[1])
        await dashboard.confirm_close_franchise()

        assert len(backend.calls_to("DELETE", "/api/franchise/2")) == 1
        assert [item.name for item in dashboard.franchises.franchises] == ["LotaPizza"]

    @pytest.mark.asyncio
    async def test_delete_user_refetches(self, service, backend):
        AdminBackendState(backend)
        dashboard = AdminDashboard(service, User.from_json(ADMIN))
        await dashboard.load()
        kai = next(user for user in dashboard.users.users if user.name == "Kai Chen")

        await dashboard.delete_user(kai)

        assert len(backend.calls_to("DELETE", "/api/user/3")) == 1
        assert "Kai Chen" not in [user.name for user in dashboard.users.users]


class TestDashboardSelection:
    def test_dashboard_for_roles(self):
        service = None
        assert isinstance(dashboard_for(service, User.from_json(ADMIN)), AdminDashboard)
        assert isinstance(dashboard_for(service, User.from_json(FRANCHISEE)), FranchiseeDashboard)
        assert isinstance(dashboard_for(service, User.from_json(DINER)), DinerDashboard)

    def test_dashboard_paths_and_titles(self):
        assert dashboard_for(None, User.from_json(ADMIN)).path == "/admin-dashboard"
        assert dashboard_for(None, User.from_json(FRANCHISEE)).path == "/franchise-dashboard"
        assert dashboard_for(None, User.from_json(DINER)).path == "/diner-dashboard"
        assert dashboard_for(None, User.from_json(ADMIN)).title == "Mama Ricci's kitchen"

    def test_franchisee_role_without_franchise_gets_diner_view(self):
        user = User.from_json(dict(FRANCHISEE, roles=[{"role": "franchisee"}]))
        assert isinstance(dashboard_for(None, user), DinerDashboard)
