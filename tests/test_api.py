"""Tests for the HTTP service wrapper."""

import httpx
import pytest
from conftest import FRANCHISE_DETAIL, body_of

from jwt_pizza.api import name_pattern
from jwt_pizza.errors import ApiError, AuthzError, NotFoundError
from jwt_pizza.models import Order, OrderItem


class TestNamePattern:
    def test_wraps_term(self):
        assert name_pattern("Kai") == "*Kai*"

    def test_blank_matches_everything(self):
        assert name_pattern("") == "*"
        assert name_pattern("   ") == "*"
        assert name_pattern(None) == "*"


class TestPizzaService:
    @pytest.mark.asyncio
    async def test_bearer_token_read_at_send_time(self, service, backend):
        token = {"value": None}
        service.token_source = lambda: token["value"]

        await service.get_menu()
        token["value"] = "abc"
        await service.get_menu()

        first, second = backend.calls_to("GET", "/api/order/menu")
        assert "authorization" not in first.headers
        assert second.headers["authorization"] == "Bearer abc"

    @pytest.mark.asyncio
    async def test_login_failure_carries_server_message(self, service):
        with pytest.raises(ApiError) as excinfo:
            await service.login("wrong@test.com", "wrong")
        assert excinfo.value.message == "Invalid credentials"
        assert excinfo.value.status == 404

    @pytest.mark.asyncio
    async def test_status_mapping(self, service, backend):
        backend.route("DELETE", r"/api/franchise/9", {"message": "unauthorized"}, status=403)
        backend.route("DELETE", r"/api/user/9", {"message": "no such user"}, status=404)
        backend.route("GET", r"/api/docs", {"message": "boom"}, status=500)

        with pytest.raises(AuthzError):
            await service.close_franchise(9)
        with pytest.raises(NotFoundError):
            await service.delete_user(9)
        with pytest.raises(ApiError) as excinfo:
            await service.get_docs()
        assert excinfo.value.status == 500

    @pytest.mark.asyncio
    async def test_transport_failure_becomes_api_error(self, service, backend):
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        backend.route("GET", r"/api/order/menu", unreachable)
        with pytest.raises(ApiError) as excinfo:
            await service.get_menu()
        assert excinfo.value.status == 0

    @pytest.mark.asyncio
    async def test_list_users_query(self, service, backend):
        backend.route("GET", r"/api/user", {"users": [], "more": False})
        await service.list_users(page=0, limit=10, name="*Kai*")
        request = backend.calls_to("GET", "/api/user")[0]
        assert request.url.params["page"] == "0"
        assert request.url.params["limit"] == "10"
        assert request.url.params["name"] == "*Kai*"

    @pytest.mark.asyncio
    async def test_franchise_list_plain_has_no_query(self, service, backend):
        page = await service.get_franchises()
        assert len(page.franchises) == 2
        assert backend.calls_to("GET", "/api/franchise")[0].url.query == b""

    @pytest.mark.asyncio
    async def test_franchise_detail_accepts_array_or_object(self, service, backend):
        franchise = await service.get_franchise(1)
        assert franchise.name == "LotaPizza"

        backend.route("GET", r"/api/franchise/1", FRANCHISE_DETAIL)
        franchise = await service.get_franchise(1)
        assert [store.name for store in franchise.stores] == ["Lehi", "Springville"]

    @pytest.mark.asyncio
    async def test_franchise_detail_empty_array_is_not_found(self, service, backend):
        backend.route("GET", r"/api/franchise/8", [])
        with pytest.raises(NotFoundError):
            await service.get_franchise(8)

    @pytest.mark.asyncio
    async def test_create_franchise_body(self, service, backend):
        backend.route(
            "POST",
            r"/api/franchise",
            lambda request: httpx.Response(
                200,
                json={"id": "3", "name": body_of(request)["name"], "admins": body_of(request)["admins"], "stores": []},
            ),
        )
        franchise = await service.create_franchise("New Franchise", "new@franchise.com")
        assert franchise.name == "New Franchise"
        assert body_of(backend.calls_to("POST", "/api/franchise")[0]) == {
            "name": "New Franchise",
            "admins": [{"email": "new@franchise.com"}],
        }

    @pytest.mark.asyncio
    async def test_create_order_returns_receipt(self, service):
        order = Order(items=[OrderItem(menu_id=1, description="Veggie", price=0)], store_id=4, franchise_id=1)
        receipt = await service.create_order(order)
        assert receipt.jwt == "eyJpYXQ"
        assert receipt.order.id == 23

    @pytest.mark.asyncio
    async def test_update_user_omits_blank_password(self, service, backend):
        backend.route(
            "PUT",
            r"/api/user/4",
            lambda request: httpx.Response(
                200,
                json={"user": dict(body_of(request), id=4, roles=[{"role": "diner"}]), "token": "new-token"},
            ),
        )
        user, token = await service.update_user(4, "pizza dinerx", "x@jwt.com")
        assert user.name == "pizza dinerx"
        assert token == "new-token"
        assert "password" not in body_of(backend.calls_to("PUT", "/api/user/4")[0])

    @pytest.mark.asyncio
    async def test_verify_and_docs(self, service):
        result = await service.verify_order("eyJpYXQ")
        assert result.valid
        docs = await service.get_docs()
        assert docs.version == "1.0.0"
        assert docs.endpoints[0].path == "/api/order/menu"
