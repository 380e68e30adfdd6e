"""
API integration tests for bid endpoints.
"""

from collections.abc import Awaitable, Callable

import pytest
from httpx import AsyncClient

from bidproxy.auth.schemas import CurrentUser
from bidproxy.bids.models import Bid, BidStatus
from bidproxy.payments.mock_adapter import MockPaymentGateway

MakeBid = Callable[..., Awaitable[Bid]]
Headers = Callable[..., dict[str, str]]


# ============================================================================
# Customer endpoints
# ============================================================================


class TestCreateBid:
    async def test_create_bid_scenario(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        customer: CurrentUser,
    ) -> None:
        response = await async_client.post(
            "/api/customer/bids",
            json={"lotNumber": "LOT-1", "maxBidAmount": "1000.00"},
            headers=auth_headers(customer.id),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["lotNumber"] == "LOT-1"
        assert body["maxBidAmount"] == "1000.00"
        assert body["serviceFee"] == "215.00"
        assert body["depositAmount"] == "100.00"
        assert body["totalPaid"] == "315.00"
        assert body["status"] == "pending"
        assert body["isRefunded"] is False
        assert body["customerId"] == customer.id

    async def test_client_cannot_set_fees(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        customer: CurrentUser,
    ) -> None:
        response = await async_client.post(
            "/api/customer/bids",
            json={
                "lotNumber": "LOT-2",
                "maxBidAmount": 50,
                "serviceFee": "0.00",
                "totalPaid": "0.00",
            },
            headers=auth_headers(customer.id),
        )

        assert response.status_code == 201
        assert response.json()["serviceFee"] == "215.00"
        assert response.json()["totalPaid"] == "220.00"

    @pytest.mark.parametrize(
        "payload",
        [
            {"lotNumber": "", "maxBidAmount": "10.00"},
            {"lotNumber": "LOT-1", "maxBidAmount": "0"},
            {"lotNumber": "LOT-1", "maxBidAmount": "-5"},
            {"lotNumber": "LOT-1", "maxBidAmount": "10.123"},
            {"lotNumber": "LOT-1"},
            {"maxBidAmount": "10.00"},
        ],
    )
    async def test_invalid_payload_is_400(
        self,
        payload: dict,
        async_client: AsyncClient,
        auth_headers: Headers,
        customer: CurrentUser,
    ) -> None:
        response = await async_client.post(
            "/api/customer/bids",
            json=payload,
            headers=auth_headers(customer.id),
        )

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["code"] == "VALIDATION_ERROR"
        assert detail["errors"]

    async def test_employee_cannot_create(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        employee: CurrentUser,
    ) -> None:
        response = await async_client.post(
            "/api/customer/bids",
            json={"lotNumber": "LOT-1", "maxBidAmount": "10.00"},
            headers=auth_headers(employee.id),
        )

        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "INSUFFICIENT_PERMISSIONS"


class TestCustomerReads:
    async def test_list_only_own_bids(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        make_bid: MakeBid,
        customer: CurrentUser,
        other_customer: CurrentUser,
    ) -> None:
        older = await make_bid(customer.id, lot_number="LOT-1")
        newer = await make_bid(customer.id, lot_number="LOT-2")
        await make_bid(other_customer.id, lot_number="LOT-3")

        response = await async_client.get("/api/customer/bids", headers=auth_headers(customer.id))

        assert response.status_code == 200
        assert [b["id"] for b in response.json()] == [newer.id, older.id]

    async def test_other_customers_bid_is_403(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        make_bid: MakeBid,
        customer: CurrentUser,
        other_customer: CurrentUser,
    ) -> None:
        bid = await make_bid(other_customer.id)

        response = await async_client.get(
            f"/api/customer/bids/{bid.id}",
            headers=auth_headers(customer.id),
        )

        assert response.status_code == 403
        assert response.json()["detail"]["message"] == "Forbidden"

    async def test_missing_bid_is_404(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        customer: CurrentUser,
    ) -> None:
        response = await async_client.get(
            "/api/customer/bids/does-not-exist",
            headers=auth_headers(customer.id),
        )

        assert response.status_code == 404
        assert response.json()["detail"]["message"] == "Bid not found"

    async def test_history_newest_first(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        make_bid: MakeBid,
        customer: CurrentUser,
        employee: CurrentUser,
    ) -> None:
        bid = await make_bid(customer.id)
        await async_client.post(
            f"/api/employee/bids/{bid.id}/approve", headers=auth_headers(employee.id)
        )
        await async_client.patch(
            f"/api/employee/bids/{bid.id}/status",
            json={"status": "winning"},
            headers=auth_headers(employee.id),
        )

        response = await async_client.get(
            f"/api/customer/bids/{bid.id}/history",
            headers=auth_headers(customer.id),
        )

        assert response.status_code == 200
        entries = response.json()
        assert [(e["previousStatus"], e["newStatus"]) for e in entries] == [
            ("approved", "winning"),
            ("pending", "approved"),
        ]
        assert entries[0]["changedBy"] == employee.id


class TestPaymentIntentEndpoint:
    async def test_returns_same_secret_twice(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        gateway: MockPaymentGateway,
        make_bid: MakeBid,
        customer: CurrentUser,
    ) -> None:
        bid = await make_bid(customer.id)
        url = f"/api/customer/bids/{bid.id}/payment-intent"

        first = await async_client.post(url, headers=auth_headers(customer.id))
        second = await async_client.post(url, headers=auth_headers(customer.id))

        assert first.status_code == 200
        assert first.json()["clientSecret"]
        assert second.json() == first.json()
        assert len(gateway.calls_named("create_intent")) == 1

    async def test_gateway_failure_is_generic_500(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        gateway: MockPaymentGateway,
        make_bid: MakeBid,
        customer: CurrentUser,
    ) -> None:
        bid = await make_bid(customer.id)
        gateway.fail_with = "secret processor detail"

        response = await async_client.post(
            f"/api/customer/bids/{bid.id}/payment-intent",
            headers=auth_headers(customer.id),
        )

        assert response.status_code == 500
        assert "secret processor detail" not in response.text
        assert response.json()["detail"]["message"] == "Payment processing failed"


# ============================================================================
# Employee endpoints
# ============================================================================


class TestEmployeeBids:
    async def test_list_all_bids(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        make_bid: MakeBid,
        customer: CurrentUser,
        other_customer: CurrentUser,
        employee: CurrentUser,
    ) -> None:
        first = await make_bid(customer.id)
        second = await make_bid(other_customer.id)

        response = await async_client.get("/api/employee/bids", headers=auth_headers(employee.id))

        assert response.status_code == 200
        assert [b["id"] for b in response.json()] == [second.id, first.id]

    async def test_customer_cannot_list_all(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        customer: CurrentUser,
    ) -> None:
        response = await async_client.get("/api/employee/bids", headers=auth_headers(customer.id))

        assert response.status_code == 403

    async def test_super_admin_reaches_employee_tier(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        super_admin: CurrentUser,
    ) -> None:
        response = await async_client.get("/api/employee/bids", headers=auth_headers(super_admin.id))

        assert response.status_code == 200

    async def test_approve_then_approve_again(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        make_bid: MakeBid,
        customer: CurrentUser,
        employee: CurrentUser,
    ) -> None:
        bid = await make_bid(customer.id)
        url = f"/api/employee/bids/{bid.id}/approve"

        first = await async_client.post(url, headers=auth_headers(employee.id))
        second = await async_client.post(url, headers=auth_headers(employee.id))

        assert first.status_code == 200
        assert first.json()["status"] == "approved"
        assert first.json()["approvedBy"] == employee.id
        assert first.json()["approvedAt"] is not None
        assert second.status_code == 400
        assert second.json()["detail"]["message"] == "Only pending bids can be approved"

    async def test_reject_requires_notes(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        make_bid: MakeBid,
        customer: CurrentUser,
        employee: CurrentUser,
    ) -> None:
        bid = await make_bid(customer.id)

        response = await async_client.post(
            f"/api/employee/bids/{bid.id}/reject",
            json={"notes": "   "},
            headers=auth_headers(employee.id),
        )

        assert response.status_code == 400
        assert response.json()["detail"]["message"] == "Rejection reason is required"

    async def test_reject_pending(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        make_bid: MakeBid,
        customer: CurrentUser,
        employee: CurrentUser,
    ) -> None:
        bid = await make_bid(customer.id)

        response = await async_client.post(
            f"/api/employee/bids/{bid.id}/reject",
            json={"notes": "Lot withdrawn"},
            headers=auth_headers(employee.id),
        )

        assert response.status_code == 200
        assert response.json()["status"] == "rejected"
        assert response.json()["notes"] == "Lot withdrawn"
        assert response.json()["rejectedBy"] == employee.id

    async def test_status_update_rejects_unknown_status(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        make_bid: MakeBid,
        customer: CurrentUser,
        employee: CurrentUser,
    ) -> None:
        bid = await make_bid(customer.id)

        response = await async_client.patch(
            f"/api/employee/bids/{bid.id}/status",
            json={"status": "sold"},
            headers=auth_headers(employee.id),
        )

        assert response.status_code == 400

    async def test_status_update_missing_bid(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        employee: CurrentUser,
    ) -> None:
        response = await async_client.patch(
            "/api/employee/bids/missing/status",
            json={"status": "won"},
            headers=auth_headers(employee.id),
        )

        assert response.status_code == 404


class TestRefundEndpoint:
    async def test_refund_scenario(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        gateway: MockPaymentGateway,
        make_bid: MakeBid,
        customer: CurrentUser,
        employee: CurrentUser,
    ) -> None:
        intent = await gateway.create_intent(31500, "usd", {})
        bid = await make_bid(customer.id, status=BidStatus.LOST, payment_intent_id=intent.id)
        url = f"/api/employee/bids/{bid.id}/refund"

        first = await async_client.post(url, headers=auth_headers(employee.id))
        second = await async_client.post(url, headers=auth_headers(employee.id))

        assert first.status_code == 200
        body = first.json()
        assert body["message"] == "Refund processed successfully"
        assert body["bid"]["isRefunded"] is True
        assert body["bid"]["stripeDepositRefundId"] == body["refundId"]
        assert body["bid"]["stripeFeeRefundId"] == body["refundId"]
        assert second.status_code == 400
        assert second.json()["detail"]["message"] == "Bid has already been refunded"

    async def test_refund_won_bid_is_400(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        make_bid: MakeBid,
        customer: CurrentUser,
        employee: CurrentUser,
    ) -> None:
        bid = await make_bid(customer.id, status=BidStatus.WON, payment_intent_id="pi_1")

        response = await async_client.post(
            f"/api/employee/bids/{bid.id}/refund",
            headers=auth_headers(employee.id),
        )

        assert response.status_code == 400
        assert response.json()["detail"]["message"] == "Only outbid or lost bids can be refunded"


class TestDeleteEndpoint:
    async def test_delete_lost_bid(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        make_bid: MakeBid,
        customer: CurrentUser,
        employee: CurrentUser,
    ) -> None:
        bid = await make_bid(customer.id, status=BidStatus.LOST)

        response = await async_client.delete(
            f"/api/employee/bids/{bid.id}",
            headers=auth_headers(employee.id),
        )
        lookup = await async_client.get(
            f"/api/customer/bids/{bid.id}",
            headers=auth_headers(customer.id),
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Bid deleted successfully"}
        assert lookup.status_code == 404

    async def test_delete_pending_bid_is_400(
        self,
        async_client: AsyncClient,
        auth_headers: Headers,
        make_bid: MakeBid,
        customer: CurrentUser,
        employee: CurrentUser,
    ) -> None:
        bid = await make_bid(customer.id)

        response = await async_client.delete(
            f"/api/employee/bids/{bid.id}",
            headers=auth_headers(employee.id),
        )

        assert response.status_code == 400
        assert response.json()["detail"]["message"] == "Only won or lost bids can be deleted"
