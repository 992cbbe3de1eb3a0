# tests/test_api.py
from datetime import datetime, timezone
from decimal import Decimal


def create_product(client, sku="API-1", stock=5):
    response = client.post("/api/v1/inventory/products", json={
        "name": "Campera", "sku": sku, "barcode": f"BAR-{sku}", "price": "150.00", "initial_stock": stock
    })
    assert response.status_code == 200, response.text
    return response.json()["data"]["product_id"]


def create_customer(client):
    response = client.post("/api/v1/accounts/customers", json={"full_name": "María Gómez"})
    assert response.status_code == 200, response.text
    return response.json()["data"]["id"]


class TestApiRoot:

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["api"] == "/api/v1"

    def test_api_root(self, client):
        response = client.get("/api/v1/")

        assert response.status_code == 200
        assert "sales" in response.json()["available_endpoints"]


class TestInventoryApi:

    def test_stock_and_adjustment(self, client):
        product_id = create_product(client)

        response = client.post(f"/api/v1/inventory/products/{product_id}/adjustments", json={"quantity": -2})
        assert response.status_code == 200
        assert response.json()["data"]["stock_after"] == 3

        response = client.get(f"/api/v1/inventory/products/{product_id}/stock")
        assert response.json()["data"]["stock"] == 3

    def test_unknown_product_is_404(self, client):
        response = client.get("/api/v1/inventory/products/no-existe/stock")

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "NOT_FOUND"

    def test_marketplace_sale_notifies(self, client, notifier):
        product_id = create_product(client)
        client.post("/api/v1/inventory/external-variants", json={
            "product_id": product_id, "external_variation_id": "MLA-1-V"
        })

        response = client.post("/api/v1/inventory/marketplace/sales", json={
            "external_variation_id": "MLA-1-V", "quantity": 1, "reference_id": "ORD-1"
        })

        assert response.status_code == 200
        assert response.json()["data"]["stock_after"] == 4
        assert (product_id, 4) in notifier.calls


class TestSalesApi:

    def test_sale_lifecycle(self, client):
        product_id = create_product(client)
        customer_id = create_customer(client)

        response = client.post("/api/v1/sales", json={
            "customer_id": customer_id,
            "items": [{"product_id": product_id, "quantity": 2, "unit_price": "150.00"}],
            "paid_amount": "100.00",
            "payment_method": "CARD"
        })
        assert response.status_code == 200, response.text
        body = response.json()
        assert body["ok"] is True
        sale_id = body["data"]["sale_id"]
        assert Decimal(str(body["data"]["pending"])) == Decimal("200")

        response = client.get(f"/api/v1/sales/{sale_id}")
        sale = response.json()["data"]
        assert sale["is_fiado"] is True
        assert len(sale["items"]) == 1

        response = client.get(f"/api/v1/accounts/customers/{customer_id}/balance")
        assert Decimal(str(response.json()["data"]["balance"])) == Decimal("200")

        response = client.post(f"/api/v1/sales/{sale_id}/cancel")
        assert response.status_code == 200

        response = client.post(f"/api/v1/sales/{sale_id}/cancel")
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_STATE"

    def test_insufficient_stock_is_400(self, client):
        product_id = create_product(client, stock=1)

        response = client.post("/api/v1/sales", json={
            "items": [{"product_id": product_id, "quantity": 3, "unit_price": "10"}],
            "paid_amount": "30"
        })

        assert response.status_code == 400
        assert response.json()["detail"] == {"message": "Stock insuficiente", "code": "INSUFFICIENT_STOCK"}

    def test_conditional_sale(self, client):
        product_id = create_product(client)
        customer_id = create_customer(client)

        response = client.post("/api/v1/sales/conditional", json={
            "customer_id": customer_id,
            "items": [{"product_id": product_id, "quantity": 1, "unit_price": "150"}]
        })
        sale_id = response.json()["data"]["sale_id"]

        response = client.post(f"/api/v1/sales/{sale_id}/confirm", json={"paid_amount": "150"})
        assert response.status_code == 200
        assert Decimal(str(response.json()["data"]["pending"])) == Decimal("0")

        response = client.post(f"/api/v1/sales/{sale_id}/return")
        assert response.status_code == 400


class TestAccountsAndCashApi:

    def test_debt_payment_and_reversal(self, client):
        customer_id = create_customer(client)

        response = client.post("/api/v1/accounts/debts", json={"customer_id": customer_id, "amount": "90"})
        assert response.json()["data"]["status"] == "DEUDA"

        response = client.post("/api/v1/accounts/payments", json={"customer_id": customer_id, "amount": "90"})
        assert response.json()["data"]["status"] == "CANCELADO"

        statement = client.get(f"/api/v1/accounts/customers/{customer_id}/statement").json()["data"]
        payment = next(m for m in statement["movements"] if m["movement_type"] == "PAYMENT")

        response = client.post(f"/api/v1/accounts/movements/{payment['id']}/reverse")
        assert response.status_code == 200
        assert Decimal(str(response.json()["data"]["balance"])) == Decimal("90")

        response = client.post(f"/api/v1/accounts/movements/{payment['id']}/reverse")
        assert response.status_code == 400

    def test_exchange_and_cash_day(self, client):
        returned_id = create_product(client, sku="API-IN")
        taken_id = create_product(client, sku="API-OUT")
        customer_id = create_customer(client)

        response = client.post("/api/v1/exchanges", json={
            "customer_id": customer_id,
            "items_in": [{"product_id": returned_id, "quantity": 1}],
            "items_out": [{"product_id": taken_id, "quantity": 1}],
            "difference_amount": "-50"
        })
        assert response.status_code == 200, response.text

        day = datetime.now(timezone.utc).date().isoformat()
        response = client.get(f"/api/v1/cash/days/{day}")

        assert response.status_code == 200
        assert Decimal(str(response.json()["data"]["total_out"])) == Decimal("50")

    def test_invalid_day_is_422(self, client):
        response = client.get("/api/v1/cash/days/ayer")

        assert response.status_code == 422
