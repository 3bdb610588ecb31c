from rasvia_backend.payments.errors import ProviderUnavailable

BODY = {
    "restaurant_id": 7,
    "stripe_account_id": "acct_123",
    "amount": 20,
    "restaurant_name": "Saffron House",
    "cart_items": [{"name": "Paneer Tikka", "price": 10, "quantity": 2}],
}


def test_create_checkout_returns_url(client_with_fakes, fake_provider):
    response = client_with_fakes.post("/api/v1/payments/checkout", json=BODY)

    assert response.status_code == 200
    assert response.json() == {"url": "https://checkout.stripe.test/c/pay/cs_test_new", "session_id": "cs_test_new"}
    params = fake_provider.created[0]
    # URL de retour déduite de la requête
    assert params["success_url"] == "http://testserver/payment-redirect?status=success&session_id={CHECKOUT_SESSION_ID}"
    assert params["cancel_url"] == "http://testserver/payment-redirect?status=cancel"


def test_create_checkout_uses_configured_redirect_url(client_with_fakes, fake_provider, monkeypatch):
    monkeypatch.setattr("rasvia_backend.payments.views.PAYMENT_REDIRECT_URL", "https://api.rasvia.app/payment-redirect")
    client_with_fakes.post("/api/v1/payments/checkout", json=BODY)
    assert fake_provider.created[0]["cancel_url"] == "https://api.rasvia.app/payment-redirect?status=cancel"


def test_create_checkout_invalid_amount(client_with_fakes, fake_provider):
    response = client_with_fakes.post("/api/v1/payments/checkout", json=dict(BODY, amount=0))
    assert response.status_code == 400
    assert response.json() == {"detail": "Montant invalide"}
    assert fake_provider.created == []


def test_create_checkout_requires_account(client_with_fakes):
    body = dict(BODY)
    body.pop("stripe_account_id")
    response = client_with_fakes.post("/api/v1/payments/checkout", json=body)
    assert response.status_code == 422


def test_create_checkout_provider_failure_is_502(client_with_fakes, fake_provider):
    fake_provider.error = ProviderUnavailable()
    response = client_with_fakes.post("/api/v1/payments/checkout", json=BODY)
    assert response.status_code == 502
    assert response.json() == {"detail": "Payment provider unavailable"}
