"""
Tests for entry and calculation API endpoints.
"""

import pytest

from auction_tracker import main
from auction_tracker.api.entries import EntryModel
from auction_tracker.config import get_settings


def as_json(entries):
    return [EntryModel.model_validate(e).model_dump(mode="json") for e in entries]


def amount_of(entries, label, scenario="Projetado"):
    for entry in entries:
        if entry["label"] == label and entry["scenario"] == scenario:
            return abs(entry["cash_flow"])
    return None


class TestHealth:
    """Test service endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_run_uses_configured_address(self, monkeypatch):
        calls = []
        monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

        main.run()

        app, kwargs = calls[0]
        assert app == "auction_tracker.main:app"
        assert kwargs["host"] == get_settings().host
        assert kwargs["port"] == get_settings().port


class TestEntriesAPI:
    """Test entry editing endpoints."""

    def test_set_value_recomputes(self, client):
        response = client.post(
            "/api/entries/value",
            json={
                "property_name": "p",
                "scenario": "Projetado",
                "label": "Venda",
                "amount": "R$ 190.000,00",
            },
        )
        assert response.status_code == 200
        data = response.json()

        assert amount_of(data["entries"], "Venda") == 190000
        assert amount_of(data["entries"], "Comissão Corretor") == pytest.approx(9500)
        assert data["params"]["broker_percent"] == 5

    def test_set_value_without_recompute(self, client):
        response = client.post(
            "/api/entries/value",
            json={
                "property_name": "p",
                "scenario": "Projetado",
                "label": "Venda",
                "amount": 190000,
                "recompute": False,
            },
        )
        data = response.json()

        assert len(data["entries"]) == 1
        assert data["params"] is None

    def test_unknown_label_without_category(self, client):
        response = client.post(
            "/api/entries/value",
            json={"property_name": "p", "scenario": "Projetado", "label": "Jardinagem", "amount": 10},
        )
        assert response.status_code == 400

    def test_invalid_scenario(self, client):
        response = client.post(
            "/api/entries/value",
            json={"property_name": "p", "scenario": "Futuro", "label": "Venda", "amount": 10},
        )
        assert response.status_code == 422

    def test_resolve_inherits(self, client, cash_property):
        response = client.post(
            "/api/entries/resolve",
            json={
                "entries": as_json(cash_property),
                "property_name": "guapo-casa1",
                "scenario": "Executado",
                "label": "Reforma",
            },
        )
        data = response.json()

        assert data["value"] == 10000
        assert data["source_scenario"] == "Projetado"

    def test_percentage(self, client, financed_property):
        response = client.post(
            "/api/entries/percentage",
            json={
                "entries": as_json(financed_property),
                "property_name": "nova-olinda-casa1",
                "scenario": "Projetado",
                "kind": "down_payment",
                "percent": 10,
            },
        )
        data = response.json()

        assert response.status_code == 200
        assert amount_of(data["entries"], "Entrada") == pytest.approx(20000)
        assert data["params"]["down_payment_percent"] == 10

    def test_simulation(self, client, financed_property):
        response = client.post(
            "/api/entries/simulation",
            json={
                "entries": as_json(financed_property),
                "property_name": "nova-olinda-casa1",
                "scenario": "Projetado",
                "key": "amortization_system",
                "value": "Price",
            },
        )
        assert response.status_code == 200
        assert response.json()["params"]["amortization_system"] == "Price"

    def test_simulation_unknown_key(self, client, financed_property):
        response = client.post(
            "/api/entries/simulation",
            json={
                "entries": as_json(financed_property),
                "property_name": "nova-olinda-casa1",
                "scenario": "Projetado",
                "key": "grace_months",
                "value": 6,
            },
        )
        assert response.status_code == 400


class TestCalculationsAPI:
    """Test calculation endpoints."""

    def test_recompute(self, client, cash_property):
        response = client.post(
            "/api/calculate/recompute",
            json={"entries": as_json(cash_property), "property_name": "guapo-casa1"},
        )
        data = response.json()

        assert amount_of(data["entries"], "ITBI") == pytest.approx(1854)
        assert amount_of(data["entries"], "Imposto de Ganho de Capital") == pytest.approx(10126.65)

    def test_summary(self, client, cash_property):
        response = client.post(
            "/api/calculate/summary",
            json={"entries": as_json(cash_property), "property_name": "guapo-casa1"},
        )
        data = response.json()

        assert response.status_code == 200
        assert data["breakdown"]["sale"] == 190000
        assert data["breakdown"]["duration_months"] == 12

    def test_compare(self, client, cash_property):
        response = client.post(
            "/api/calculate/compare",
            json={
                "entries": as_json(cash_property),
                "property_name": "guapo-casa1",
                "today": "2026-01-15",
            },
        )
        data = response.json()

        assert data["deltas"]["renovation"] == 0
        assert data["projected"]["total_profit"] == pytest.approx(data["executed"]["total_profit"])

    def test_amortization(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={
                "principal": 100000,
                "annual_interest_rate": 12,
                "term_months": 120,
                "amortization_system": "SAC",
                "total_months": 12,
            },
        )
        data = response.json()

        assert len(data["schedule"]) == 12
        assert data["snapshot"]["outstanding_balance"] == pytest.approx(90000)
        assert data["total_principal"] == pytest.approx(10000, abs=0.1)

    def test_sweep(self, client):
        response = client.post(
            "/api/calculate/sweep",
            json={"bid": 100000, "sale_value": 200000, "increment": 5000},
        )
        data = response.json()

        assert len(data["rows"]) == 12
        assert data["rows"][1]["bid"] == 105000
        assert data["base"]["net_profit"] == pytest.approx(70550)

    def test_sweep_without_bid(self, client):
        response = client.post("/api/calculate/sweep", json={"sale_value": 200000})
        assert response.json()["rows"] == []

    def test_portfolio(self, client, portfolio):
        response = client.post(
            "/api/calculate/portfolio",
            json={"entries": as_json(portfolio), "scenario": "Projetado", "states": ["GO"]},
        )
        data = response.json()

        assert response.status_code == 200
        assert len(data["properties"]) == 4
        assert data["profit"] == pytest.approx(data["revenue"] + data["costs"])
