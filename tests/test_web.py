FORM = {
    "loan_type": "KPR_Rumah",
    "interest_type": "effective",
    "asset_price": "500.000.000",
    "down_payment": "20",
    "income": "15000000",
    "tenor": "15",
    "rate": "",
    "fixed_period": "3",
    "floating_rates": "11, 11.5\n12",
}


def test_index_renders_form(client):
    response = client.get("/")
    assert response.status_code == 200
    body = response.get_data(as_text=True)
    assert "Smart Loan Simulator" in body
    assert "Kredit Mobil Baru" in body
    assert 'value="500000000"' in body


def test_post_runs_simulation(client):
    response = client.post("/", data=dict(FORM, action="run"))
    assert response.status_code == 200
    body = response.get_data(as_text=True)
    assert "Summary" in body
    assert "Monthly payment" in body
    assert "Showing first 120 rows. 60 more rows truncated." in body
    assert '"composition"' in body


def test_post_surfaces_validation_error(client):
    response = client.post("/", data=dict(FORM, tenor="40"))
    body = response.get_data(as_text=True)
    assert response.status_code == 200
    assert "Maximum tenor for KPR Rumah is 30 years." in body
    assert "Repayment schedule" not in body


def test_post_rejects_zero_income(client):
    response = client.post("/", data=dict(FORM, income="0"))
    assert "Monthly income must be greater than zero." in response.get_data(as_text=True)


def test_post_rejects_non_numeric_tenor(client):
    response = client.post("/", data=dict(FORM, tenor="fifteen"))
    assert response.status_code == 200
    assert "Tenor must be a whole number of years." in response.get_data(as_text=True)


def test_post_rejects_non_numeric_fixed_period(client):
    response = client.post("/", data=dict(FORM, fixed_period="three"))
    assert response.status_code == 200
    assert "Fixed period must be a whole number of years." in response.get_data(as_text=True)


def test_comparison_add_remove_and_clear(app, client):
    client.post("/", data=dict(FORM, action="add_to_comparison", scenario_name="Plan A"))
    client.post("/", data=dict(FORM, action="add_to_comparison", scenario_name="Plan B", interest_type="flat"))

    body = client.get("/").get_data(as_text=True)
    assert "Plan A" in body and "Plan B" in body

    store = app.extensions["comparison_store"]
    with client.session_transaction() as sess:
        token = sess["user_token"]
    scenarios = store.list_scenarios(token)
    assert [s["name"] for s in scenarios] == ["Plan A", "Plan B"]
    assert scenarios[1]["request"]["interest_type"] == "flat"
    assert "schedule" not in scenarios[0]

    response = client.post("/comparison/remove", data={"scenario_id": scenarios[0]["id"]})
    assert response.status_code == 302
    assert [s["name"] for s in store.list_scenarios(token)] == ["Plan B"]

    client.post("/comparison/clear")
    assert store.list_scenarios(token) == []


def test_failed_simulation_is_not_saved(app, client):
    client.post("/", data=dict(FORM, income="0", action="add_to_comparison", scenario_name="Broken"))
    with client.session_transaction() as sess:
        token = sess["user_token"]
    assert app.extensions["comparison_store"].list_scenarios(token) == []


def test_api_loan_types(client):
    response = client.get("/api/loan-types")
    data = response.get_json()
    assert response.status_code == 200
    assert [lt["id"] for lt in data] == ["KPR_Rumah", "Mobil_Baru", "Multiguna"]
    assert data[1]["max_tenor_years"] == 7


def test_api_simulate(client):
    response = client.post(
        "/api/simulate",
        json={
            "asset_price": 125000000,
            "income": 15000000,
            "tenor": 1,
            "interest_type": "flat",
            "rate": 10,
        },
    )
    assert response.status_code == 200
    data = response.get_json()
    assert len(data["schedule"]) == 12
    assert round(data["summary"]["monthly_payment"]) == 9166667
    assert round(data["summary"]["total_interest"]) == 10000000


def test_api_simulate_reports_validation_error(client):
    response = client.post(
        "/api/simulate",
        json={"asset_price": "500m", "income": 0, "tenor": 10},
    )
    assert response.status_code == 400
    data = response.get_json()
    assert data["type"] == "InvalidIncome"
    assert "Monthly income" in data["error"]


def test_api_simulate_rejects_non_object_body(client):
    response = client.post("/api/simulate", json=[1, 2])
    assert response.status_code == 400
    assert response.get_json()["error"] == "Request body must be a JSON object."


def test_api_simulate_accepts_single_floating_rate(client):
    response = client.post(
        "/api/simulate",
        json={"asset_price": "500m", "income": "15m", "tenor": 10, "floating_rates": 12},
    )
    assert response.status_code == 200
    schedule = response.get_json()["schedule"]
    assert schedule[35]["phase"] == "fixed"
    assert schedule[36]["phase"] == "floating"
    assert schedule[36]["rate"] == 12.0
    assert schedule[48]["rate"] == 11.0


def test_api_simulate_reports_unparseable_tenor(client):
    response = client.post(
        "/api/simulate",
        json={"asset_price": "500m", "income": "15m", "tenor": "ten"},
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "Tenor must be a whole number of years."
