import pytest

from smartloan_web.comparison_store import ComparisonStore

SUMMARY = {"monthly_payment": 3500000.0, "total_interest": 230000000.0, "dti_ratio": 23.3}
REQUEST = {"asset_price": "500m", "income": "15m", "tenor": 15}


@pytest.fixture()
def store():
    return ComparisonStore("sqlite://", max_per_user=2)


def test_add_and_list(store):
    store.add_scenario("user-1", "a", "Plan A", REQUEST, SUMMARY)
    scenarios = store.list_scenarios("user-1")
    assert len(scenarios) == 1
    assert scenarios[0]["id"] == "a"
    assert scenarios[0]["request"] == REQUEST
    assert scenarios[0]["summary"] == SUMMARY
    assert scenarios[0]["created_at"]


def test_oldest_scenarios_are_trimmed(store):
    for name in ("a", "b", "c"):
        store.add_scenario("user-1", name, name.upper(), REQUEST, SUMMARY)
    assert [s["id"] for s in store.list_scenarios("user-1")] == ["b", "c"]


def test_scenarios_are_scoped_per_user(store):
    store.add_scenario("user-1", "a", "Mine", REQUEST, SUMMARY)
    store.add_scenario("user-2", "b", "Theirs", REQUEST, SUMMARY)

    store.remove_scenario("user-2", "a")
    assert [s["id"] for s in store.list_scenarios("user-1")] == ["a"]

    store.clear_scenarios("user-2")
    assert store.list_scenarios("user-2") == []
    assert len(store.list_scenarios("user-1")) == 1


def test_remove_scenario(store):
    store.add_scenario("user-1", "a", "Plan A", REQUEST, SUMMARY)
    store.remove_scenario("user-1", "a")
    assert store.list_scenarios("user-1") == []


def test_missing_token_is_a_no_op(store):
    store.add_scenario("", "a", "Plan A", REQUEST, SUMMARY)
    assert store.list_scenarios("") == []
    assert store.list_scenarios(None) == []


def test_zero_limit_keeps_everything():
    unlimited = ComparisonStore("sqlite://", max_per_user=0)
    for name in ("a", "b", "c"):
        unlimited.add_scenario("user-1", name, name.upper(), REQUEST, SUMMARY)
    assert [s["id"] for s in unlimited.list_scenarios("user-1")] == ["a", "b", "c"]


def test_trimming_leaves_other_users_alone(store):
    store.add_scenario("user-2", "x", "Theirs", REQUEST, SUMMARY)
    for name in ("a", "b", "c"):
        store.add_scenario("user-1", name, name.upper(), REQUEST, SUMMARY)
    assert [s["id"] for s in store.list_scenarios("user-2")] == ["x"]
