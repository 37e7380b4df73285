import json
import os
from typing import Any, Dict, List, Optional
from uuid import uuid4

from flask import Flask, jsonify, redirect, render_template, request, session, url_for

from smartloan.catalog import DEFAULT_LOAN_TYPE, list_loan_types
from smartloan.data_models import InterestType
from smartloan.engine import compute_schedule
from smartloan.formatter import summary_lines
from smartloan.main import build_request
from smartloan_web.comparison_store import create_store_from_env

FORM_DEFAULTS = {
    "loan_type": DEFAULT_LOAN_TYPE,
    "interest_type": InterestType.EFFECTIVE.value,
    "asset_price": "500000000",
    "down_payment": "20",
    "income": "15000000",
    "tenor": "15",
    "rate": "",
    "fixed_period": "3",
    "floating_rates": "",
}
MAX_PREVIEW_ROWS = 120


def parse_form_list(value: str) -> List[str]:
    """Parse a comma or newline separated list of entries from a form field.

    Returns a list of trimmed strings, skipping any empty entries.
    """
    if not value:
        return []
    parts = [p.strip() for p in value.replace("\n", ",").split(",")]
    return [p for p in parts if p]


def _whole_years(value: Any, label: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{label} must be a whole number of years.") from None


def _params_from_mapping(data: Dict[str, Any]) -> Dict[str, Any]:
    """Map form or JSON fields onto ``build_request`` keyword arguments."""
    floating = data.get("floating_rates") or []
    if isinstance(floating, str):
        floating = parse_form_list(floating)
    elif not isinstance(floating, (list, tuple)):
        floating = [floating]
    fixed_period = str(data.get("fixed_period", "")).strip()
    return {
        "asset_price": str(data.get("asset_price", "")).strip(),
        "income": str(data.get("income", "")).strip(),
        "tenor": _whole_years(data.get("tenor") or 0, "Tenor"),
        "down_payment": str(data.get("down_payment", "20")).strip() or "0",
        "loan_type": str(data.get("loan_type") or DEFAULT_LOAN_TYPE),
        "interest_type": str(data.get("interest_type") or InterestType.EFFECTIVE.value),
        "rate": str(data.get("rate") or "").strip() or None,
        "fixed_period": _whole_years(fixed_period, "Fixed period") if fixed_period else None,
        "floating_rate": [str(r) for r in floating],
    }


def _chart_payload(schedule, summary) -> Dict[str, Any]:
    """Data for the principal-vs-interest bar chart and the composition donut."""
    return {
        "labels": [f"Year {e.month // 12}" if e.month % 12 == 0 else "" for e in schedule],
        "principal": [float(e.principal) for e in schedule],
        "interest": [float(e.interest) for e in schedule],
        "composition": [float(summary.loan_amount), float(summary.total_interest)],
    }


def _ensure_user_token() -> str:
    token = session.get("user_token")
    if not token:
        token = uuid4().hex
        session["user_token"] = token
        session.modified = True
    return token


def create_app(config: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=os.environ.get("FLASK_SECRET_KEY", "dev-secret-key"),
        COMPARISON_DATABASE_URL=os.environ.get("COMPARISON_DATABASE_URL"),
        ASSET_VERSION=os.environ.get("ASSET_VERSION", "1"),
        MAX_COMPARISONS=int(os.environ.get("SMARTLOAN_MAX_COMPARISONS", "10")),
    )
    if config:
        app.config.update(config)
    comparison_store = create_store_from_env(
        app.config["COMPARISON_DATABASE_URL"], max_per_user=app.config["MAX_COMPARISONS"]
    )
    app.extensions["comparison_store"] = comparison_store

    @app.route("/", methods=["GET", "POST"])
    def index():
        form = dict(FORM_DEFAULTS)
        summary = None
        schedule = None
        chart = None
        error = None
        truncated = 0
        user_token = _ensure_user_token()

        if request.method == "POST":
            form.update({k: request.form.get(k, v) for k, v in FORM_DEFAULTS.items()})
            action = request.form.get("action", "run")
            try:
                params = _params_from_mapping(form)
                full_schedule, summary = compute_schedule(build_request(**params))
            except ValueError as exc:
                app.logger.info("Simulation rejected: %s", exc)
                error = str(exc)
            else:
                schedule = full_schedule[:MAX_PREVIEW_ROWS]
                truncated = len(full_schedule) - len(schedule)
                chart = _chart_payload(full_schedule, summary)
                if action == "add_to_comparison":
                    name = request.form.get("scenario_name", "").strip() or "Scenario"
                    comparison_store.add_scenario(
                        user_token, uuid4().hex, name, params, summary.as_dict()
                    )

        return render_template(
            "index.html",
            form=form,
            loan_types=list_loan_types(),
            summary=summary,
            summary_lines=summary_lines(summary) if summary else None,
            schedule=schedule,
            truncated=truncated,
            chart_payload=json.dumps(chart) if chart else "null",
            error=error,
            asset_version=app.config["ASSET_VERSION"],
            comparison_scenarios=comparison_store.list_scenarios(user_token),
        )

    @app.post("/comparison/remove")
    def remove_comparison():
        comparison_store.remove_scenario(session.get("user_token"), request.form.get("scenario_id"))
        return redirect(url_for("index"))

    @app.post("/comparison/clear")
    def clear_comparisons():
        comparison_store.clear_scenarios(session.get("user_token"))
        return redirect(url_for("index"))

    @app.get("/api/loan-types")
    def api_loan_types():
        return jsonify(
            [
                {
                    "id": lt.id,
                    "label": lt.label,
                    "max_tenor_years": lt.max_tenor_years,
                    "default_rate": float(lt.default_rate),
                }
                for lt in list_loan_types()
            ]
        )

    @app.post("/api/simulate")
    def api_simulate():
        data = request.get_json(silent=True)
        if data is None:
            data = {}
        elif not isinstance(data, dict):
            return jsonify({"error": "Request body must be a JSON object.", "type": "ValueError"}), 400
        try:
            schedule, summary = compute_schedule(build_request(**_params_from_mapping(data)))
        except ValueError as exc:
            return jsonify({"error": str(exc), "type": type(exc).__name__}), 400
        return jsonify(
            {
                "summary": summary.as_dict(),
                "schedule": [entry.as_dict() for entry in schedule],
            }
        )

    return app


if __name__ == "__main__":
    print("Starting Smart Loan Simulator web app...")
    create_app().run(host="0.0.0.0", port=8710, debug=True)
