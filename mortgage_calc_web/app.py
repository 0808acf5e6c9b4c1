import json
import logging
from dataclasses import replace

from flask import Flask, jsonify, render_template, request

from mortgage_calc.config import AppConfig
from mortgage_calc.data_models import AmortizationSystem, LoanParameters
from mortgage_calc.engine import compute_schedule
from mortgage_calc.exceptions import InvalidParameterError
from mortgage_calc.formatter import serialize_comparison, serialize_schedule, serialize_years
from mortgage_calc.logging import setup_logging
from mortgage_calc.reporting import (
    aggregate_by_year,
    compare_schedules,
    first_year_breakdown,
    paginate,
    summarize,
)

logger = logging.getLogger(__name__)

# Values the original calculator form starts with.
FORM_DEFAULTS = {
    "principal": "166078",
    "term_months": "420",
    "annual_rate": "5.64",
    "monetary_correction_rate": "0.17",
    "target_installment": "1200",
    "extra_amortization": "0",
    "extra_amortization_mode": "NONE",
    "system": "SAC",
}


def create_app(config=None):
    config = config or AppConfig.from_env()
    app = Flask(__name__)
    app.config["ASSET_VERSION"] = config.web.asset_version
    app.secret_key = config.web.secret_key
    app.extensions["mortgage_calc"] = config

    def _schedule_for(params):
        return compute_schedule(params, config.insurance)

    def _run_analysis(form, page):
        """Compute both systems, returning the view model for the template."""
        params = LoanParameters.from_mapping(form)
        rows = _schedule_for(params)
        other_system = (
            AmortizationSystem.PRICE if params.system is AmortizationSystem.SAC else AmortizationSystem.SAC
        )
        other_rows = _schedule_for(_with_system(params, other_system))
        sac_rows, price_rows = (
            (rows, other_rows) if params.system is AmortizationSystem.SAC else (other_rows, rows)
        )
        return {
            "summary": summarize(params, rows),
            "page": paginate(rows, page, config.page_size),
            "years_payload": json.dumps(serialize_years(aggregate_by_year(rows))),
            "breakdown": first_year_breakdown(rows),
            "comparison_payload": json.dumps(serialize_comparison(compare_schedules(sac_rows, price_rows))),
        }

    @app.route("/", methods=["GET", "POST"])
    def index():
        form = dict(FORM_DEFAULTS)
        result = None
        error = None
        if request.method == "POST":
            form.update({key: value for key, value in request.form.items() if key in FORM_DEFAULTS})
            try:
                page = int(request.form.get("page", "1") or 1)
            except ValueError:
                page = 1
            try:
                result = _run_analysis(form, page)
            except InvalidParameterError as exc:
                error = str(exc)
        return render_template(
            "index.html",
            form=form,
            result=result,
            error=error,
            asset_version=app.config["ASSET_VERSION"],
        )

    def _json_schedule(forced_system=None):
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({"error": "Request body must be a JSON object", "field": None}), 400
        try:
            params = LoanParameters.from_mapping(payload)
        except InvalidParameterError as exc:
            return jsonify({"error": str(exc), "field": exc.field}), 400
        if forced_system is not None:
            params = _with_system(params, forced_system)
        rows = _schedule_for(params)
        return jsonify({"installments": serialize_schedule(rows), "summary": summarize(params, rows)})

    @app.post("/api/schedule")
    def api_schedule():
        return _json_schedule()

    @app.post("/api/sac")
    def api_sac():
        return _json_schedule(AmortizationSystem.SAC)

    @app.post("/api/price")
    def api_price():
        return _json_schedule(AmortizationSystem.PRICE)

    @app.post("/api/compare")
    def api_compare():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({"error": "Request body must be a JSON object", "field": None}), 400
        try:
            params = LoanParameters.from_mapping(payload)
        except InvalidParameterError as exc:
            return jsonify({"error": str(exc), "field": exc.field}), 400
        sac_params = _with_system(params, AmortizationSystem.SAC)
        price_params = _with_system(params, AmortizationSystem.PRICE)
        sac_rows = _schedule_for(sac_params)
        price_rows = _schedule_for(price_params)
        return jsonify(
            {
                "sac": {"summary": summarize(sac_params, sac_rows)},
                "price": {"summary": summarize(price_params, price_rows)},
                "comparison": serialize_comparison(compare_schedules(sac_rows, price_rows)),
            }
        )

    return app


def _with_system(params, system):
    return replace(params, system=system)


app = create_app()


if __name__ == "__main__":
    config = app.extensions["mortgage_calc"]
    setup_logging(config.log_level, config.log_format)
    logger.info("Starting mortgage calculator web app on port %d", config.web.port)
    app.run(host=config.web.host, port=config.web.port, debug=True)
