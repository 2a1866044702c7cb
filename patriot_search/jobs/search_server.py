"""HTTP entrypoint serving reconciled search results and duplicate checks."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

from flask import Flask, jsonify, request

from patriot_search.core.config import get_settings
from patriot_search.etl.transform import duplicate_check_to_row, result_to_row, to_external_place
from patriot_search.matching.reconciler import build_reconciler

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)

_TRUTHY = {"1", "true", "yes"}
_FALSY = {"0", "false", "no"}

# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "search_api_configured": bool(settings.search_api_url),
                "places_configured": bool(settings.google_api_key),
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.get("/search")
def search() -> Any:
    """
    Run a directory search and classify every result.
    Query params: businessName, address, category, serviceType, q, onlyWithIncentives
    """
    args = request.args
    business_name = args.get("businessName")
    address = args.get("address")
    category = args.get("category")
    service_type = args.get("serviceType")
    keywords = args.get("q")

    if not any(value and value.strip() for value in (business_name, address, category, service_type, keywords)):
        return jsonify({"error": "at least one search parameter is required"}), 400

    settings = get_settings()
    only_raw = (args.get("onlyWithIncentives") or "").strip().lower()
    if only_raw and only_raw not in _TRUTHY | _FALSY:
        return jsonify({"error": "onlyWithIncentives must be a boolean"}), 400
    only_with_incentives = only_raw in _TRUTHY if only_raw else settings.show_only_with_incentives

    try:
        outcome = build_reconciler(settings).search(
            business_name=business_name,
            address=address,
            category=category,
            service_type=service_type,
            keywords=keywords,
        )
    except Exception as exc:  # noqa: BLE001
        logger.exception("Search failed: %s", exc)
        return jsonify({"error": "search failed"}), 500

    shown = outcome.with_incentives if only_with_incentives else outcome.results
    return (
        jsonify(
            {
                "data": {
                    "results": [result_to_row(result) for result in shown],
                    "total": len(outcome.results),
                    "shown": len(shown),
                    "only_with_incentives": only_with_incentives,
                    "params": outcome.params,
                }
            }
        ),
        200,
    )


@app.post("/duplicate-check")
def duplicate_check() -> Any:
    """
    Decide whether a clicked map place is already listed.
    JSON body: {"place_id": "..."} or {"place": {<Places details payload>}}
    """
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    place_id = str(payload.get("place_id") or "").strip()
    place_payload = payload.get("place")

    if not place_id and not isinstance(place_payload, dict):
        return jsonify({"error": "place_id or place is required"}), 400

    try:
        reconciler = build_reconciler(get_settings())
        if isinstance(place_payload, dict):
            result = reconciler.check_duplicate(to_external_place(place_payload))
        else:
            result = reconciler.check_place_id(place_id)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Duplicate check failed: %s", exc)
        return jsonify({"error": "duplicate check failed"}), 500

    return jsonify({"data": duplicate_check_to_row(result)}), 200


def main() -> None:
    port = get_settings().port
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
