import logging

from flask import Blueprint, current_app, jsonify, request

from irrigation.models.reading import utc_timestamp
from irrigation.services.reading_source import AcquisitionError

api_bp = Blueprint("api", __name__)
logger = logging.getLogger(__name__)


def services():
    return current_app.extensions["irrigation"]


def parse_limit(raw, default: int) -> int:
    """Positive integer from the query string, anything else gives *default*."""
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return default
    return limit if limit > 0 else default


# READINGS

@api_bp.get("/current")
def api_current():
    """
    Runs the sensing process once, records the reading in history and returns it.
    """
    logger.info("Getting current irrigation data...")
    svc = services()
    try:
        reading = svc.reading_source.acquire(into=svc.history)
    except AcquisitionError as e:
        logger.error("Error: %s", e)
        return jsonify({"success": False, "error": str(e)}), 500

    return jsonify({"success": True, "data": reading.to_dict()})


@api_bp.get("/history")
def api_history():
    limit = parse_limit(request.args.get("limit"), current_app.config["HISTORY_DEFAULT_LIMIT"])
    recent = services().history.read(limit)
    return jsonify({
        "success": True,
        "count": len(recent),
        "data": [r.to_dict() for r in recent],
    })


# ACTUATION

@api_bp.post("/water")
def api_water():
    """
    Manual watering. The watered reading is returned but not stored in history.
    """
    try:
        reading = services().actuation.water()
    except AcquisitionError as e:
        logger.error("Manual watering failed: %s", e)
        return jsonify({"success": False, "error": str(e)}), 500

    return jsonify({
        "success": True,
        "message": "Manual watering completed",
        "data": reading.to_dict(),
    })


# SYSTEM

@api_bp.get("/status")
def api_status():
    return jsonify({"success": True, "system": services().status.system_status()})


@api_bp.get("/health")
def api_health():
    return jsonify({
        "success": True,
        "message": "Water Irrigation System API is running",
        "timestamp": utc_timestamp(),
    })
