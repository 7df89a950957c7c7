from flask import Blueprint, jsonify

bp = Blueprint("views", __name__)


@bp.get("/")
def home():
    return "Rental marketplace backend is running"


@bp.get("/api/health")
def health():
    return jsonify({"status": "ok"})
