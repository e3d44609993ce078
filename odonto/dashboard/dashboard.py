from datetime import date

from flask import Blueprint, jsonify

from ..utils_db import date_arg
from .services import get_summary

dashboard_bp = Blueprint("dashboard", __name__)


@dashboard_bp.route("/", methods=["GET"])
def resumo():
    return jsonify(get_summary(date_arg("data") or date.today()))
