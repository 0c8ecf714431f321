# app/api/health/routes.py
import logging
from flask import Blueprint, jsonify, current_app

from app.core.exceptions import StoreUnavailable

health_bp = Blueprint('health_bp', __name__)

@health_bp.route('/healthz', methods=['GET'])
def healthz():
    """프로세스 생존 여부만 확인합니다."""
    return jsonify({"status": "ok"}), 200

@health_bp.route('/readyz', methods=['GET'])
def readyz():
    """users/posts/likes 세 컬렉션 모두에 접근 가능한지 확인합니다."""
    try:
        current_app.services['store'].health_check()
    except StoreUnavailable as e:
        logging.error(f"readyz 실패: {e}")
        return jsonify({"ready": False}), 503
    return jsonify({"ready": True}), 200
