# app/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from typing import Optional
from flask import Flask, jsonify
from marshmallow import ValidationError
from flask_jwt_extended import JWTManager
from werkzeug.exceptions import HTTPException
import firebase_admin
from firebase_admin import credentials

# - 설정 / 예외
from app.core.config import config_by_name
from app.core.exceptions import StoreUnavailable

# - API 블루프린트
from app.api.health.routes import health_bp
from app.api.users.routes import users_bp
from app.api.posts.routes import posts_bp

# - 서비스 모듈
from app.services.record_store import create_record_store
from app.api.users.services import UserService
from app.api.posts.services import PostService
from app.api.likes.services import LikeService

def create_app(config_name: Optional[str] = None):
    """
    Flask 애플리케이션 팩토리 함수.
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    JWTManager(app)

    if app.config['STORE_BACKEND'] == 'firestore' and not firebase_admin._apps:
        cred_path = app.config['FIREBASE_CREDENTIALS_PATH']
        if not cred_path or not os.path.exists(cred_path):
            raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
        cred = credentials.Certificate(cred_path)
        firebase_admin.initialize_app(cred)

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 5-1. 모든 도메인 서비스의 기반이 되는 Record Store 먼저 생성
    try:
        app.services['store'] = create_record_store(app)
        logging.info(f"Record store initialized successfully (backend: {app.config['STORE_BACKEND']})")
    except Exception as e:
        logging.error(f"Failed to initialize record store: {e}")
        raise

    # 5-2. Record Store 를 주입받는 도메인 서비스 생성
    store = app.services['store']
    app.services['posts'] = PostService(store, max_content_length=app.config['POST_MAX_LENGTH'])
    app.services['users'] = UserService(store, post_service=app.services['posts'])
    app.services['likes'] = LikeService(store)

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(health_bp)
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(posts_bp, url_prefix='/api/posts')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(StoreUnavailable)
    def handle_store_unavailable(err):
        # 저장소 장애는 재시도하거나 숨기지 않고 요청을 실패시킵니다
        logging.error(f"Record store unavailable: {err}")
        response = {"error_code": "STORE_UNAVAILABLE", "message": "저장소에 일시적으로 접근할 수 없습니다."}
        return jsonify(response), 503

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        response = {"error_code": err.name.upper().replace(' ', '_'), "message": err.description}
        return jsonify(response), err.code

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"{app.config['APP_NAME']} app created for '{config_name}' environment.")

    return app
