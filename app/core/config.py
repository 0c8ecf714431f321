# app/core/config.py

import os # 'os' 모듈: 환경 변수를 읽기 위해 사용합니다.

class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    APP_NAME = os.getenv('APP_NAME', 'socialapp')
    # 외부 인증 서비스가 발급한 JWT 의 서명을 검증하는 데 사용하는 키입니다. (토큰 발급은 이 서버의 역할이 아님)
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')

    # 저장소 백엔드: 'firestore' (운영) 또는 'memory' (로컬/테스트)
    STORE_BACKEND = os.getenv('STORE_BACKEND', 'firestore')
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')
    # 세 컬렉션의 물리 이름. 인프라에서 만든 이름을 그대로 사용합니다.
    USERS_COLLECTION = os.getenv('TABLE_USERS', 'socialapp-users')
    POSTS_COLLECTION = os.getenv('TABLE_POSTS', 'socialapp-posts')
    LIKES_COLLECTION = os.getenv('TABLE_LIKES', 'socialapp-likes')
    # conditional_update 트랜잭션의 최대 시도 횟수
    STORE_TRANSACTION_MAX_ATTEMPTS = int(os.getenv('STORE_TRANSACTION_MAX_ATTEMPTS', 5))

    POST_MAX_LENGTH = 280
    FEED_DEFAULT_LIMIT = 100
    FEED_MAX_LIMIT = 100

class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH', Config.FIREBASE_CREDENTIALS_PATH)

class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다. 외부 저장소 없이 메모리 저장소를 사용합니다."""
    TESTING = True
    DEBUG = False
    STORE_BACKEND = 'memory'
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    JWT_SECRET_KEY = 'testing-secret-key-with-enough-length'

class ProductionConfig(Config):
    """운영 환경을 위한 설정 클래스입니다."""
    DEBUG = False

# config_by_name: FLASK_ENV 값('development', 'testing', 'production')과 설정 클래스를 매핑합니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
