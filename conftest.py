# conftest.py
"""
공용 pytest 픽스처.

사용법: python -m pytest -v
외부 Firestore 없이 InMemoryRecordStore 로 서비스와 Flask 앱을 구성합니다.
"""

import pytest
from flask_jwt_extended import create_access_token

from app import create_app
from app.services.record_store import InMemoryRecordStore, collections_from_config
from app.api.users.services import UserService
from app.api.posts.services import PostService
from app.api.likes.services import LikeService


@pytest.fixture
def store():
    return InMemoryRecordStore(collections_from_config({}))


@pytest.fixture
def post_service(store):
    return PostService(store)


@pytest.fixture
def user_service(store, post_service):
    return UserService(store, post_service=post_service)


@pytest.fixture
def like_service(store):
    return LikeService(store)


@pytest.fixture
def app():
    return create_app('testing')


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    """외부 인증 서비스가 발급했다고 가정한 Bearer 토큰 헤더를 만듭니다."""
    def _headers(username: str) -> dict:
        with app.app_context():
            token = create_access_token(identity=username)
        return {"Authorization": f"Bearer {token}"}
    return _headers
