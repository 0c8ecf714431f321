# app/core/exceptions.py
"""
저장소 계층과 도메인 서비스에서 사용하는 예외 정의.

- 조회 실패(NotFound)는 예외가 아니라 None 으로 표현합니다.
- PreconditionFailed 는 좋아요 엔진 내부에서만 흡수되며 호출자에게 노출되지 않습니다.
- StoreUnavailable 은 재시도 없이 요청 경계까지 전파됩니다.
"""

from typing import Optional


class StoreError(Exception):
    """Record Store 계층 예외의 기반 클래스."""


class AlreadyExists(StoreError):
    """require_absent=True 로 저장할 때 동일한 키의 문서가 이미 존재하는 경우."""

    def __init__(self, collection: str, key, message: Optional[str] = None):
        self.collection = collection
        self.key = key
        super().__init__(message or f"이미 존재하는 문서입니다 (collection: {collection}, key: {key})")


class PreconditionFailed(StoreError):
    """conditional_update 의 전제 조건이 현재 저장된 상태에서 성립하지 않는 경우."""

    def __init__(self, collection: str, key):
        self.collection = collection
        self.key = key
        super().__init__(f"전제 조건을 만족하지 않아 갱신하지 않았습니다 (collection: {collection}, key: {key})")


class StoreUnavailable(StoreError):
    """백엔드 저장소에 접근할 수 없거나 설정이 잘못된 경우."""


class UsernameTaken(AlreadyExists):
    """회원가입 시 이미 사용 중인 username."""

    def __init__(self, username: str):
        super().__init__('users', username, message=f"이미 사용 중인 사용자 이름입니다: {username}")
        self.username = username


__all__ = [
    "StoreError",
    "AlreadyExists",
    "PreconditionFailed",
    "StoreUnavailable",
    "UsernameTaken",
]
