# app/api/users/services.py
import logging
from dataclasses import asdict
from typing import Optional, Dict, Any

from app.core.exceptions import AlreadyExists, UsernameTaken
from app.models.user import User
from app.services.record_store import RecordStore
from app.utils.datetime_utils import DateTimeUtils
from app.api.posts.services import PostService

class UserService:
    """
    사용자 디렉터리. username 을 키로 하는 사용자 문서를 관리합니다.
    - 가입(register) 외에 사용자 문서를 변경하는 경로는 없습니다.
    - PostService 는 프로필의 게시물 수 집계를 위해 의존성 주입으로 받습니다.
    """
    def __init__(self, store: RecordStore, post_service: Optional[PostService] = None):
        self.store = store
        self.post_service = post_service

    def register(self, username: str, display_name: str, password_hash: str) -> User:
        """
        새 사용자를 생성합니다. 같은 username 이 이미 있으면 덮어쓰지 않고 UsernameTaken 을 발생시킵니다.
        password_hash 는 호출자가 만든 값을 그대로 저장합니다.
        """
        new_user = User(
            username=username,
            display_name=display_name,
            password_hash=password_hash,
            created_at=DateTimeUtils.now()
        )
        try:
            self.store.put('users', asdict(new_user), require_absent=True)
        except AlreadyExists:
            logging.info(f"회원가입 거절: 이미 사용 중인 username (username: {username})")
            raise UsernameTaken(username)
        logging.info(f"회원가입 완료 (username: {username})")
        return new_user

    def lookup(self, username: str) -> Optional[User]:
        """username 으로 사용자를 조회합니다. 없으면 None."""
        data = self.store.get('users', username)
        return User.from_dict(data) if data else None

    def get_public_profile(self, username: str) -> Optional[Dict[str, Any]]:
        """
        공개 프로필 정보와 총 게시물 수를 함께 조회합니다.
        password_hash 같은 민감한 정보는 포함하지 않습니다.
        """
        user = self.lookup(username)
        if not user:
            return None

        profile = {
            "username": user.username,
            "display_name": user.display_name,
            "created_at": user.created_at,
        }
        if self.post_service:
            profile['post_count'] = self.post_service.count_by_author(username)
        return profile
