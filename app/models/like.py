# app/models/like.py
from dataclasses import dataclass
from typing import Tuple

@dataclass(frozen=True)
class Like:
    """
    'likes' 컬렉션의 문서 구조. (post_id, username) 복합 키 외의 데이터는 없습니다.
    문서가 존재한다는 것 자체가 "이 사용자가 이 게시글을 좋아한다"는 의미입니다.
    """
    post_id: str
    username: str

    @property
    def key(self) -> Tuple[str, str]:
        return (self.post_id, self.username)
