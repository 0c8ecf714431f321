# app/models/post.py
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Dict, Any

from app.utils.datetime_utils import DateTimeUtils

@dataclass
class Post:
    """
    'posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    - author_display_name 은 작성 시점의 닉네임을 복사해 둔 값입니다.
    - like_count 는 likes 컬렉션에서 파생된 캐시이며, 좋아요 엔진만 변경합니다.
    """
    post_id: str
    author: str
    author_display_name: str
    content: str
    like_count: int = 0
    created_at: datetime = field(default_factory=DateTimeUtils.now)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Post":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        # like_count 필드가 없는 문서는 0 으로 취급
        if values.get('like_count') is None:
            values['like_count'] = 0
        return cls(**values)
