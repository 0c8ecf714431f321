# app/models/user.py
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Dict, Any

from app.utils.datetime_utils import DateTimeUtils

@dataclass
class User:
    """
    'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    username 이 문서 키이며 생성 이후 변경되지 않습니다.
    """
    username: str
    display_name: str
    password_hash: str
    created_at: datetime = field(default_factory=DateTimeUtils.now)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
