# app/utils/datetime_utils.py
"""
프로젝트 전체에서 일관된 시간 처리를 위한 중앙화된 유틸리티 모듈

이 모듈의 목적:
1. 모든 created_at 값을 UTC timezone-aware datetime 으로 통일
2. Firestore 저장/조회 시 timezone 처리 일관성 확보
3. 같은 프로세스 안에서 생성 시각이 겹치지 않도록 보장 (피드 정렬용)
"""

import logging
import threading
from datetime import datetime, date, timezone, time, timedelta
from typing import Any, Union

from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)

_last_issued: Union[datetime, None] = None
_clock_lock = threading.Lock()


class DateTimeUtils:
    """시간/날짜 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """
        현재 시간을 UTC timezone-aware datetime 으로 반환.
        직전에 발급한 값보다 항상 1µs 이상 큰 값을 반환합니다.
        """
        global _last_issued
        with _clock_lock:
            current = datetime.now(timezone.utc)
            if _last_issued is not None and current <= _last_issued:
                current = _last_issued + timedelta(microseconds=1)
            _last_issued = current
            return current

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 포맷 문자열을 UTC datetime 객체로 파싱

        지원 포맷:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+09:00
        - 2024-01-15T10:30:00.123456Z
        - 2024-01-15T10:30:00
        """
        if not iso_string:
            raise ValueError("빈 문자열은 파싱할 수 없습니다")
        try:
            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'
            dt = dateutil_parser.isoparse(iso_string)
        except (ValueError, OverflowError) as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")

        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Firestore 저장을 위해 객체의 날짜/시간 필드를 변환

        변환 규칙:
        - date -> datetime (00:00:00 UTC)
        - timezone-naive datetime -> timezone-aware datetime (UTC)
        - dict/list 내부 재귀적 변환
        """
        if isinstance(obj, datetime):
            if obj.tzinfo is None:
                return obj.replace(tzinfo=timezone.utc)
            return obj.astimezone(timezone.utc)
        elif isinstance(obj, date):
            return datetime.combine(obj, time.min).replace(tzinfo=timezone.utc)
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DateTimeUtils.for_firestore(item) for item in obj]
        return obj

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Firestore 에서 읽은 데이터의 datetime 필드를 UTC datetime 으로 정규화

        - DatetimeWithNanoseconds 는 datetime 의 하위 클래스이므로 그대로 UTC 로 변환합니다.
        - dict/list 내부 재귀적 변환
        """
        if isinstance(obj, datetime):
            if obj.tzinfo is None:
                return obj.replace(tzinfo=timezone.utc)
            return obj.astimezone(timezone.utc)
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.from_firestore(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DateTimeUtils.from_firestore(item) for item in obj]
        return obj

    @staticmethod
    def sort_key(value: Any) -> datetime:
        """created_at 정렬용 키. 값이 없으면 가장 오래된 것으로 취급합니다."""
        if value is None:
            return datetime.min.replace(tzinfo=timezone.utc)
        if isinstance(value, str):
            return DateTimeUtils.parse_iso_datetime(value)
        return DateTimeUtils.from_firestore(value)

