# app/services/record_store.py
"""
users / posts / likes 세 컬렉션에 대한 키 기반 저장소(Record Store).

모든 연산은 컬렉션 단위이며, 상위 서비스는 아래 primitive 만 사용합니다.
- get / put(require_absent) / delete
- conditional_update : 현재 저장된 상태에 대해 전제 조건을 평가하고 원자적으로 갱신
- scan / query : 정렬 보장 없는 전체(또는 필터) 조회
- health_check : 모든 컬렉션 접근 가능 여부 확인

구현체
- FirestoreRecordStore : 운영용. conditional_update 는 Firestore 트랜잭션(서버 측 낙관적 동시성 + 제한된 재시도)으로 처리합니다.
- InMemoryRecordStore  : 로컬 개발/테스트용. 하나의 프로세스 안에서 lock 으로 원자성을 보장합니다.
"""

import copy
import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple, Union

from flask import Flask
from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as google_auth_exceptions

from app.core.exceptions import AlreadyExists, PreconditionFailed, StoreUnavailable
from app.utils.datetime_utils import DateTimeUtils

Key = Union[str, Tuple[str, ...]]
Record = Dict[str, Any]
Precondition = Callable[[Optional[Record]], bool]
Mutation = Callable[[Record], Dict[str, Any]]

KEY_SEPARATOR = ':'


class CollectionSpec(NamedTuple):
    """논리 컬렉션 이름에 대응하는 물리 컬렉션 이름과 키 필드."""
    name: str
    key_fields: Tuple[str, ...]


def collections_from_config(config) -> Dict[str, CollectionSpec]:
    """앱 설정에서 users/posts/likes 컬렉션 정의를 만듭니다."""
    return {
        'users': CollectionSpec(config.get('USERS_COLLECTION', 'socialapp-users'), ('username',)),
        'posts': CollectionSpec(config.get('POSTS_COLLECTION', 'socialapp-posts'), ('post_id',)),
        'likes': CollectionSpec(config.get('LIKES_COLLECTION', 'socialapp-likes'), ('post_id', 'username')),
    }


class RecordStore:
    """Record Store 공통 인터페이스. 키 정규화와 query/health_check 는 여기서 처리합니다."""

    def __init__(self, collections: Optional[Dict[str, CollectionSpec]] = None):
        self.collections: Dict[str, CollectionSpec] = dict(collections or {})

    def init_app(self, app: Flask):
        """앱 설정의 컬렉션 이름으로 저장소를 구성합니다."""
        self.collections = collections_from_config(app.config)

    # --- 키 처리 ---
    def _spec(self, collection: str) -> CollectionSpec:
        try:
            return self.collections[collection]
        except KeyError:
            raise ValueError(f"등록되지 않은 컬렉션입니다: {collection}")

    def _normalize_key(self, collection: str, key: Key) -> Tuple[str, ...]:
        spec = self._spec(collection)
        parts = (key,) if isinstance(key, str) else tuple(key)
        if len(parts) != len(spec.key_fields):
            raise ValueError(f"'{collection}' 키는 {spec.key_fields} 형식이어야 합니다: {key}")
        for part in parts:
            if not isinstance(part, str) or not part:
                raise ValueError(f"키 구성 요소는 비어있지 않은 문자열이어야 합니다: {key}")
        return parts

    def key_of(self, collection: str, record: Record) -> Tuple[str, ...]:
        """레코드의 키 필드 값으로 키를 만듭니다."""
        spec = self._spec(collection)
        missing = [f for f in spec.key_fields if not record.get(f)]
        if missing:
            raise ValueError(f"'{collection}' 레코드에 키 필드가 없습니다: {missing}")
        return tuple(record[f] for f in spec.key_fields)

    # --- primitive ---
    def get(self, collection: str, key: Key) -> Optional[Record]:
        raise NotImplementedError

    def put(self, collection: str, record: Record, require_absent: bool = False) -> None:
        raise NotImplementedError

    def delete(self, collection: str, key: Key) -> None:
        raise NotImplementedError

    def conditional_update(self, collection: str, key: Key, mutation: Mutation, precondition: Precondition) -> Record:
        raise NotImplementedError

    def scan(self, collection: str) -> List[Record]:
        raise NotImplementedError

    def query(self, collection: str, predicate: Callable[[Record], bool]) -> List[Record]:
        """전체 스캔 후 predicate 로 필터링합니다. 정렬은 보장하지 않습니다."""
        return [record for record in self.scan(collection) if predicate(record)]

    def _ping(self, collection: str) -> None:
        raise NotImplementedError

    def health_check(self) -> bool:
        """모든 컬렉션에 접근 가능한지 확인합니다. 실패 시 StoreUnavailable."""
        for collection in self.collections:
            self._ping(collection)
        return True


class FirestoreRecordStore(RecordStore):
    """Firestore 기반 Record Store."""

    def __init__(self, collections: Optional[Dict[str, CollectionSpec]] = None, client=None, max_attempts: int = 5):
        super().__init__(collections)
        self.db = client
        self.max_attempts = max_attempts

    def init_app(self, app: Flask):
        super().init_app(app)
        self.max_attempts = app.config.get('STORE_TRANSACTION_MAX_ATTEMPTS', self.max_attempts)
        if self.db is None:
            self.db = firestore.client()
        logging.info(f"FirestoreRecordStore: 컬렉션 {[spec.name for spec in self.collections.values()]} 사용")

    @contextmanager
    def _translate_errors(self, collection: str, key: Any = None):
        """google-cloud 예외를 저장소 예외로 변환합니다."""
        try:
            yield
        except google_exceptions.AlreadyExists:
            raise AlreadyExists(collection, key)
        except (google_exceptions.GoogleAPICallError, google_exceptions.RetryError,
                google_auth_exceptions.GoogleAuthError) as e:
            logging.error(f"Firestore 호출 실패 (collection: {collection}, key: {key}): {e}", exc_info=True)
            raise StoreUnavailable(f"저장소에 접근할 수 없습니다 (collection: {collection}): {e}") from e

    def _document_id(self, collection: str, key: Key) -> Optional[str]:
        """
        키를 문서 id 로 변환합니다. 문서 id 로 표현할 수 없는 키는 None.
        '/' 는 경로 구분자이고, 복합 키에서는 ':' 가 필드 구분자입니다.
        """
        parts = self._normalize_key(collection, key)
        if any('/' in part for part in parts):
            return None
        if len(parts) > 1 and any(KEY_SEPARATOR in part for part in parts):
            return None
        return KEY_SEPARATOR.join(parts)

    def _document(self, collection: str, document_id: str):
        return self.db.collection(self._spec(collection).name).document(document_id)

    def get(self, collection: str, key: Key) -> Optional[Record]:
        document_id = self._document_id(collection, key)
        if document_id is None:
            # 저장될 수 없는 키이므로 존재하지 않는 것과 같습니다
            return None
        doc_ref = self._document(collection, document_id)
        with self._translate_errors(collection, key):
            snapshot = doc_ref.get()
        if not snapshot.exists:
            return None
        return DateTimeUtils.from_firestore(snapshot.to_dict())

    def put(self, collection: str, record: Record, require_absent: bool = False) -> None:
        key = self.key_of(collection, record)
        document_id = self._document_id(collection, key)
        if document_id is None:
            raise ValueError(f"문서 id 로 사용할 수 없는 키입니다 ('/' 또는 복합 키의 '{KEY_SEPARATOR}'): {key}")
        doc_ref = self._document(collection, document_id)
        data = DateTimeUtils.for_firestore(dict(record))
        with self._translate_errors(collection, key):
            if require_absent:
                # create() 는 서버 측에서 "문서가 없어야 함"을 검사합니다
                doc_ref.create(data)
            else:
                doc_ref.set(data)

    def delete(self, collection: str, key: Key) -> None:
        document_id = self._document_id(collection, key)
        if document_id is None:
            return
        with self._translate_errors(collection, key):
            self._document(collection, document_id).delete()

    def conditional_update(self, collection: str, key: Key, mutation: Mutation, precondition: Precondition) -> Record:
        """
        트랜잭션 안에서 현재 문서를 읽고 precondition 을 평가한 뒤 mutation 결과를 반영합니다.
        동시에 같은 문서를 갱신한 요청이 있으면 Firestore 가 트랜잭션을 재시도합니다 (max_attempts 회).
        """
        document_id = self._document_id(collection, key)
        if document_id is None:
            raise PreconditionFailed(collection, key)
        doc_ref = self._document(collection, document_id)

        @firestore.transactional
        def _update_in_transaction(transaction):
            snapshot = doc_ref.get(transaction=transaction)
            current = DateTimeUtils.from_firestore(snapshot.to_dict()) if snapshot.exists else None
            if not precondition(current) or current is None:
                raise PreconditionFailed(collection, key)
            updates = mutation(dict(current))
            transaction.update(doc_ref, DateTimeUtils.for_firestore(updates))
            return {**current, **updates}

        with self._translate_errors(collection, key):
            transaction = self.db.transaction(max_attempts=self.max_attempts)
            return _update_in_transaction(transaction)

    def scan(self, collection: str) -> List[Record]:
        col_ref = self.db.collection(self._spec(collection).name)
        with self._translate_errors(collection):
            return [DateTimeUtils.from_firestore(doc.to_dict()) for doc in col_ref.stream()]

    def _ping(self, collection: str) -> None:
        col_ref = self.db.collection(self._spec(collection).name)
        with self._translate_errors(collection):
            col_ref.limit(1).get()


class InMemoryRecordStore(RecordStore):
    """
    프로세스 메모리 기반 Record Store (로컬 개발/테스트용).
    저장/반환 시 레코드를 복사하므로 호출자와 상태를 공유하지 않습니다.
    """

    def __init__(self, collections: Optional[Dict[str, CollectionSpec]] = None):
        super().__init__(collections)
        self._lock = threading.Lock()
        self._data: Dict[str, Dict[Tuple[str, ...], Record]] = {}

    def _table(self, collection: str) -> Dict[Tuple[str, ...], Record]:
        self._spec(collection)
        return self._data.setdefault(collection, {})

    def get(self, collection: str, key: Key) -> Optional[Record]:
        parts = self._normalize_key(collection, key)
        with self._lock:
            record = self._table(collection).get(parts)
            return copy.deepcopy(record) if record is not None else None

    def put(self, collection: str, record: Record, require_absent: bool = False) -> None:
        key = self.key_of(collection, record)
        with self._lock:
            table = self._table(collection)
            if require_absent and key in table:
                raise AlreadyExists(collection, key if len(key) > 1 else key[0])
            table[key] = copy.deepcopy(record)

    def delete(self, collection: str, key: Key) -> None:
        parts = self._normalize_key(collection, key)
        with self._lock:
            self._table(collection).pop(parts, None)

    def conditional_update(self, collection: str, key: Key, mutation: Mutation, precondition: Precondition) -> Record:
        parts = self._normalize_key(collection, key)
        with self._lock:
            table = self._table(collection)
            current = table.get(parts)
            if not precondition(copy.deepcopy(current)) or current is None:
                raise PreconditionFailed(collection, key)
            updates = mutation(copy.deepcopy(current))
            current.update(copy.deepcopy(updates))
            return copy.deepcopy(current)

    def scan(self, collection: str) -> List[Record]:
        with self._lock:
            return [copy.deepcopy(record) for record in self._table(collection).values()]

    def _ping(self, collection: str) -> None:
        self._table(collection)


def create_record_store(app: Flask) -> RecordStore:
    """STORE_BACKEND 설정에 따라 Record Store 를 생성하고 초기화합니다."""
    backend = app.config.get('STORE_BACKEND', 'firestore')
    if backend == 'firestore':
        store = FirestoreRecordStore()
    elif backend == 'memory':
        store = InMemoryRecordStore()
    else:
        raise ValueError(f"지원하지 않는 STORE_BACKEND 입니다: {backend}")
    store.init_app(app)
    return store
