# app/api/posts/services.py
import logging
from dataclasses import asdict
from typing import Optional, List

from app.models.post import Post
from app.services.record_store import RecordStore
from app.utils.datetime_utils import DateTimeUtils

DEFAULT_MAX_CONTENT_LENGTH = 280

class PostService:
    """
    게시글 원장(Post Ledger). 게시글 생성/조회와 두 가지 목록 조회를 담당합니다.

    목록 조회는 posts 컬렉션 전체를 스캔한 뒤 created_at 기준으로 클라이언트 측에서 정렬합니다.
    컬렉션 크기에 비례하는 O(n) 연산이며 페이지네이션 커서도 없으므로 소규모 데이터에서만 적합합니다.
    작성자 인덱스로 교체하더라도 list_recent / list_by_author 의 계약은 그대로 유지해야 합니다.
    """
    def __init__(self, store: RecordStore, max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH):
        self.store = store
        self.max_content_length = max_content_length

    def publish(self, post_id: str, author: str, author_display_name: str, content: str) -> Post:
        """
        새 게시글을 저장합니다. like_count 는 0 으로 시작합니다.
        post_id 는 호출자가 충돌하지 않게 생성해야 하며, 같은 ID 로 다시 저장하면 덮어씁니다.
        """
        if not content or len(content) > self.max_content_length:
            raise ValueError(f"게시글 내용은 1~{self.max_content_length}자 사이여야 합니다.")

        new_post = Post(
            post_id=post_id,
            author=author,
            author_display_name=author_display_name,
            content=content,
            like_count=0,
            created_at=DateTimeUtils.now()
        )
        self.store.put('posts', asdict(new_post))
        logging.info(f"게시글 생성 (post_id: {post_id}, author: {author})")
        return new_post

    def get(self, post_id: str) -> Optional[Post]:
        data = self.store.get('posts', post_id)
        return Post.from_dict(data) if data else None

    def list_recent(self, limit: int) -> List[Post]:
        """최신순으로 최대 limit 개의 게시글을 반환합니다. (전체 스캔)"""
        if limit <= 0:
            return []
        return self._newest_first(self.store.scan('posts'), limit)

    def list_by_author(self, author: str, limit: int) -> List[Post]:
        """특정 작성자의 게시글을 최신순으로 최대 limit 개 반환합니다. (전체 스캔 후 필터)"""
        if limit <= 0:
            return []
        records = self.store.query('posts', lambda record: record.get('author') == author)
        return self._newest_first(records, limit)

    def count_by_author(self, author: str) -> int:
        """특정 작성자가 작성한 게시물의 총 개수를 반환합니다. (전체 스캔)"""
        return len(self.store.query('posts', lambda record: record.get('author') == author))

    @staticmethod
    def _newest_first(records, limit: int) -> List[Post]:
        posts = [Post.from_dict(record) for record in records]
        posts.sort(key=lambda p: DateTimeUtils.sort_key(p.created_at), reverse=True)
        return posts[:limit]
