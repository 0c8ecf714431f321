# app/api/likes/services.py
import logging
from dataclasses import asdict
from typing import Dict, Iterable, Optional, Set

from app.core.exceptions import PreconditionFailed
from app.models.like import Like
from app.services.record_store import RecordStore

class LikeService:
    """
    좋아요 일관성 엔진.

    likes 컬렉션의 (post_id, username) 문서가 좋아요 여부의 원본이고,
    posts 문서의 like_count 는 그 개수를 캐시한 값입니다.
    like_count 는 반드시 Record Store 의 conditional_update 로만 변경합니다.

    toggle 은 "조회 후 분기" 방식이라 조회와 쓰기 사이가 원자적이지 않습니다.
    같은 사용자가 같은 게시글에 동시에 두 번 요청하면 좋아요 문서는 한 번만 남고
    카운터는 두 번 증가할 수 있습니다 (카운터가 1 많게 어긋남). 이 경합은 알려진 제약이며,
    어긋난 카운터는 recount() 로 원장 기준으로 다시 맞출 수 있습니다.
    """
    def __init__(self, store: RecordStore):
        self.store = store

    def has_liked(self, post_id: str, username: str) -> bool:
        return self.store.get('likes', Like(post_id=post_id, username=username).key) is not None

    def toggle(self, post_id: str, username: str) -> Dict[str, bool]:
        """
        좋아요 상태를 반대로 바꾸고 바뀐 상태를 반환합니다.
        - 좋아요 문서 변경이 먼저 일어나고, 카운터 갱신이 실패해도 되돌리지 않습니다.
        - 카운터의 전제 조건 실패는 경고 로그만 남기고 흡수합니다.
        - 자동 재시도는 없습니다. 재시도 여부와 결과 조정은 호출자의 몫입니다.
        """
        if self.has_liked(post_id, username):
            self._unlike(post_id, username)
            return {"liked": False}
        self._like(post_id, username)
        return {"liked": True}

    def _like(self, post_id: str, username: str) -> None:
        like = Like(post_id=post_id, username=username)
        # 조건 없이 저장하므로 재시도된 요청도 같은 상태로 수렴합니다
        self.store.put('likes', asdict(like))
        try:
            self.store.conditional_update(
                'posts', post_id,
                mutation=lambda post: {'like_count': (post.get('like_count') or 0) + 1},
                precondition=lambda post: post is not None
            )
        except PreconditionFailed:
            logging.warning(f"좋아요 카운터 증가 생략: 게시글 없음 (post_id: {post_id}, username: {username})")

    def _unlike(self, post_id: str, username: str) -> None:
        self.store.delete('likes', Like(post_id=post_id, username=username).key)
        try:
            self.store.conditional_update(
                'posts', post_id,
                mutation=lambda post: {'like_count': (post.get('like_count') or 0) - 1},
                precondition=lambda post: post is not None and (post.get('like_count') or 0) >= 1
            )
        except PreconditionFailed:
            # 좋아요 문서 삭제는 이미 반영됨. 카운터는 음수가 되지 않도록 감소만 건너뜁니다
            logging.warning(f"좋아요 카운터 감소 생략: 게시글 없음 또는 0 (post_id: {post_id}, username: {username})")

    def liked_post_ids(self, username: Optional[str], post_ids: Iterable[str]) -> Set[str]:
        """주어진 게시글 ID 목록 중 사용자가 좋아요를 누른 게시글 ID 집합을 반환합니다."""
        if not username:
            return set()
        return {post_id for post_id in post_ids if self.has_liked(post_id, username)}

    def recount(self, post_id: str) -> Optional[int]:
        """
        원장(likes 문서 수)을 기준으로 like_count 를 다시 계산해 저장합니다.
        likes 컬렉션 전체를 스캔하므로 toggle 경로에서는 사용하지 않습니다.
        게시글이 없으면 None 을 반환합니다.
        """
        count = len(self.store.query('likes', lambda record: record.get('post_id') == post_id))
        try:
            updated = self.store.conditional_update(
                'posts', post_id,
                mutation=lambda post: {'like_count': count},
                precondition=lambda post: post is not None
            )
        except PreconditionFailed:
            return None
        logging.info(f"like_count 재계산 (post_id: {post_id}, like_count: {count})")
        return updated['like_count']
