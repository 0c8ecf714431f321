# app/api/posts/test_post_services.py
"""
게시글 원장 테스트

사용법: python -m pytest app/api/posts/test_post_services.py -v
"""

from datetime import datetime, timezone

import pytest


def test_publish_starts_with_zero_likes(post_service):
    post = post_service.publish('p1', 'alice', 'Alice', 'hello')

    assert post.like_count == 0
    assert post_service.get('p1') == post


def test_get_missing_post_returns_none(post_service):
    assert post_service.get('missing') is None


@pytest.mark.parametrize('content', ['', 'x' * 281])
def test_publish_rejects_content_out_of_bounds(post_service, content):
    with pytest.raises(ValueError):
        post_service.publish('p1', 'alice', 'Alice', content)
    assert post_service.get('p1') is None


def test_publish_with_same_id_overwrites(post_service):
    post_service.publish('p1', 'alice', 'Alice', 'first')
    post_service.publish('p1', 'alice', 'Alice', 'second')

    assert post_service.get('p1').content == 'second'
    assert len(post_service.list_recent(10)) == 1


def test_list_recent_is_newest_first_and_limited(post_service):
    for i in range(5):
        post_service.publish(f'p{i}', 'alice', 'Alice', f'post {i}')

    posts = post_service.list_recent(3)

    assert [p.post_id for p in posts] == ['p4', 'p3', 'p2']
    created = [p.created_at for p in posts]
    assert created == sorted(created, reverse=True)


def test_list_recent_with_non_positive_limit(post_service):
    post_service.publish('p1', 'alice', 'Alice', 'hello')

    assert post_service.list_recent(0) == []
    assert post_service.list_recent(-1) == []


def test_list_by_author_returns_only_that_author_newest_first(post_service):
    post_service.publish('a1', 'alice', 'Alice', 'one')
    post_service.publish('b1', 'bob', 'Bob', 'one')
    post_service.publish('a2', 'alice', 'Alice', 'two')
    post_service.publish('b2', 'bob', 'Bob', 'two')
    post_service.publish('a3', 'alice', 'Alice', 'three')

    posts = post_service.list_by_author('alice', 10)

    assert [p.post_id for p in posts] == ['a3', 'a2', 'a1']
    assert all(p.author == 'alice' for p in posts)
    assert len(post_service.list_by_author('alice', 2)) == 2
    assert post_service.list_by_author('carol', 10) == []


def test_listing_tolerates_documents_without_like_count(store, post_service):
    store.put('posts', {
        'post_id': 'legacy', 'author': 'alice', 'author_display_name': 'Alice',
        'content': 'old', 'created_at': datetime(2020, 1, 1, tzinfo=timezone.utc)
    })
    post_service.publish('p1', 'alice', 'Alice', 'new')

    posts = post_service.list_recent(10)

    assert [p.post_id for p in posts] == ['p1', 'legacy']
    assert posts[1].like_count == 0
