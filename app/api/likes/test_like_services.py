# app/api/likes/test_like_services.py
"""
좋아요 일관성 엔진 테스트

사용법: python -m pytest app/api/likes/test_like_services.py -v
"""

import threading

import pytest

from app.core.exceptions import StoreUnavailable


@pytest.fixture
def post(post_service):
    return post_service.publish('p1', 'alice', 'Alice', 'hello')


def like_count(post_service, post_id='p1'):
    return post_service.get(post_id).like_count


def test_like_then_unlike_scenario(user_service, post_service, like_service):
    user_service.register('alice', 'Alice', 'hash')
    post_service.publish('p1', 'alice', 'Alice', 'hello')

    assert like_service.toggle('p1', 'bob') == {"liked": True}
    assert like_count(post_service) == 1
    assert like_service.has_liked('p1', 'bob') is True

    assert like_service.toggle('p1', 'bob') == {"liked": False}
    assert like_count(post_service) == 0
    assert like_service.has_liked('p1', 'bob') is False


@pytest.mark.parametrize('times', [0, 1, 2, 3, 4, 7])
def test_toggle_parity(post, post_service, like_service, times):
    like_service.toggle('p1', 'carol')
    before = like_count(post_service)

    for _ in range(times):
        like_service.toggle('p1', 'bob')
        assert like_count(post_service) >= 0

    if times % 2 == 0:
        assert like_service.has_liked('p1', 'bob') is False
        assert like_count(post_service) == before
    else:
        assert like_service.has_liked('p1', 'bob') is True
        assert like_count(post_service) == before + 1


def test_like_count_tracks_ledger_for_many_users(post, post_service, like_service, store):
    for username in ['bob', 'carol', 'dave', 'erin']:
        like_service.toggle('p1', username)
    like_service.toggle('p1', 'carol')

    ledger = store.query('likes', lambda record: record['post_id'] == 'p1')
    assert {record['username'] for record in ledger} == {'bob', 'dave', 'erin'}
    assert like_count(post_service) == 3


def test_unlike_of_already_absent_like_keeps_count(post, post_service, like_service, monkeypatch):
    like_service.toggle('p1', 'bob')
    like_service.toggle('p1', 'bob')
    assert like_count(post_service) == 0

    # 다른 요청이 먼저 좋아요를 취소한 경합 상황: 조회 결과가 오래된 "좋아요 상태"
    monkeypatch.setattr(like_service, 'has_liked', lambda post_id, username: True)
    assert like_service.toggle('p1', 'bob') == {"liked": False}

    assert like_count(post_service) == 0


def test_unlike_never_goes_negative_when_counter_under_reports(post, post_service, like_service, store):
    store.put('likes', {'post_id': 'p1', 'username': 'bob'})

    assert like_service.toggle('p1', 'bob') == {"liked": False}

    assert like_service.has_liked('p1', 'bob') is False
    assert like_count(post_service) == 0


def test_like_on_missing_post_keeps_ledger_entry(like_service, post_service):
    assert like_service.toggle('ghost', 'bob') == {"liked": True}

    assert like_service.has_liked('ghost', 'bob') is True
    assert post_service.get('ghost') is None


def test_concurrent_toggles_from_distinct_users(post, post_service, like_service):
    usernames = [f'user{i}' for i in range(20)]
    threads = [threading.Thread(target=like_service.toggle, args=('p1', u)) for u in usernames]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert like_count(post_service) == 20
    assert all(like_service.has_liked('p1', u) for u in usernames)


def test_liked_post_ids(post_service, like_service):
    for post_id in ['p1', 'p2', 'p3']:
        post_service.publish(post_id, 'alice', 'Alice', 'hello')
    like_service.toggle('p1', 'bob')
    like_service.toggle('p3', 'bob')

    assert like_service.liked_post_ids('bob', ['p1', 'p2', 'p3']) == {'p1', 'p3'}
    assert like_service.liked_post_ids(None, ['p1', 'p2', 'p3']) == set()


def test_recount_repairs_drifted_counter(post, post_service, like_service, store):
    like_service.toggle('p1', 'bob')
    like_service.toggle('p1', 'carol')
    store.conditional_update('posts', 'p1', mutation=lambda p: {'like_count': 5}, precondition=lambda p: p is not None)

    assert like_service.recount('p1') == 2
    assert like_count(post_service) == 2


def test_recount_missing_post(like_service):
    assert like_service.recount('ghost') is None


@pytest.mark.parametrize('already_liked', [False, True])
def test_counter_store_failure_propagates(post, like_service, store, monkeypatch, already_liked):
    if already_liked:
        like_service.toggle('p1', 'bob')

    def fail(*args, **kwargs):
        raise StoreUnavailable("down")
    monkeypatch.setattr(store, 'conditional_update', fail)

    with pytest.raises(StoreUnavailable):
        like_service.toggle('p1', 'bob')
    # 좋아요 문서 변경은 카운터 실패와 무관하게 이미 반영되어 있습니다
    assert like_service.has_liked('p1', 'bob') is (not already_liked)
