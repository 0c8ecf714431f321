# app/api/users/test_user_services.py
"""
사용자 디렉터리 테스트

사용법: python -m pytest app/api/users/test_user_services.py -v
"""

import pytest

from app.core.exceptions import AlreadyExists, UsernameTaken


def test_register_and_lookup(user_service):
    user = user_service.register('alice', 'Alice', 'hash-1')

    found = user_service.lookup('alice')
    assert found == user
    assert found.created_at.tzinfo is not None


def test_lookup_missing_user_returns_none(user_service):
    assert user_service.lookup('ghost') is None


def test_duplicate_registration_keeps_first_record(user_service):
    user_service.register('alice', 'Alice', 'hash-1')

    with pytest.raises(UsernameTaken) as exc_info:
        user_service.register('alice', 'Impostor', 'hash-2')

    assert isinstance(exc_info.value, AlreadyExists)
    assert exc_info.value.username == 'alice'
    assert exc_info.value.key == 'alice'
    assert str(exc_info.value) == "이미 사용 중인 사용자 이름입니다: alice"
    stored = user_service.lookup('alice')
    assert stored.display_name == 'Alice'
    assert stored.password_hash == 'hash-1'


def test_public_profile_hides_password_and_counts_posts(user_service, post_service):
    user_service.register('alice', 'Alice', 'hash-1')
    post_service.publish('p1', 'alice', 'Alice', 'hello')
    post_service.publish('p2', 'alice', 'Alice', 'again')
    post_service.publish('p3', 'bob', 'Bob', 'hi')

    profile = user_service.get_public_profile('alice')

    assert 'password_hash' not in profile
    assert profile['display_name'] == 'Alice'
    assert profile['post_count'] == 2
    assert user_service.get_public_profile('ghost') is None
