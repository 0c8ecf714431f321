# app/api/users/schemas.py
from marshmallow import Schema, fields, validate

class UserCreateSchema(Schema):
    """
    POST /api/users
    회원가입 요청 본문의 유효성을 검사하는 스키마.
    """
    username = fields.Str(required=True, validate=[
        validate.Length(min=3, max=20, error="username은 3~20자 사이여야 합니다."),
        validate.Regexp(r'^[A-Za-z0-9]+$', error="username은 영문자와 숫자만 사용할 수 있습니다.")
    ])
    display_name = fields.Str(required=True, validate=validate.Length(min=1, max=50, error="닉네임은 1~50자 사이여야 합니다."))
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=6, max=100, error="비밀번호는 6~100자 사이여야 합니다."))

class UserPublicResponseSchema(Schema):
    """
    GET /api/users/{username}
    다른 사용자의 프로필 정보를 응답할 때 사용하는 스키마.
    password_hash 는 제외하고 공개 가능한 정보만 포함합니다.
    """
    username = fields.Str(required=True, dump_only=True)
    display_name = fields.Str(required=True)
    created_at = fields.DateTime(required=True)
    post_count = fields.Int(dump_default=0)
