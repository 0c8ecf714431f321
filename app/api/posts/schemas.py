# app/api/posts/schemas.py
from marshmallow import Schema, fields, validate

# --- API 요청/응답 스키마 ---

class PostCreateSchema(Schema):
    """POST /api/posts 요청 본문의 유효성을 검사합니다."""
    content = fields.Str(required=True, validate=validate.Length(min=1, max=280, error="게시글은 1~280자 사이여야 합니다."))

class PostResponseSchema(Schema):
    """게시글 정보 응답을 위한 최종 JSON 형식을 정의합니다."""
    post_id = fields.Str(dump_only=True)
    author = fields.Str(required=True)
    author_display_name = fields.Str(required=True)
    content = fields.Str(required=True)
    like_count = fields.Int(required=True)
    created_at = fields.DateTime(required=True)
    is_liked = fields.Bool(dump_only=True, dump_default=False)

class LikeToggleResponseSchema(Schema):
    """POST /api/posts/{post_id}/like 응답 형식. 토글 이후의 상태를 나타냅니다."""
    liked = fields.Bool(required=True)
