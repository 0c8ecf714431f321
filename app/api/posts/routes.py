# app/api/posts/routes.py
import logging
import uuid
from dataclasses import asdict
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from app.api.posts.schemas import PostCreateSchema, PostResponseSchema, LikeToggleResponseSchema

posts_bp = Blueprint('posts_bp', __name__)

def feed_limit() -> int:
    """요청의 limit 쿼리 파라미터를 설정된 최대값 이내로 맞춥니다."""
    limit = request.args.get('limit', current_app.config['FEED_DEFAULT_LIMIT'], type=int)
    return max(0, min(limit, current_app.config['FEED_MAX_LIMIT']))

def dump_posts(posts, viewer):
    """게시글 목록에 현재 사용자의 좋아요 여부(is_liked)를 채워 직렬화합니다."""
    like_service = current_app.services['likes']
    liked_post_ids = like_service.liked_post_ids(viewer, [p.post_id for p in posts])
    items = [dict(asdict(p), is_liked=p.post_id in liked_post_ids) for p in posts]
    return PostResponseSchema(many=True).dump(items)

@posts_bp.route('', methods=['GET'])
@jwt_required(optional=True)
def get_recent_posts():
    """최신 게시글 피드를 조회합니다. (전체 스캔 기반, 커서 없음)"""
    post_service = current_app.services['posts']
    viewer = get_jwt_identity()
    posts = post_service.list_recent(feed_limit())
    return jsonify({"posts": dump_posts(posts, viewer)}), 200

@posts_bp.route('', methods=['POST'])
@jwt_required()
def create_post():
    """
    현재 로그인된 사용자로 새 게시글을 작성합니다.
    - 게시글 ID 는 여기서 생성하고, 작성자 닉네임은 사용자 문서에서 복사합니다.
    """
    post_service = current_app.services['posts']
    user_service = current_app.services['users']
    username = get_jwt_identity()
    try:
        data = PostCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    user = user_service.lookup(username)
    if not user:
        return jsonify({"error_code": "USER_NOT_FOUND", "message": "사용자를 찾을 수 없습니다."}), 404

    try:
        new_post = post_service.publish(uuid.uuid4().hex, user.username, user.display_name, data['content'])
    except ValueError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "message": str(e)}), 400
    return jsonify(PostResponseSchema().dump(new_post)), 201

@posts_bp.route('/<string:post_id>', methods=['GET'])
@jwt_required(optional=True)
def get_post(post_id: str):
    post_service = current_app.services['posts']
    like_service = current_app.services['likes']
    post = post_service.get(post_id)
    if not post:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": "게시글을 찾을 수 없습니다."}), 404

    viewer = get_jwt_identity()
    item = dict(asdict(post), is_liked=like_service.has_liked(post_id, viewer) if viewer else False)
    return jsonify(PostResponseSchema().dump(item)), 200

@posts_bp.route('/<string:post_id>/like', methods=['POST'])
@jwt_required()
def toggle_post_like(post_id: str):
    """
    게시글 좋아요를 누르거나 취소합니다.
    - 존재하지 않는 게시글이면 404 를 반환하고 좋아요 엔진을 호출하지 않습니다.
    """
    post_service = current_app.services['posts']
    like_service = current_app.services['likes']
    username = get_jwt_identity()
    if not post_service.get(post_id):
        return jsonify({"error_code": "POST_NOT_FOUND", "message": "게시글을 찾을 수 없습니다."}), 404

    result = like_service.toggle(post_id, username)
    logging.info(f"좋아요 토글 (post_id: {post_id}, username: {username}, liked: {result['liked']})")
    return jsonify(LikeToggleResponseSchema().dump(result)), 200
