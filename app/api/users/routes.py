# app/api/users/routes.py
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError
from werkzeug.security import generate_password_hash

from app.api.users.schemas import UserCreateSchema, UserPublicResponseSchema
from app.api.posts.routes import feed_limit, dump_posts
from app.core.exceptions import UsernameTaken

users_bp = Blueprint('users_bp', __name__)

@users_bp.route('', methods=['POST'])
def register_user():
    """
    회원가입. 비밀번호는 해시로만 저장됩니다.
    - 이미 사용 중인 username 이면 409 를 반환하고 기존 사용자 정보는 그대로 유지됩니다.
    """
    user_service = current_app.services['users']
    try:
        data = UserCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    try:
        user = user_service.register(
            data['username'],
            data['display_name'],
            generate_password_hash(data['password'])
        )
    except UsernameTaken:
        return jsonify({"error_code": "USERNAME_TAKEN", "message": "이미 사용 중인 사용자 이름입니다."}), 409

    profile = {"username": user.username, "display_name": user.display_name, "created_at": user.created_at, "post_count": 0}
    return jsonify(UserPublicResponseSchema().dump(profile)), 201

@users_bp.route('/<string:username>', methods=['GET'])
def get_user_profile(username: str):
    """특정 사용자의 공개 프로필 정보(게시물 수 포함)를 조회합니다."""
    user_service = current_app.services['users']
    user_profile = user_service.get_public_profile(username)
    if not user_profile:
        return jsonify({"error_code": "USER_NOT_FOUND", "message": "사용자를 찾을 수 없습니다."}), 404
    return jsonify(UserPublicResponseSchema().dump(user_profile)), 200

@users_bp.route('/<string:username>/posts', methods=['GET'])
@jwt_required(optional=True)
def get_user_posts(username: str):
    """특정 사용자가 작성한 게시물 목록을 최신순으로 조회합니다."""
    post_service = current_app.services['posts']
    posts = post_service.list_by_author(username, feed_limit())
    return jsonify({"posts": dump_posts(posts, get_jwt_identity())}), 200
