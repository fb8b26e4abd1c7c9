from __future__ import annotations

from flask import Blueprint, jsonify, g

from api.extensions import get_services
from models.schemas.user import UserOutSchema
from utils.decorators import jwt_required

bp = Blueprint("users", __name__)

user_out_schema = UserOutSchema()


@bp.get("/me")
@jwt_required()
def me():
    """
    Get the current user's profile
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Missing, invalid or expired access token
      404:
        description: User no longer exists
    """
    profile = get_services().auth.get_profile(g.current_user_id)
    return jsonify({"data": user_out_schema.dump(profile)})
