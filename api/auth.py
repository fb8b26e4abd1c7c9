"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh-token
- POST /auth/logout

The workflow lives in services.auth.AuthService:
- argon2 password hashing (via utils.security)
- short-lived signed access tokens (HS256 by default)
- opaque refresh tokens stored as session rows so they can be revoked
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify

from api.extensions import get_services
from models.schemas.user import (
    RegisterSchema,
    LoginSchema,
    RefreshTokenSchema,
    UserOutSchema,
    LoginOutSchema,
)

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
user_out_schema = UserOutSchema()
login_out_schema = LoginOutSchema()


@bp.post("/register")
def register():
    """
    Register a new customer account.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            email: { type: string }
            password: { type: string, minLength: 6, maxLength: 32 }
            full_name: { type: string }
            phone: { type: string, description: "E.164, optional" }
    responses:
      201:
        description: Created
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    data = register_schema.load(request.get_json(silent=True) or {})
    profile = get_services().auth.register(
        email=data["email"],
        password=data["password"],
        full_name=data["full_name"],
        phone=data.get("phone", ""),
    )
    return jsonify({"data": user_out_schema.dump(profile)}), 201


@bp.post("/login")
def login():
    """
    Login: return access_token and refresh_token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens and the user profile)
      401:
        description: Invalid credentials
    """
    data = login_schema.load(request.get_json(silent=True) or {})
    result = get_services().auth.login(
        data["email"],
        data["password"],
        user_agent=(request.user_agent.string or "")[:255],
        client_ip=(request.remote_addr or "")[:50],
    )
    return jsonify({"data": login_out_schema.dump(result)}), 200


@bp.post("/refresh-token")
def refresh_token():
    """
    Exchange a refresh token for a new access token (the refresh token is returned unchanged)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refresh_token: { type: string }
    responses:
      200:
        description: OK
      401:
        description: Unknown, blocked or expired refresh token
    """
    data = refresh_schema.load(request.get_json(silent=True) or {})
    result = get_services().auth.refresh_token(data["refresh_token"])
    return jsonify({"data": login_out_schema.dump(result)}), 200


@bp.post("/logout")
def logout():
    """
    Logout: delete the session bound to the refresh token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refresh_token: { type: string }
    responses:
      200:
        description: Logged out
      401:
        description: Unknown refresh token
    """
    data = refresh_schema.load(request.get_json(silent=True) or {})
    get_services().auth.logout(data["refresh_token"])
    return jsonify({"message": "Logged out"}), 200
