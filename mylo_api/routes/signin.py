# -*- coding: utf-8 -*-
"""
Email-code sign-in routes.
"""
from flask import Blueprint, current_app, jsonify

from mylo_api.routes import json_body
from mylo_api.schemas import SignInRequest, SignInVerifyRequest, parse_body

signin_bp = Blueprint('signin', __name__, url_prefix='/signin')


def get_signin_service():
    return current_app.extensions['signin_service']


@signin_bp.route('/request', methods=['POST'])
def request_signin():
    """
    Email a six-digit sign-in code.

    Request body: {"email": "user@example.com"}
    Response: {"message": "A sign-in code has been emailed to you."}
    """
    body = parse_body(SignInRequest, json_body())
    message = get_signin_service().request_code(body.email)
    return jsonify({'message': message}), 200


@signin_bp.route('/verify', methods=['POST'])
def verify_signin():
    """
    Exchange a sign-in code for a bearer token.

    Request body: {"email": "user@example.com", "code": "123456"}
    Response: {"token": "<jwt>"}

    400 when no code is pending for the email, 401 when the code is wrong.
    """
    body = parse_body(SignInVerifyRequest, json_body())
    token = get_signin_service().verify_code(body.email, body.code)
    return jsonify({'token': token}), 200
