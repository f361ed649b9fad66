# -*- coding: utf-8 -*-
"""
Admin subscriber CRUD, protected by session-backed bearer tokens.
"""
import re

from flask import Blueprint, jsonify

from mylo_api.errors import ValidationError
from mylo_api.infra.auth import require_session
from mylo_api.infra.db import db
from mylo_api.routes import json_body
from mylo_api.services.subscriber_service import SubscriberService

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')

# optional sign, ASCII digits only
ID_PATTERN = re.compile(r'[+-]?[0-9]+')


def _subscriber_service() -> SubscriberService:
    return SubscriberService(db.session)


def _parse_id(raw: str) -> int:
    if not ID_PATTERN.fullmatch(raw):
        raise ValidationError('Invalid subscriber ID')
    return int(raw)


@admin_bp.route('/subscribers', methods=['POST'])
@require_session
def create_subscriber():
    subscriber = _subscriber_service().create_subscriber(json_body())
    return jsonify(subscriber.to_dict()), 201


@admin_bp.route('/subscribers', methods=['GET'])
@require_session
def list_subscribers():
    subscribers = _subscriber_service().list_subscribers()
    return jsonify([s.to_dict() for s in subscribers]), 200


@admin_bp.route('/subscribers/<subscriber_id>', methods=['GET'])
@require_session
def get_subscriber(subscriber_id):
    subscriber = _subscriber_service().get_subscriber(_parse_id(subscriber_id))
    return jsonify(subscriber.to_dict()), 200


@admin_bp.route('/subscribers/<subscriber_id>', methods=['PUT'])
@require_session
def update_subscriber(subscriber_id):
    """
    Overwrite email and name. ``subscriber_types`` replaces the current
    types when present, ``[]`` clears them, omitting it keeps them.
    """
    subscriber = _subscriber_service().update_subscriber(_parse_id(subscriber_id), json_body())
    return jsonify(subscriber.to_dict()), 200


@admin_bp.route('/subscribers/<subscriber_id>', methods=['DELETE'])
@require_session
def delete_subscriber(subscriber_id):
    _subscriber_service().delete_subscriber(_parse_id(subscriber_id))
    return '', 204
