# -*- coding: utf-8 -*-
"""
Public signup: create-only access to subscribers, through the worker
database credentials.
"""
from flask import Blueprint, jsonify

from mylo_api.infra.db import worker_session
from mylo_api.routes import json_body
from mylo_api.services.subscriber_service import SubscriberService

signup_bp = Blueprint('signup', __name__, url_prefix='/signup')


@signup_bp.route('/subscribers', methods=['POST'])
def create_subscriber():
    """
    Create a subscriber, optionally with subscriber_types.

    Request body:
    {
        "email": "user@example.com",
        "name": "Jane",
        "subscriber_types": [{"name": "shopper"}]   # optional
    }
    """
    with worker_session() as session:
        subscriber = SubscriberService(session).create_subscriber(json_body())
        return jsonify(subscriber.to_dict()), 201
