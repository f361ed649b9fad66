# -*- coding: utf-8 -*-
"""
Test suite for structured logging and request context propagation.
"""
import hashlib
import json
import logging
import uuid

import pytest
from flask import Flask

from mylo_api.services.request_context import (
    get_request_context, init_request_context, set_session_context
)
from mylo_api.services.structured_logging import (
    StructuredFormatter, configure_logging, get_logger, hash_email
)


@pytest.fixture
def bare_app():
    """Flask app with only the request context middleware."""
    app = Flask(__name__)
    app.config['TESTING'] = True
    init_request_context(app)
    return app


def make_record(message='hello', **extra_fields):
    record = logging.LogRecord('mylo.test', logging.INFO, __file__, 10, message, None, None)
    if extra_fields:
        record.extra_fields = extra_fields
    return record


class TestRequestId:

    def test_generated_when_absent(self, client):
        response = client.get('/healthz')

        uuid.UUID(response.headers['X-Request-ID'])
        assert response.headers['X-Response-Time'].endswith('ms')

    def test_valid_incoming_id_is_kept(self, client):
        incoming = str(uuid.uuid4())

        response = client.get('/healthz', headers={'X-Request-ID': incoming})

        assert response.headers['X-Request-ID'] == incoming

    def test_invalid_incoming_id_is_replaced(self, client):
        response = client.get('/healthz', headers={'X-Request-ID': 'not-a-uuid'})

        assert response.headers['X-Request-ID'] != 'not-a-uuid'
        uuid.UUID(response.headers['X-Request-ID'])

    def test_session_digest_joins_context(self, bare_app):
        """Authenticated requests carry a digest of the session key, never the key."""
        @bare_app.route('/probe')
        def probe():
            set_session_context('sess42')
            return get_request_context()

        data = bare_app.test_client().get('/probe').get_json()

        assert data['session_hash'] == hashlib.sha256(b'sess42').hexdigest()[:16]
        assert 'session_key' not in data
        assert 'sess42' not in json.dumps(data)
        assert data['path'] == '/probe'
        assert data['request_id']


class TestStructuredFormatter:

    def test_json_output(self):
        entry = json.loads(StructuredFormatter(json_enabled=True).format(
            make_record(subscriber_id=3)))

        assert entry['message'] == 'hello'
        assert entry['level'] == 'INFO'
        assert entry['logger'] == 'mylo.test'
        assert entry['subscriber_id'] == 3

    def test_plain_output(self):
        assert StructuredFormatter(json_enabled=False).format(make_record()) == 'hello'

    def test_request_context_included(self, bare_app):
        formatter = StructuredFormatter(json_enabled=True)
        with bare_app.test_request_context('/signin/request'):
            bare_app.preprocess_request()
            entry = json.loads(formatter.format(make_record()))

        assert entry['path'] == '/signin/request'
        assert entry['request_id']


class TestHelpers:

    def test_hash_email_is_stable_and_normalized(self):
        assert hash_email('A@B.com ') == hash_email('a@b.com')
        assert len(hash_email('a@b.com')) == 16
        assert 'a@b.com' not in hash_email('a@b.com')

    def test_hash_email_empty(self):
        assert hash_email('') is None
        assert hash_email(None) is None

    def test_configure_logging_sets_level(self):
        app = Flask(__name__)
        app.config.update(LOG_LEVEL='warning', MYLO_LOG_JSON='false')

        configure_logging(app)

        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger('mylo.signin').level == logging.WARNING
        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, StructuredFormatter)
        assert handler.formatter.json_enabled is False

    def test_structured_logger_passes_fields(self):
        captured = []

        class ListHandler(logging.Handler):
            def emit(self, record):
                captured.append(record)

        handler = ListHandler()
        logger = get_logger('mylo.capture')
        logger.logger.addHandler(handler)
        logger.logger.setLevel(logging.INFO)
        try:
            logger.info('Sign-in code issued', email_hash='abc')
        finally:
            logger.logger.removeHandler(handler)

        assert captured[0].getMessage() == 'Sign-in code issued'
        assert captured[0].extra_fields == {'email_hash': 'abc'}
