# -*- coding: utf-8 -*-
from flask import request


def json_body():
    """Parsed JSON body, or None when the body is missing or malformed."""
    return request.get_json(silent=True)
