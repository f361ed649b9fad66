# -*- coding: utf-8 -*-
from mylo_api.schemas.base import parse_body
from mylo_api.schemas.subscriber import (
    EMAIL_PATTERN,
    SignInRequest,
    SignInVerifyRequest,
    SubscriberRequest,
    SubscriberTypeName,
    SubscriberTypeRequest,
    is_valid_email,
)

__all__ = [
    "EMAIL_PATTERN",
    "SignInRequest",
    "SignInVerifyRequest",
    "SubscriberRequest",
    "SubscriberTypeName",
    "SubscriberTypeRequest",
    "is_valid_email",
    "parse_body",
]
