# -*- coding: utf-8 -*-
"""
Request schemas for the subscriber aggregate.
"""
import re
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# local-part "@" domain "." suffix of at least two letters
EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$')


def is_valid_email(value) -> bool:
    """Address-shape check shared by subscribers and sign-in."""
    return isinstance(value, str) and EMAIL_PATTERN.match(value) is not None


class SubscriberTypeName(str, Enum):
    SHOPPER = 'shopper'
    BUSINESS = 'business'
    DRIVER = 'driver'
    CHAMPION = 'champion'
    DONOR = 'donor'
    DEVELOPER = 'developer'


class SubscriberTypeRequest(BaseModel):
    """One entry of ``subscriber_types``; ids and parent ids are ignored."""
    model_config = ConfigDict(extra='ignore')

    name: SubscriberTypeName


class SubscriberRequest(BaseModel):
    """Body of subscriber create and update requests."""
    model_config = ConfigDict(extra='ignore')

    email: str = Field('', validate_default=True, description="Subscriber email")
    name: str = Field('', validate_default=True, description="Display name")
    subscriber_types: Optional[List[SubscriberTypeRequest]] = Field(
        None, description="Omit to keep existing types; [] to clear them")

    @field_validator('email', mode='before')
    @classmethod
    def validate_email(cls, v):
        if not is_valid_email(v):
            raise ValueError('invalid or missing email')
        return v

    @field_validator('name', mode='before')
    @classmethod
    def validate_name(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError('missing name')
        return v

    @property
    def type_names(self) -> Optional[List[str]]:
        if self.subscriber_types is None:
            return None
        return [t.name.value for t in self.subscriber_types]


class SignInRequest(BaseModel):
    """Body of ``POST /signin/request``."""
    model_config = ConfigDict(extra='ignore')

    email: str = ''


class SignInVerifyRequest(BaseModel):
    """Body of ``POST /signin/verify``."""
    model_config = ConfigDict(extra='ignore')

    email: str = ''
    code: str = ''
