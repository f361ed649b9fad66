# -*- coding: utf-8 -*-
from mylo_api.infra.db import db

from .subscriber import Subscriber, SubscriberType, SUBSCRIBER_TYPE_NAMES

__all__ = ["db", "Subscriber", "SubscriberType", "SUBSCRIBER_TYPE_NAMES"]
