# -*- coding: utf-8 -*-
"""
Global Flask-SQLAlchemy instance.

Admin routes use ``db.session`` (admin credentials). The public signup
route writes through the ``worker`` bind when one is configured, so that
schema-level grants on the worker role apply.
"""
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import Session

db = SQLAlchemy()

WORKER_BIND = "worker"


def worker_session() -> Session:
    """Open a session on the worker engine, or the default engine if unset."""
    engines = db.engines
    engine = engines.get(WORKER_BIND) or engines[None]
    return Session(bind=engine, expire_on_commit=False)
