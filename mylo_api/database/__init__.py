# -*- coding: utf-8 -*-
from mylo_api.database.db import db, worker_session

__all__ = ["db", "worker_session"]
