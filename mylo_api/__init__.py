# -*- coding: utf-8 -*-
"""myLocal headless API: signup, email-code sign-in and admin subscriber CRUD."""

__version__ = "1.0.0"
