# -*- coding: utf-8 -*-

"""
TaskFlow - personal task tracking API.

Owner-scoped task listing (filter, search, sort, paginate), CRUD,
bulk update and statistics over an injected document store.
"""
