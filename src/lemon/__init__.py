"""Lemon - user management and authentication for FastAPI applications.

Layers:
    lemon/
    ├── domain/           # Users, roles, permission evaluation
    ├── application/      # Authentication and account flows
    ├── infrastructure/   # Mail, CAPTCHA, SQLAlchemy persistence
    └── presentation/     # FastAPI app, routers, error normalization

Token, password and credential plumbing lives in the separate
``lemon_auth`` package; settings in ``lemon_config``.
"""
