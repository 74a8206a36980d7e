"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach real collaborators
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENABLE_LOGIN_EMAIL", "false")
os.environ.setdefault("ISSUER_URL", "http://issuer.test")
os.environ.setdefault("ETH_RPC_URL", "http://rpc.test")
