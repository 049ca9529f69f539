"""Global pytest configuration."""

import os

# Settings are read on first use; keep tests on the in-memory store and stub generator
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["OPENAI_API_KEY"] = ""
os.environ.pop("REDIS_URL", None)
