import os

# Keep test runs off local disk and any configured database.
os.environ.setdefault("USE_IN_MEMORY_BACKENDS", "1")
os.environ.setdefault("JWT_SECRET", "test-secret")
