"""Root conftest — shared test configuration."""

import os

# Ensure tests don't accidentally use real API keys or a developer seed file
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-fake-key")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.pop("SEED_FILE", None)
