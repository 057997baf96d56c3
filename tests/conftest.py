"""Test harness setup."""

import os

# services.llm_service builds its provider client at import time, and the
# OpenAI SDK refuses to construct one without credentials. Tests patch the
# client's calls, so a placeholder key is sufficient.
os.environ.setdefault("OPENAI_API_KEY", "test-key")
