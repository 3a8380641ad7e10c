"""Root conftest - shared test configuration."""

import os

# Tests run offline: provider keys are cleared even when the shell exports real ones
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["EMBEDDING_PROVIDER"] = "mock"
os.environ["IMAGE_PROVIDER"] = "mock"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["SEED_WORD_BANK"] = "false"
