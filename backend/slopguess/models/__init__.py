"""ORM Models - SQLAlchemy declarative models for rounds, guesses and the word bank.

Invariants:
    - All models inherit from Base (db/base.py)
    - All models imported here so Base.metadata is complete before create_all / alembic
"""

from slopguess.models.round import Round  # noqa: F401
from slopguess.models.guess import Guess  # noqa: F401
from slopguess.models.word_bank import WordBankEntry, RoundWord  # noqa: F401
