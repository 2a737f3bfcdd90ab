# Import models so Alembic and Base metadata are aware of them
from .auth import User  # noqa: F401
from .generations import Generation, GenerationErrorLog  # noqa: F401
from .flashcards import Flashcard, FlashcardSource  # noqa: F401
