"""SQLAlchemy and API models for word counts."""
from sqlalchemy import Column, String, Integer
from pydantic import BaseModel

from wordcount.database import Base


class Word(Base):
    """Model for the number of times a word has been observed."""

    __tablename__ = "words"

    word = Column(String, primary_key=True)
    count = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<Word(word={self.word}, count={self.count})>"


class WordCount(BaseModel):
    """A (word, count) pair as handed to callers of the store."""

    word: str
    count: int

    @classmethod
    def from_row(cls, row: Word) -> "WordCount":
        return cls(word=row.word, count=row.count)
