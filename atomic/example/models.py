"""SQLAlchemy models for the example."""

from typing import Any

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import declarative_base

# Create the declarative base
Base: Any = declarative_base()


class Foo(Base):
    __tablename__ = "foo"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False, default="")

    def __repr__(self):
        return f"<Foo(id={self.id}, name='{self.name}')>"


class Bar(Base):
    __tablename__ = "bar"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False, default="")

    def __repr__(self):
        return f"<Bar(id={self.id}, name='{self.name}')>"
