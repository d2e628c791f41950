# (c) Copyright Datacraft, 2026
"""Declarative base shared by all feature ORM modules."""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
	pass
