"""Relationship inference and schema specification for Prisma-style data models."""

__version__ = "0.1.0"
