from .markdown import generate_relationships_markdown

__all__ = ["generate_relationships_markdown"]
