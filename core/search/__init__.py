# core/search/__init__.py
from .cache import TTLCache
from .google_books import GoogleBooksClient, BookSearch

__all__ = ['TTLCache', 'GoogleBooksClient', 'BookSearch']
