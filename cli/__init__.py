"""CLI package for Reading Board"""
from .main import cli

__all__ = ['cli']
