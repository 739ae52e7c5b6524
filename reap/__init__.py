"""Reap: retained-memory analysis for Ruby heap dumps"""
__version__ = '0.1.0'
