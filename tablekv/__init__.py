"""
tablekv: Line-Oriented Key-Value Server

A TCP key-value server built with Python asyncio. Clients speak a
newline-delimited text protocol and entries are persisted in a
relational table.
"""

__version__ = "1.0.0"
