#!/usr/bin/env python3
"""
tablekv Setup Script
====================
Allows installation of the tablekv package.

Usage:
    pip install -e .           # Development install
    pip install -e .[test]     # Development install with test tools
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="tablekv",
    version="1.0.0",
    packages=find_packages(include=["tablekv", "tablekv.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "tablekv=tablekv.server:main",
        ],
    },
)
