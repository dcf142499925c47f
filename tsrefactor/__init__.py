#!/usr/bin/env python3
"""
TS Refactor

Drives a TypeScript tsserver subprocess to perform project-wide refactorings
(rename, move, extract, import cleanup) and exposes them as MCP tools.
"""

__version__ = "0.1.0"
