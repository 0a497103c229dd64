"""Durable Functions activity functions.

Each activity performs a single unit of work within the orchestration:
- verify_default_version: Poll the registry in-process until the default converges
- fetch_default_version: One registry read for the durable poll loop
"""
