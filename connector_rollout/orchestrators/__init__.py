"""Durable Functions orchestrator functions.

- verify_rollout: Durable-timer poll loop for default-version verification
"""
