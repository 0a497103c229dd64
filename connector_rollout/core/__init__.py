"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- exceptions: Shared exception hierarchy
- ingress: Activity input normalisation and orchestration input builder
"""
