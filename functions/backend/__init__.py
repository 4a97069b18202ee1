"""
Backend package for the feedback triage API.

This package provides a FastAPI application with database and queue
abstractions so the intake, analysis, clustering, digest and chat
handlers can run as a long-lived service.
"""
