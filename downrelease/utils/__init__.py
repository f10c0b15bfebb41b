"""Utility module for downrelease.

This module provides cross-cutting utilities:
- Logging: Configured logging with token redaction
- Validators: Input validation for repositories, binary names, timeouts
"""
