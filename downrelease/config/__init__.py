"""Configuration module for downrelease.

This module handles application settings and credentials:
- SettingsManager: JSON-based settings persistence
- CredentialManager: Access token storage via keyring
- Paths: Application data directory discovery
- AppSettings: Settings dataclass
"""
