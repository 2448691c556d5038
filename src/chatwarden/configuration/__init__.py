"""
Configuration management for chatwarden.

- **app_configuration.py**: YAML configuration loader (read under an fcntl
  shared lock) exposing storage paths, the admin/audit channel, the command
  prefix, the ban threshold and the warning lifetime. Falls back to defaults
  on missing or malformed files.
"""
