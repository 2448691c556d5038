"""
Utility functions and helpers for chatwarden.

- **logger.py**: Centralized logging configuration with colored console output
  through prompt_toolkit, a rotating per-session log file and suppression of
  noisy Discord internals.

- **discord_utils.py**: Stateless Discord helpers (permission checks, message
  chunking).
"""
