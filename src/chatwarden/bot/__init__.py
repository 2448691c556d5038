"""
Discord integration for chatwarden.

- **discord_actions.py**: py-cord implementations of the chat-action
  collaborator and the admin audit sink.
- **bot_services.py**: Builds and holds the per-bot moderation services.
- **cogs/**: Event listeners and admin slash commands.
"""
