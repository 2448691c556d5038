"""Plain data structures shared across chatwarden."""
