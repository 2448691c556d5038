"""
Blacklist moderation core.

- **phrase_store.py**: Persistent, de-duplicated list of banned phrases and
  the message matching rules.
- **violation_ledger.py**: Persistent per-user violation counters.
- **moderation_policy.py**: Escalation state machine (warn, then ban
  everywhere) driving the chat-action collaborator.
- **interfaces.py**: Protocols for the chat-action collaborator and the
  audit sink.
"""
