"""
chatwarden - blacklist moderation bot for Discord

Core Components:

- **Phrase blacklist**: admin-managed banned phrases, persisted to JSON and
  matched against every guild message
- **Violation ledger**: per-user violation counters shared by every server
  the bot moderates
- **Escalation policy**: deletes offending messages, warns on the first
  violation and bans repeat offenders from every known server
- **Admin commands**: slash commands to edit the blacklist, inspect or reset
  violations and spam-ban members

Usage:
    from chatwarden.main import main
    main()
"""
