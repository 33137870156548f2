"""Discord Integration Package.

Contains the incoming-webhook client used by the team broadcast channel.
"""
