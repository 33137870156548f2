"""Slack Integration Package.

Contains the Slack Web API client manager used by the Slack broadcast channel.
"""
