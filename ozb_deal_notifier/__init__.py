"""
OzBargain Deal Notifier

Polls the OzBargain RSS feed, extracts deal attributes, tracks which deals
have already been announced, filters them against user criteria and posts
notifications to a Discord webhook on a schedule or on demand.
"""

__version__ = "0.2.0"
__author__ = "OzBargain Deal Notifier Team"
