"""
Infrastructure Adapters

Framework integrations for the dispatcher. Currently only FastHTML.
"""

from .fasthtml import FastHTMLDispatcher, configure_app

__all__ = ["FastHTMLDispatcher", "configure_app"]
