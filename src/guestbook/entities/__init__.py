from .guest_book import GuestBook, guest_entries
from .guest_component import GuestComponent, theme_variant

__all__ = ["GuestBook", "GuestComponent", "guest_entries", "theme_variant"]
