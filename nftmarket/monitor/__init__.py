"""Terminal rendering of marketplace state."""

from nftmarket.monitor.renderer import MarketRenderer, format_amount

__all__ = ["MarketRenderer", "format_amount"]
