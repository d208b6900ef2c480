"""nftmarket: fixed-price NFT marketplace ledger.

Owners list tokens at a fixed price without escrow, buyers pay at least that
price, and sellers withdraw accumulated proceeds later (pull payments).
Every committed operation is recorded in a hash-chained SQLite journal from
which the ledger state can be rebuilt.
"""

__version__ = "0.1.0"
__description__ = "Fixed-price NFT marketplace ledger with pull-payment proceeds"

from nftmarket.core.errors import MarketplaceRevert
from nftmarket.core.gateway import MarketplaceGateway
from nftmarket.core.ledger import MarketplaceLedger

__all__ = ["MarketplaceLedger", "MarketplaceGateway", "MarketplaceRevert", "__version__"]
