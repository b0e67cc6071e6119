"""Error taxonomy for the collector.

Item-level errors (``TransientFetchError`` and subclasses) skip a single
transaction for the current cycle. ``PersistenceError`` skips a single
record. ``CycleFatalError`` aborts the current cycle; the scheduler keeps
running either way.
"""


class BridgeCollectorError(Exception):
    """Base class for all collector errors."""


class TransientFetchError(BridgeCollectorError):
    """An upstream source could not provide data for one item this cycle."""


class ReceiptUnavailable(TransientFetchError):
    """The chain node has no receipt for the transaction (yet)."""

    def __init__(self, chain: str, tx_hash: str, reason: str = "not found"):
        self.chain = chain
        self.tx_hash = tx_hash
        super().__init__(f"Receipt unavailable on {chain} for {tx_hash}: {reason}")


class MetadataUnavailable(TransientFetchError):
    """Token metadata accessors could not be read."""

    def __init__(self, chain: str, token_address: str, reason: str = ""):
        self.chain = chain
        self.token_address = token_address
        super().__init__(f"Token metadata unavailable on {chain} for {token_address}: {reason}")


class MessageStatusUnavailable(TransientFetchError):
    """The message-status oracle could not report a stage for a withdrawal."""


class PersistenceError(BridgeCollectorError):
    """Writing one record failed."""


class CycleFatalError(BridgeCollectorError):
    """The cycle cannot proceed at all."""


class IndexerUnavailable(CycleFatalError):
    """The indexer snapshot could not be fetched or parsed."""
