"""
Ledger adapter backed by web3.py and an eth-account signer.

Talks to the ``RWATokenFactory`` and ``PythOracleReader`` contracts over
JSON-RPC.  Mutating calls are built (which runs gas estimation and so
surfaces reverts before broadcast), signed locally, broadcast, and then
awaited until mined.  Once broadcast, a transaction is never abandoned.
Nonce allocation is serialized per client, so one handle can be shared
by concurrent requests.

Custom-error revert data is decoded against the factory ABI so callers
receive a readable reason such as ``InsufficientFractionsAvailable``.
"""
import threading
from typing import Any, Dict, List, Optional

from eth_account import Account
from eth_utils import function_signature_to_4byte_selector, to_checksum_address
from loguru import logger
from web3 import Web3
from web3.exceptions import ContractCustomError, ContractLogicError
from web3.logs import DISCARD

from src.rwaflow.clients.adapters.abis import PYTH_ORACLE_READER_ABI, RWA_FACTORY_ABI
from src.rwaflow.clients.base import LedgerClient
from src.rwaflow.core.types import (
    AssetMetadata,
    LedgerEvent,
    PriceQuote,
    TransactionReceipt,
)

RECEIPT_EVENTS = ("AssetMinted", "FractionPurchased")


def _hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def _bytes32(value: str) -> bytes:
    raw = bytes.fromhex(value[2:] if value.startswith("0x") else value)
    if len(raw) != 32:
        raise ValueError(f"Expected 32-byte hex value, got {len(raw)} bytes")
    return raw


def _payload(update_data: List[str]) -> List[bytes]:
    return [bytes.fromhex(d[2:] if d.startswith("0x") else d) for d in update_data]


def _error_selectors(abi: List[Dict[str, Any]]) -> Dict[str, str]:
    """Map 4-byte selectors (0x-hex) to custom error names."""
    selectors = {}
    for entry in abi:
        if entry.get("type") != "error":
            continue
        signature = f"{entry['name']}({','.join(i['type'] for i in entry['inputs'])})"
        selectors[_hex(function_signature_to_4byte_selector(signature))] = entry["name"]
    return selectors


class Web3LedgerClient(LedgerClient):
    """Concrete ``LedgerClient`` for EVM chains."""

    def __init__(
        self,
        web3: Web3,
        private_key: str,
        factory_address: str,
        oracle_reader_address: str,
        chain_id: Optional[int] = None,
        receipt_timeout: float = 180.0,
    ):
        """
        Args:
            web3: Connected ``Web3`` instance.
            private_key: Hex key of the account that signs transactions.
            factory_address: ``RWATokenFactory`` address.
            oracle_reader_address: ``PythOracleReader`` address.
            chain_id: Chain id used when signing.  Queried from the node
                      when omitted.
            receipt_timeout: Seconds to wait for a transaction to be mined.
        """
        if not private_key:
            raise ValueError("Private key is required for Web3LedgerClient.")
        if not private_key.startswith("0x"):
            private_key = "0x" + private_key

        self.web3 = web3
        self._account = Account.from_key(private_key)
        self._chain_id = chain_id
        self.receipt_timeout = receipt_timeout

        self.factory = web3.eth.contract(
            address=to_checksum_address(factory_address), abi=RWA_FACTORY_ABI
        )
        self.oracle_reader = web3.eth.contract(
            address=to_checksum_address(oracle_reader_address),
            abi=PYTH_ORACLE_READER_ABI,
        )
        self._error_names = _error_selectors(RWA_FACTORY_ABI)
        self._nonce_lock = threading.Lock()

        logger.info(f"Web3LedgerClient initialised. Signer: {self._account.address}")

    @classmethod
    def from_rpc(cls, rpc_url: str, **kwargs) -> "Web3LedgerClient":
        web3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": 30}))
        return cls(web3, **kwargs)

    @property
    def address(self) -> str:
        return self._account.address

    def get_chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = self.web3.eth.chain_id
        return self._chain_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_update_fee(self, update_data: List[str]) -> int:
        return int(self.oracle_reader.functions.getUpdateFee(_payload(update_data)).call())

    def get_asset_metadata(self, asset_id: int) -> AssetMetadata:
        raw = self._call(self.factory.functions.getAssetMetadata(asset_id))
        (
            issuer, document_hash, total_value, fraction_count, min_fraction_size,
            mint_timestamp, oracle_price_at_mint, price_id, verified,
        ) = raw
        return AssetMetadata(
            issuer=issuer,
            document_hash=document_hash,
            total_value=int(total_value),
            fraction_count=int(fraction_count),
            min_fraction_size=int(min_fraction_size),
            mint_timestamp=int(mint_timestamp),
            oracle_price_at_mint=int(oracle_price_at_mint),
            price_id=_hex(price_id),
            verified=bool(verified),
        )

    def get_price_at_mint(self, asset_id: int) -> int:
        return int(self.oracle_reader.functions.getPriceAtMint(asset_id).call())

    def read_latest_price(self, feed_id: str) -> PriceQuote:
        """Latest price already posted on-chain for *feed_id*."""
        price, timestamp = self.oracle_reader.functions.getLatestPrice(
            _bytes32(feed_id)
        ).call()
        return PriceQuote(feed_id=feed_id, price=int(price), timestamp=int(timestamp))

    def is_supported_feed(self, feed_id: str) -> bool:
        return bool(self.oracle_reader.functions.isSupportedFeed(_bytes32(feed_id)).call())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def mint_asset(
        self,
        document_hash: str,
        total_value: int,
        fraction_count: int,
        min_fraction_size: int,
        feed_id: str,
        update_data: List[str],
        lockup_period: int,
        payment: int,
    ) -> TransactionReceipt:
        fn = self.factory.functions.mintRWAToken(
            document_hash,
            total_value,
            fraction_count,
            min_fraction_size,
            _bytes32(feed_id),
            _payload(update_data),
            lockup_period,
        )
        return self._transact(fn, payment, label="mintRWAToken")

    def purchase_fraction(
        self,
        asset_id: int,
        amount: int,
        secret: bytes,
        nullifier: bytes,
        payment: int,
    ) -> TransactionReceipt:
        fn = self.factory.functions.purchaseFraction(asset_id, amount, secret, nullifier)
        return self._transact(fn, payment, label="purchaseFraction")

    def post_price_update(
        self,
        feed_id: str,
        update_data: List[str],
        payment: int,
    ) -> TransactionReceipt:
        fn = self.oracle_reader.functions.updatePrice(_bytes32(feed_id), _payload(update_data))
        return self._transact(fn, payment, label="updatePrice")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _call(self, fn):
        try:
            return fn.call()
        except ContractLogicError as e:
            readable = self._readable_revert(e)
            if readable is e:
                raise
            raise readable from e

    def _transact(self, fn, payment: int, label: str) -> TransactionReceipt:
        chain_id = self.get_chain_id()

        # The pending nonce only advances once the node has seen the
        # broadcast, so reading it and sending must not interleave.
        with self._nonce_lock:
            nonce = self.web3.eth.get_transaction_count(self._account.address, "pending")
            try:
                tx = fn.build_transaction({
                    "from": self._account.address,
                    "value": payment,
                    "nonce": nonce,
                    "chainId": chain_id,
                })
            except ContractLogicError as e:
                logger.error(f"{label} rejected during gas estimation: {e}")
                readable = self._readable_revert(e)
                if readable is e:
                    raise
                raise readable from e

            signed = self._account.sign_transaction(tx)
            tx_hash = self.web3.eth.send_raw_transaction(signed.raw_transaction)

        logger.info(f"{label} transaction sent: {_hex(tx_hash)} (nonce {nonce})")

        raw_receipt = self.web3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.receipt_timeout
        )
        receipt = TransactionReceipt(
            tx_hash=_hex(raw_receipt["transactionHash"]),
            block_number=int(raw_receipt["blockNumber"]),
            status=int(raw_receipt["status"]),
            events=self._decode_events(raw_receipt),
        )

        if receipt.status != 1:
            logger.error(f"{label} reverted on-chain: {receipt.tx_hash}")
            raise ContractLogicError(f"execution reverted: {label} ({receipt.tx_hash})")

        logger.info(f"{label} confirmed in block {receipt.block_number}")
        return receipt

    def _decode_events(self, raw_receipt) -> List[LedgerEvent]:
        events: List[LedgerEvent] = []
        for name in RECEIPT_EVENTS:
            for decoded in getattr(self.factory.events, name)().process_receipt(
                raw_receipt, errors=DISCARD
            ):
                events.append(LedgerEvent(name=decoded["event"], args=dict(decoded["args"])))
        return events

    def _readable_revert(self, exc: ContractLogicError) -> ContractLogicError:
        """Replace custom-error selector data with the error's name."""
        data = exc.data if isinstance(exc.data, str) else None
        if isinstance(exc, ContractCustomError) and data is None:
            data = exc.message
        if data:
            name = self._error_names.get(data[:10].lower())
            if name:
                return ContractLogicError(f"execution reverted: {name}", data=data)
        return exc
