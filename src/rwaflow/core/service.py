"""
Orchestration of asset issuance and fractional purchase.

Sequences the eligibility prover, the price oracle, and the ledger into
two request/response workflows:

  create_asset:
    1. Validate the request.
    2. Generate an eligibility proof for the issuer.
    3. Fetch a signed price update for the default feed.
    4. Quote the fee for posting that update.
    5. Mint, paying exactly the quoted fee, and wait for the receipt.
    6. Decode the new asset id from the ``AssetMinted`` event.
    7. Read back the oracle price recorded at mint.

  purchase_fraction:
    1. Look up asset metadata (null issuer means "not found").
    2. Generate an eligibility proof for the buyer.
    3. Read the latest posted price, falling back to metadata pricing.
    4. Price the purchase from metadata.
    5. Encode secret and nullifier as bytes32.
    6. Convert the fiat cost into the native payment unit.
    7. Purchase and wait for the receipt.

Alongside the workflows the service generates standalone eligibility or
range proofs, posts fresh oracle prices on-chain, and answers read-only
asset and price queries.

Every collaborator call is wrapped in a ``Result`` and classified at the
point it fails.  Steps run strictly in order and the first failure ends
the workflow; nothing is retried and a submitted transaction is always
awaited.  The service keeps no state between requests.
"""
from typing import List, Optional, Union

from loguru import logger

from src.rwaflow.clients.base import EligibilityProofClient, LedgerClient, PriceOracleClient
from src.rwaflow.core import pricing
from src.rwaflow.core.classifier import (
    classify_create_failure,
    classify_lookup_failure,
    classify_proof_failure,
    classify_purchase_failure,
    error_text,
    proof_failure,
)
from src.rwaflow.core.errors import (
    AssetNotFoundError,
    InternalError,
    RWAOrchestrationError,
    ValidationError,
)
from src.rwaflow.core.result import Result
from src.rwaflow.core.types import (
    AssetMetadata,
    AssetView,
    CreateAssetRequest,
    CreateAssetResponse,
    EligibilityProofResult,
    OracleUpdateResponse,
    PriceQuote,
    ProofInput,
    ProofRequest,
    ProofResponse,
    ProofType,
    PurchaseRequest,
    PurchaseResponse,
    RangeProofInput,
    TransactionOutcome,
    TransactionReceipt,
)
from src.rwaflow.core.validator import RequestValidator, normalize_address
from src.rwaflow.utils.config import PaymentConfig
from src.rwaflow.utils.logger import tag_workflow

MINT_EVENT = "AssetMinted"


def encode_bytes32(field: str, value: str) -> bytes:
    """Encode *value* as the 32-byte word the factory expects.

    A 0x-prefixed 64-digit hex string is taken as raw bytes.  Anything
    else is UTF-8 encoded and right-padded with zeros; at most 31 bytes
    fit, leaving room for the terminating zero.

    Raises:
        ValidationError: If *value* does not fit.
    """
    if value.startswith("0x") and len(value) == 66:
        try:
            return bytes.fromhex(value[2:])
        except ValueError:
            pass

    raw = value.encode("utf-8")
    if len(raw) > 31:
        raise ValidationError(field, f"{field} must be at most 31 bytes when encoded")
    return raw.ljust(32, b"\x00")


class OrchestrationService:
    """Runs the create-asset and purchase-fraction workflows."""

    def __init__(
        self,
        prover: EligibilityProofClient,
        oracle: PriceOracleClient,
        ledger: LedgerClient,
        default_feed_id: str,
        payment: Optional[PaymentConfig] = None,
        testnet: bool = True,
        validator: Optional[RequestValidator] = None,
    ):
        """
        Args:
            prover: Eligibility proof subsystem.
            oracle: Price oracle client.
            ledger: Ledger (contract) client.
            default_feed_id: Feed whose price update accompanies every mint.
            payment: Fiat → native conversion policy for purchases.
            testnet: Whether the target chain is a test network.  The
                     payment policy is a testnet placeholder and is
                     flagged loudly otherwise.
            validator: Request validator (a default one is created).
        """
        self.prover = prover
        self.oracle = oracle
        self.ledger = ledger
        self.default_feed_id = default_feed_id
        self.payment = payment or PaymentConfig()
        self.testnet = testnet
        self.validator = validator or RequestValidator()

    # ------------------------------------------------------------------
    # Create asset
    # ------------------------------------------------------------------

    @tag_workflow("create")
    def create_asset(self, request: CreateAssetRequest) -> CreateAssetResponse:
        """Mint a new asset token.  Never raises; failures are in the response."""
        logger.info(f"Creating asset for issuer {request.issuer_address}")

        try:
            return self._create_asset(request)
        except RWAOrchestrationError as e:
            return self._create_failed(e)
        except Exception as e:
            logger.exception(f"Unexpected failure while creating asset: {e}")
            return self._create_failed(InternalError(error_text(e), detail=error_text(e)))

    def _create_asset(self, request: CreateAssetRequest) -> CreateAssetResponse:
        checked = self.validator.check_create(request)
        if not checked.ok:
            return self._create_failed(checked.error)

        issuer = normalize_address("issuer_address", request.issuer_address)

        proof = self._prove(issuer, request.proof_input)
        if not proof.ok:
            return self._create_failed(proof.error)

        feed_id = self.default_feed_id
        update_data = Result.capture(
            lambda: self.oracle.get_price_update_data([feed_id]),
            classify_create_failure,
        )
        if not update_data.ok:
            return self._create_failed(update_data.error)

        fee = Result.capture(
            lambda: self.ledger.get_update_fee(update_data.value),
            classify_create_failure,
        )
        if not fee.ok:
            return self._create_failed(fee.error)

        logger.info(f"Minting asset with oracle update fee: {fee.value}")

        receipt = Result.capture(
            lambda: self.ledger.mint_asset(
                document_hash=request.document_hash,
                total_value=request.total_value,
                fraction_count=request.fraction_count,
                min_fraction_size=request.min_fraction_size,
                feed_id=feed_id,
                update_data=update_data.value,
                lockup_period=request.lockup_period,
                payment=fee.value,
            ),
            classify_create_failure,
        )
        if not receipt.ok:
            return self._create_failed(receipt.error)

        outcome = TransactionOutcome.from_receipt(receipt.value, MINT_EVENT)
        logger.info(f"Mint confirmed: {outcome.tx_hash} (block {outcome.block_number})")

        asset_id = outcome.payload.get("tokenId")
        if asset_id is None:
            logger.warning(
                f"No {MINT_EVENT} event in receipt {outcome.tx_hash}; "
                "asset id left undefined."
            )
            oracle_price = None
        else:
            asset_id = int(asset_id)
            price = Result.capture(
                lambda: self.ledger.get_price_at_mint(asset_id),
                classify_create_failure,
            )
            if not price.ok:
                logger.error(
                    f"Asset {asset_id} minted in {outcome.tx_hash} but the "
                    "mint price could not be read back."
                )
                return self._create_failed(price.error)
            oracle_price = pricing.from_fixed_point(price.value)

        logger.success(f"Asset created: id={asset_id}, tx={outcome.tx_hash}")

        return CreateAssetResponse(
            success=True,
            asset_id=asset_id,
            tx_hash=outcome.tx_hash,
            oracle_price=oracle_price,
            proof=proof.value.proof,
        )

    # ------------------------------------------------------------------
    # Purchase fraction
    # ------------------------------------------------------------------

    @tag_workflow("purchase")
    def purchase_fraction(self, request: PurchaseRequest) -> PurchaseResponse:
        """Buy fractions of an existing asset.  Never raises."""
        logger.info(
            f"Processing purchase: asset={request.asset_id}, "
            f"amount={request.amount}, buyer={request.buyer_address}"
        )

        try:
            return self._purchase_fraction(request)
        except RWAOrchestrationError as e:
            return self._purchase_failed(e)
        except Exception as e:
            logger.exception(f"Unexpected failure while purchasing: {e}")
            return self._purchase_failed(InternalError(error_text(e), detail=error_text(e)))

    def _purchase_fraction(self, request: PurchaseRequest) -> PurchaseResponse:
        checked = self.validator.check_purchase(request)
        if not checked.ok:
            return self._purchase_failed(checked.error)

        metadata = self._lookup(request.asset_id)
        if not metadata.ok:
            return self._purchase_failed(metadata.error)
        asset = metadata.value

        buyer = normalize_address("buyer_address", request.buyer_address)
        proof = self._prove(buyer, request.proof_input)
        if not proof.ok:
            return self._purchase_failed(proof.error)

        display_price = self._display_price(asset)

        per_fraction = pricing.price_per_fraction(asset.total_value, asset.fraction_count)
        cost = pricing.total_cost(per_fraction, request.amount)
        logger.info(
            f"Purchase cost: {cost} ({per_fraction} per fraction, "
            f"reference price {display_price})"
        )

        secret = encode_bytes32("proof_input.secret", request.proof_input.secret)
        nullifier = encode_bytes32("proof_input.nullifier", request.proof_input.nullifier)

        if not self.testnet:
            logger.warning(
                "Using the fixed-scale payment conversion outside a testnet. "
                "This is a placeholder, not a market-price conversion."
            )
        payment = pricing.to_native_payment(
            cost,
            scale_factor=self.payment.scale_factor,
            precision=self.payment.precision,
            decimals=self.payment.native_decimals,
        )

        receipt = Result.capture(
            lambda: self.ledger.purchase_fraction(
                asset_id=request.asset_id,
                amount=request.amount,
                secret=secret,
                nullifier=nullifier,
                payment=payment,
            ),
            classify_purchase_failure,
        )
        if not receipt.ok:
            return self._purchase_failed(receipt.error)

        logger.success(
            f"Purchase confirmed in block {receipt.value.block_number}: "
            f"{receipt.value.tx_hash}"
        )

        return PurchaseResponse(
            success=True,
            tx_hash=receipt.value.tx_hash,
            total_cost=cost,
            price_per_fraction=per_fraction,
        )

    # ------------------------------------------------------------------
    # Standalone proofs
    # ------------------------------------------------------------------

    @tag_workflow("prove")
    def generate_proof(self, request: ProofRequest) -> ProofResponse:
        """Generate an eligibility or range proof on its own.  Never raises."""
        logger.info(
            f"Generating {request.proof_type.value} proof for {request.subject_address}"
        )
        try:
            subject = normalize_address("subject_address", request.subject_address)
        except ValidationError as e:
            return self._proof_failed(e)

        proof = self._prove(subject, request.inputs, request.proof_type)
        if not proof.ok:
            return self._proof_failed(proof.error)

        logger.success(f"{request.proof_type.value.capitalize()} proof generated for {subject}")
        return ProofResponse(
            success=True,
            proof=proof.value.proof,
            public_signals=proof.value.public_signals,
        )

    # ------------------------------------------------------------------
    # Oracle maintenance
    # ------------------------------------------------------------------

    @tag_workflow("update-prices")
    def update_prices(self, feed_ids: Optional[List[str]] = None) -> OracleUpdateResponse:
        """Post fresh oracle prices on-chain, one transaction per feed.

        A feed the reader does not support, or whose update fails, is
        skipped and reported in ``failed_feeds``.  The run fails only when
        no feed was updated.  Never raises.
        """
        feed_ids = feed_ids or [self.default_feed_id]
        logger.info(f"Updating oracle prices for {len(feed_ids)} feeds")

        tx_hashes: List[str] = []
        updated: List[str] = []
        failed = {}
        for feed_id in feed_ids:
            posted = self._post_price_update(feed_id)
            if posted.ok:
                updated.append(feed_id)
                tx_hashes.append(posted.value.tx_hash)
            else:
                logger.error(f"Price update for {feed_id} failed: {posted.error.message}")
                failed[feed_id] = posted.error.message

        if not updated:
            return OracleUpdateResponse(
                success=False,
                failed_feeds=failed,
                error="All price updates failed",
                status_code=500,
            )

        logger.success(f"Updated {len(updated)}/{len(feed_ids)} price feeds on-chain")
        return OracleUpdateResponse(
            success=True,
            tx_hashes=tx_hashes,
            updated_feeds=updated,
            failed_feeds=failed,
        )

    def _post_price_update(self, feed_id: str) -> Result[TransactionReceipt]:
        supported = Result.capture(
            lambda: self.ledger.is_supported_feed(feed_id),
            classify_create_failure,
        )
        if not supported.ok:
            return supported
        if not supported.value:
            return Result.failure(
                ValidationError("feed_id", f"Price feed {feed_id} is not supported by the oracle reader")
            )

        update_data = Result.capture(
            lambda: self.oracle.get_price_update_data([feed_id]),
            classify_create_failure,
        )
        if not update_data.ok:
            return update_data

        fee = Result.capture(
            lambda: self.ledger.get_update_fee(update_data.value),
            classify_create_failure,
        )
        if not fee.ok:
            return fee

        logger.info(f"Posting price update for {feed_id} with fee {fee.value}")
        return Result.capture(
            lambda: self.ledger.post_price_update(feed_id, update_data.value, fee.value),
            classify_create_failure,
        )

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def get_asset(self, asset_id: int) -> AssetView:
        """Return metadata and derived pricing for *asset_id*.

        Raises:
            AssetNotFoundError: If the ledger does not know the asset.
        """
        asset = self._lookup(asset_id).unwrap()
        return AssetView(
            asset_id=asset_id,
            metadata=asset,
            price_per_fraction=pricing.price_per_fraction(
                asset.total_value, asset.fraction_count
            ),
            oracle_price_at_mint=pricing.from_fixed_point(asset.oracle_price_at_mint),
        )

    def get_oracle_prices(self, feed_ids: Optional[List[str]] = None) -> List[PriceQuote]:
        feed_ids = feed_ids or [self.default_feed_id]
        logger.info(f"Fetching prices for {len(feed_ids)} feeds")
        return self.oracle.fetch_latest_prices(feed_ids)

    # ------------------------------------------------------------------
    # Steps shared by both workflows
    # ------------------------------------------------------------------

    def _prove(
        self,
        subject: str,
        inputs: Union[ProofInput, RangeProofInput],
        proof_type: ProofType = ProofType.ELIGIBILITY,
    ) -> Result[EligibilityProofResult]:
        generated = Result.capture(
            lambda: self.prover.generate_proof(proof_type, subject, inputs),
            classify_proof_failure,
        )
        if not generated.ok:
            return generated

        result = generated.value
        if not result.success or not result.proof:
            logger.error(f"{proof_type.value.capitalize()} proof failed for {subject}: {result.error}")
            return Result.failure(proof_failure(result.error))
        return generated

    def _lookup(self, asset_id: int) -> Result[AssetMetadata]:
        metadata = Result.capture(
            lambda: self.ledger.get_asset_metadata(asset_id),
            classify_lookup_failure(asset_id),
        )
        if metadata.ok and not metadata.value.exists:
            return Result.failure(AssetNotFoundError(asset_id))
        return metadata

    def _display_price(self, asset: AssetMetadata) -> float:
        """Latest posted price for the asset's feed, or the metadata price.

        The fallback is silent to the caller: an unavailable oracle never
        fails a purchase.
        """
        quote = Result.capture(
            lambda: self.oracle.get_latest_price(asset.price_id),
            classify_purchase_failure,
        )
        if quote.ok:
            return pricing.from_fixed_point(quote.value.price, quote.value.expo)

        logger.warning(
            f"Latest price unavailable for feed {asset.price_id} "
            f"({quote.error.message}); using metadata price."
        )
        return pricing.price_per_fraction(asset.total_value, asset.fraction_count)

    @staticmethod
    def _create_failed(error: RWAOrchestrationError) -> CreateAssetResponse:
        logger.error(f"Failed to create asset: [{error.kind}] {error.message}")
        return CreateAssetResponse(**error.to_response_fields())

    @staticmethod
    def _purchase_failed(error: RWAOrchestrationError) -> PurchaseResponse:
        logger.error(f"Failed to purchase fraction: [{error.kind}] {error.message}")
        return PurchaseResponse(**error.to_response_fields())

    @staticmethod
    def _proof_failed(error: RWAOrchestrationError) -> ProofResponse:
        logger.error(f"Failed to generate proof: [{error.kind}] {error.message}")
        return ProofResponse(**error.to_response_fields())
