"""
Shielded account client

Provides the high-level API for moving value between a public token
balance and a shielded balance, and between shielded accounts.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Type, Union

from .address import CanonicalAddress, normalize
from .calldata import CalldataIntegrityGuard
from .collaborators import (
    BuiltOperation,
    ChainReader,
    ExecutionBackend,
    IdentityDecoder,
    LedgerQuery,
    ProofBuilder,
    normalize_descriptor,
)
from .errors import (
    AmountInvalid,
    AmountOverflow,
    IdentityMismatch,
    InsufficientBalance,
    ProofConstructionFailed,
    ShieldError,
    StateRefreshFailed,
    SubmissionFailed,
    with_hint,
)
from .identity import AccountIdentity, PublicKey, parse_recipient_key
from .networks import NetworkConfig
from .state import ShieldedAccountState, StateReconciler
from .types import (
    CallBundle,
    Fund,
    Operation,
    OperationKind,
    OperationStage,
    OperationTrace,
    Rollover,
    Transfer,
    Withdraw,
)
from .utils import format_units, to_int, uint256_from_halves

logger = logging.getLogger(__name__)

# Shielded amounts are proven inside a 32-bit range; the ledger accepts
# values up to the signed maximum
MAX_SHIELDED_AMOUNT = 2**31 - 1


@contextmanager
def _calling(error_cls: Type[ShieldError]) -> Iterator[None]:
    """Map any non-domain failure of a collaborator call to ``error_cls``"""
    try:
        yield
    except ShieldError:
        raise
    except Exception as exc:
        cause = str(exc) or type(exc).__name__
        raise error_cls(with_hint(cause)) from exc


class ShieldedAccountClient:
    """
    Client for one shielded account

    Every operation either returns a transaction id or raises exactly one
    ``ShieldError`` whose message starts with the operation name. Callers
    must not run overlapping operations on the same account: nonce and
    ordering conflicts are left to the execution layer.

    Example:
        ```python
        client = ShieldedAccountClient(
            owner_address=account_address,
            private_key="0x1234...",
            network=get_network_config("sepolia"),
            proof_builder=builder,
            backend=backend,
            ledger=ledger,
        )

        # Shield 1 STRK
        tx = await client.fund(10**18)

        # Receive, then make the pending balance spendable
        tx = await client.rollover()

        # Send 5 shielded units
        tx = await client.transfer(recipient_key, 5)

        # Back to the public balance
        tx = await client.withdraw(5)
        ```
    """

    def __init__(
        self,
        owner_address: Union[str, int],
        private_key: Union[str, int],
        network: NetworkConfig,
        proof_builder: ProofBuilder,
        backend: ExecutionBackend,
        ledger: LedgerQuery,
        chain: Optional[ChainReader] = None,
        identity_decoder: Optional[IdentityDecoder] = None,
    ):
        """
        Initialize the client

        Args:
            owner_address: Account that owns the shielded balance
            private_key: Shielded account private scalar (required, no fallback)
            network: Deployment preset (contract, token, decimals)
            proof_builder: Builds operation calls with embedded proofs
            backend: Signs and submits transactions
            ledger: Reads shielded account state and exchange rates
            chain: Generic contract reader, enables public balance checks
            identity_decoder: Resolves compact recipient identities

        Raises:
            InvalidKey: If the private key is missing or out of range
            InvalidAddress: If the owner address is empty or malformed
        """
        self.owner_address: CanonicalAddress = normalize(owner_address)
        self.identity = AccountIdentity(private_key)
        self.network = network
        self.contract_address = network.contract
        self.token_address = network.token
        self.proof_builder = proof_builder
        self.backend = backend
        self.ledger = ledger
        self.chain = chain
        self.identity_decoder = identity_decoder
        self.guard = CalldataIntegrityGuard(self.contract_address)
        self.reconciler = StateReconciler(
            ledger, self.identity.public_key, network.token_decimals
        )
        self.last_operation: Optional[OperationTrace] = None

        logger.info(
            "Shielded account client ready: owner=%s contract=%s token=%s",
            self.owner_address,
            self.contract_address,
            network.token_symbol,
        )

    @property
    def public_key(self) -> PublicKey:
        return self.identity.public_key

    def get_public_key(self) -> str:
        """Owner's public key as 0x<x><y> hex"""
        return self.identity.public_key.to_hex()

    def get_state(self) -> ShieldedAccountState:
        """Snapshot of the cached account state"""
        return self.reconciler.state

    # =========================================================================
    # Operations
    # =========================================================================

    async def fund(self, public_amount: int) -> str:
        """
        Move public tokens into the shielded balance

        Approval and shielding calls go out in one atomic transaction.
        The funded amount is public on-chain.

        Args:
            public_amount: Amount in the token's base units

        Returns:
            Transaction id
        """
        trace = self._begin(OperationKind.FUND)
        try:
            return await self._fund(public_amount, trace)
        except ShieldError as exc:
            self._failed(trace, exc)
            raise

    async def transfer(self, recipient_public_key: str, shielded_amount: int) -> str:
        """
        Send shielded value to another account; the amount stays hidden

        Args:
            recipient_public_key: Compact identity string, or 0x + 128 hex
                characters (x then y)
            shielded_amount: Amount in shielded units

        Returns:
            Transaction id
        """
        trace = self._begin(OperationKind.TRANSFER)
        try:
            return await self._transfer(recipient_public_key, shielded_amount, trace)
        except ShieldError as exc:
            self._failed(trace, exc)
            raise

    async def rollover(self) -> str:
        """
        Move the pending balance into the current balance

        Returns:
            Transaction id
        """
        trace = self._begin(OperationKind.ROLLOVER)
        try:
            return await self._rollover(trace)
        except ShieldError as exc:
            self._failed(trace, exc)
            raise

    async def withdraw(
        self, shielded_amount: int, destination: Optional[str] = None
    ) -> str:
        """
        Move shielded value back to a public address

        The withdrawn amount becomes public on-chain.

        Args:
            shielded_amount: Amount in shielded units
            destination: Receiving address, the executor's own by default

        Returns:
            Transaction id
        """
        trace = self._begin(OperationKind.WITHDRAW)
        try:
            return await self._withdraw(shielded_amount, destination, trace)
        except ShieldError as exc:
            self._failed(trace, exc)
            raise

    async def submit(self, operation: Operation) -> str:
        """Run an operation given as a ``Fund``/``Transfer``/``Rollover``/``Withdraw``"""
        if isinstance(operation, Fund):
            return await self.fund(operation.amount)
        if isinstance(operation, Transfer):
            return await self.transfer(operation.recipient, operation.amount)
        if isinstance(operation, Rollover):
            return await self.rollover()
        if isinstance(operation, Withdraw):
            return await self.withdraw(operation.amount, operation.destination)
        raise TypeError(f"Unknown operation: {type(operation).__name__}")

    async def refresh(self) -> ShieldedAccountState:
        """Reload the account state from the ledger"""
        try:
            return await self.reconciler.refresh()
        except StateRefreshFailed as exc:
            exc.operation = exc.operation or "refresh"
            raise

    async def get_wallet_balance(self) -> int:
        """
        Public token balance of the executing account

        Returns:
            Balance in the token's base units
        """
        try:
            return await self._read_wallet_balance()
        except ShieldError as exc:
            exc.operation = exc.operation or "wallet_balance"
            raise

    # =========================================================================
    # Operation bodies
    # =========================================================================

    async def _fund(self, public_amount: int, trace: OperationTrace) -> str:
        Fund(public_amount).validate()
        sender = self._executor_address()

        with _calling(ProofConstructionFailed):
            converted = to_int(await self.ledger.get_exchange_rate(public_amount))
        shielded_amount = self._check_shielded_amount(converted)
        logger.info(
            "Funding %s %s (%d shielded units)",
            format_units(public_amount, self.network.token_decimals),
            self.network.token_symbol,
            shielded_amount,
        )

        await self._check_public_balance(public_amount)
        trace.advance(OperationStage.VALIDATED)

        built = await self._build(OperationKind.FUND, sender, amount=shielded_amount)
        if built.approval is None:
            raise ProofConstructionFailed("Proof builder returned no approval call")
        trace.advance(OperationStage.PROOF_BUILT)

        approval = self.guard.verify(built.approval)
        trace.advance(OperationStage.CALLDATA_VERIFIED)

        return await self._submit(trace, CallBundle.of(approval, built.primary))

    async def _transfer(
        self, recipient_public_key: str, shielded_amount: int, trace: OperationTrace
    ) -> str:
        Transfer(recipient_public_key, shielded_amount).validate()
        self._check_shielded_amount(shielded_amount)
        sender = self._executor_address()
        self._check_cached_balance(shielded_amount)
        recipient = parse_recipient_key(recipient_public_key, self.identity_decoder)
        trace.advance(OperationStage.VALIDATED)

        logger.info(
            "Transferring %d shielded units to %s...",
            shielded_amount,
            recipient.to_hex()[:18],
        )
        built = await self._build(
            OperationKind.TRANSFER,
            sender,
            amount=shielded_amount,
            counterparty=recipient,
        )
        trace.advance(OperationStage.PROOF_BUILT)
        trace.advance(OperationStage.CALLDATA_VERIFIED)

        return await self._submit(trace, CallBundle.of(built.primary))

    async def _rollover(self, trace: OperationTrace) -> str:
        Rollover().validate()
        sender = self._executor_address()
        trace.advance(OperationStage.VALIDATED)

        logger.info("Rolling over pending balance")
        built = await self._build(OperationKind.ROLLOVER, sender)
        trace.advance(OperationStage.PROOF_BUILT)
        trace.advance(OperationStage.CALLDATA_VERIFIED)

        return await self._submit(trace, CallBundle.of(built.primary))

    async def _withdraw(
        self,
        shielded_amount: int,
        destination: Optional[str],
        trace: OperationTrace,
    ) -> str:
        Withdraw(shielded_amount, destination).validate()
        self._check_shielded_amount(shielded_amount)
        sender = self._executor_address()
        target = normalize(sender if destination is None else destination)
        self._check_cached_balance(shielded_amount)
        trace.advance(OperationStage.VALIDATED)

        logger.info("Withdrawing %d shielded units to %s", shielded_amount, target)
        built = await self._build(
            OperationKind.WITHDRAW,
            sender,
            amount=shielded_amount,
            destination=target,
        )
        trace.advance(OperationStage.PROOF_BUILT)
        trace.advance(OperationStage.CALLDATA_VERIFIED)

        return await self._submit(trace, CallBundle.of(built.primary))

    # =========================================================================
    # Steps
    # =========================================================================

    def _begin(self, kind: OperationKind) -> OperationTrace:
        trace = OperationTrace(kind)
        self.last_operation = trace
        logger.debug("%s: requested", kind.value)
        return trace

    def _failed(self, trace: OperationTrace, exc: ShieldError) -> None:
        if exc.operation is None:
            exc.operation = trace.kind.value
        trace.fail(exc)
        logger.error("%s", exc)

    def _executor_address(self) -> str:
        """
        Raw address of the signing account, after checking it is the owner

        The raw string is what the proof gets bound to; only the comparison
        uses canonical forms.
        """
        raw = self.backend.address
        if isinstance(raw, int):
            raw = hex(raw)
        executor = normalize(raw)
        if executor != self.owner_address:
            raise IdentityMismatch(
                f"Executor {executor} does not match owner {self.owner_address}; "
                "the ledger would reject the proof with NotOwner"
            )
        return raw

    def _check_shielded_amount(self, amount: int) -> int:
        if amount <= 0:
            raise AmountInvalid(f"Shielded amount must be positive, got {amount}")
        if amount > MAX_SHIELDED_AMOUNT:
            raise AmountOverflow(
                f"Shielded amount {amount} exceeds the maximum of {MAX_SHIELDED_AMOUNT}"
            )
        return amount

    def _check_cached_balance(self, shielded_amount: int) -> None:
        # Soft check against the last snapshot; the proof enforces the real one
        required = shielded_amount * self.reconciler.scale
        available = self.reconciler.state.current_balance
        if required > available:
            raise InsufficientBalance(
                f"Insufficient shielded balance: {available // self.reconciler.scale} "
                f"< {shielded_amount}"
            )

    async def _check_public_balance(self, public_amount: int) -> None:
        if self.chain is None:
            return
        try:
            balance = await self._read_wallet_balance()
        except ShieldError as exc:
            logger.warning("Could not check wallet balance: %s", exc)
            return

        if balance < public_amount:
            decimals = self.network.token_decimals
            symbol = self.network.token_symbol
            raise InsufficientBalance(
                f"Insufficient {symbol} balance: {format_units(balance, decimals)} "
                f"< {format_units(public_amount, decimals)}"
            )

    async def _read_wallet_balance(self) -> int:
        if self.chain is None:
            raise StateRefreshFailed("No chain reader configured")

        executor = normalize(self.backend.address)
        with _calling(StateRefreshFailed):
            result = await self.chain.call_contract(
                self.token_address, "balanceOf", [executor]
            )
            balance = uint256_from_halves(result)
        logger.debug("Wallet balance of %s: %d", executor, balance)
        return balance

    async def _build(
        self,
        kind: OperationKind,
        sender: str,
        amount: Optional[int] = None,
        counterparty: Optional[PublicKey] = None,
        destination: Optional[str] = None,
    ) -> BuiltOperation:
        with _calling(ProofConstructionFailed):
            descriptor = await self.proof_builder.build(
                kind,
                sender=sender,
                amount=amount,
                counterparty=counterparty,
                destination=destination,
            )
            return normalize_descriptor(
                descriptor,
                self.contract_address,
                kind.value,
                token_address=self.token_address,
            )

    async def _submit(self, trace: OperationTrace, bundle: CallBundle) -> str:
        with _calling(SubmissionFailed):
            transaction_id = await self.backend.execute(list(bundle))
        trace.transaction_id = transaction_id
        trace.advance(OperationStage.SUBMITTED)
        logger.info(
            "%s: transaction submitted %s (%s)",
            trace.kind.value,
            transaction_id,
            self.network.transaction_url(transaction_id),
        )

        try:
            with _calling(SubmissionFailed):
                await self.backend.wait_for_transaction(transaction_id)
        except SubmissionFailed as exc:
            exc.message = f"Transaction {transaction_id} not accepted: {exc.message}"
            raise
        trace.advance(OperationStage.CONFIRMED)

        try:
            await self.reconciler.refresh()
        except StateRefreshFailed as exc:
            exc.transaction_id = transaction_id
            raise
        return transaction_id
