"""
SQL-backed ownership and value ledgers.

Both ledgers write through the shared Database, so an exchange trade that
moves currency and a token in one transaction is rolled back as a whole
when either leg fails.

Ownership rules follow the usual non-fungible token contract: duplicate
mints, unknown tokens, null recipients and unapproved operators are
rejected, single-token approvals are cleared on every transfer, and a safe
transfer refuses recipients that cannot receive tokens.
"""

import logging
from typing import Callable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tokenfactor.domain.fixed_point import checked_uint
from tokenfactor.exceptions import (
    AlreadyExists,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidRecipient,
    NotAuthorized,
    NotFound,
    TransferRejected,
)

from .database import AllowanceRow, BalanceRow, Database, OperatorApprovalRow, TokenRow

logger = logging.getLogger(__name__)


def _require_identity(identity: str | None) -> str:
    if not identity or not identity.strip():
        raise InvalidRecipient("Recipient identity must not be empty")
    return identity


class SqlOwnershipLedger:
    """
    Enumerable ownership ledger of asset tokens.

    Args:
        database: Shared database
        can_receive: Predicate telling whether an identity accepts tokens
            through ``safe_transfer``; every identity does by default
    """

    def __init__(
        self,
        database: Database,
        can_receive: Callable[[str], bool] | None = None,
    ) -> None:
        self.database = database
        self.can_receive = can_receive or (lambda identity: True)

    def _token(self, session: Session, token_id: int) -> TokenRow:
        row = session.get(TokenRow, token_id)
        if row is None:
            raise NotFound(f"Token {token_id} does not exist")
        return row

    @staticmethod
    def _next_sequence(session: Session, column) -> int:
        return (session.scalar(select(func.max(column))) or 0) + 1

    def mint(self, token_id: int, owner: str) -> None:
        """Create token ``token_id`` held by ``owner``."""
        checked_uint(token_id, "token id")
        _require_identity(owner)
        with self.database.transaction() as session:
            if session.get(TokenRow, token_id) is not None:
                raise AlreadyExists(f"Token {token_id} already minted")
            session.add(
                TokenRow(
                    token_id=token_id,
                    owner=owner,
                    approved=None,
                    mint_sequence=self._next_sequence(session, TokenRow.mint_sequence),
                    owner_sequence=self._next_sequence(session, TokenRow.owner_sequence),
                )
            )
            session.flush()
        logger.debug(f"Minted token {token_id} to {owner}")

    def exists(self, token_id: int) -> bool:
        with self.database.transaction() as session:
            return session.get(TokenRow, token_id) is not None

    def owner_of(self, token_id: int) -> str:
        with self.database.transaction() as session:
            return self._token(session, token_id).owner

    def balance_of(self, owner: str) -> int:
        _require_identity(owner)
        with self.database.transaction() as session:
            return session.scalar(select(func.count()).select_from(TokenRow).where(TokenRow.owner == owner))

    def total_supply(self) -> int:
        with self.database.transaction() as session:
            return session.scalar(select(func.count()).select_from(TokenRow))

    def token_by_index(self, index: int) -> int:
        """Token id at ``index`` in mint order."""
        with self.database.transaction() as session:
            token_id = None
            if index >= 0:
                token_id = session.scalar(
                    select(TokenRow.token_id).order_by(TokenRow.mint_sequence).offset(index).limit(1)
                )
        if token_id is None:
            raise NotFound(f"Global index {index} out of bounds")
        return token_id

    def token_of_owner_by_index(self, owner: str, index: int) -> int:
        """Token id at ``index`` among ``owner``'s tokens, in acquisition order."""
        with self.database.transaction() as session:
            token_id = None
            if index >= 0:
                token_id = session.scalar(
                    select(TokenRow.token_id)
                    .where(TokenRow.owner == owner)
                    .order_by(TokenRow.owner_sequence)
                    .offset(index)
                    .limit(1)
                )
        if token_id is None:
            raise NotFound(f"Owner index {index} out of bounds for {owner}")
        return token_id

    def approve(self, token_id: int, approved: str | None, *, caller: str) -> None:
        """Let ``approved`` move ``token_id``; ``None`` clears the approval."""
        with self.database.transaction() as session:
            row = self._token(session, token_id)
            if caller != row.owner and not self._is_operator(session, row.owner, caller):
                raise NotAuthorized(f"{caller} is not holder or operator of token {token_id}")
            if approved == row.owner:
                raise InvalidRecipient("Approval to current holder")
            row.approved = approved or None
            session.flush()

    def get_approved(self, token_id: int) -> str | None:
        with self.database.transaction() as session:
            return self._token(session, token_id).approved

    def set_approval_for_all(self, owner: str, operator: str, approved: bool) -> None:
        """Grant or revoke ``operator`` control over all of ``owner``'s tokens."""
        _require_identity(operator)
        if owner == operator:
            raise InvalidRecipient("Holder cannot approve itself as operator")
        with self.database.transaction() as session:
            row = session.get(OperatorApprovalRow, (owner, operator))
            if approved and row is None:
                session.add(OperatorApprovalRow(owner=owner, operator=operator))
            elif not approved and row is not None:
                session.delete(row)
            session.flush()

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        with self.database.transaction() as session:
            return self._is_operator(session, owner, operator)

    @staticmethod
    def _is_operator(session: Session, owner: str, operator: str) -> bool:
        return session.get(OperatorApprovalRow, (owner, operator)) is not None

    def is_approved_or_owner(self, token_id: int, spender: str) -> bool:
        """True if ``spender`` holds, is approved for, or operates ``token_id``."""
        with self.database.transaction() as session:
            row = self._token(session, token_id)
            return (
                spender == row.owner
                or spender == row.approved
                or self._is_operator(session, row.owner, spender)
            )

    def transfer(self, token_id: int, sender: str, recipient: str, *, operator: str) -> None:
        """Move ``token_id`` from ``sender`` to ``recipient`` on behalf of ``operator``."""
        _require_identity(recipient)
        with self.database.transaction() as session:
            row = self._token(session, token_id)
            if row.owner != sender:
                raise NotAuthorized(f"Token {token_id} is not held by {sender}")
            if not self.is_approved_or_owner(token_id, operator):
                raise NotAuthorized(f"{operator} is not holder or approved for token {token_id}")
            row.owner = recipient
            row.approved = None
            row.owner_sequence = self._next_sequence(session, TokenRow.owner_sequence)
            session.flush()
        logger.debug(f"Transferred token {token_id} from {sender} to {recipient}")

    def safe_transfer(self, token_id: int, sender: str, recipient: str, *, operator: str) -> None:
        """Like ``transfer`` but refuses recipients that cannot receive tokens."""
        _require_identity(recipient)
        if not self.can_receive(recipient):
            raise TransferRejected(f"{recipient} cannot receive asset tokens")
        self.transfer(token_id, sender, recipient, operator=operator)


class SqlValueLedger:
    """Fungible settlement-currency ledger with spending allowances."""

    def __init__(self, database: Database) -> None:
        self.database = database

    @staticmethod
    def _balance_row(session: Session, holder: str) -> BalanceRow:
        row = session.get(BalanceRow, holder)
        if row is None:
            row = BalanceRow(holder=holder, amount=0)
            session.add(row)
            session.flush()
        return row

    def mint(self, holder: str, amount: int) -> None:
        """Credit newly issued currency to ``holder``."""
        _require_identity(holder)
        checked_uint(amount, "mint amount")
        with self.database.transaction() as session:
            row = self._balance_row(session, holder)
            row.amount = checked_uint(row.amount + amount, "balance")
            session.flush()

    def balance_of(self, holder: str) -> int:
        with self.database.transaction() as session:
            row = session.get(BalanceRow, holder)
            return row.amount if row is not None else 0

    def approve(self, owner: str, spender: str, amount: int) -> None:
        """Set (not add to) the amount ``spender`` may move from ``owner``."""
        _require_identity(spender)
        checked_uint(amount, "allowance")
        with self.database.transaction() as session:
            row = session.get(AllowanceRow, (owner, spender))
            if row is None:
                session.add(AllowanceRow(owner=owner, spender=spender, amount=amount))
            else:
                row.amount = amount
            session.flush()

    def allowance(self, owner: str, spender: str) -> int:
        with self.database.transaction() as session:
            row = session.get(AllowanceRow, (owner, spender))
            return row.amount if row is not None else 0

    def _move(self, session: Session, sender: str, recipient: str, amount: int) -> None:
        source = self._balance_row(session, sender)
        if source.amount < amount:
            raise InsufficientBalance(
                f"{sender} holds {source.amount}, needs {amount}"
            )
        source.amount -= amount
        target = self._balance_row(session, recipient)
        target.amount = checked_uint(target.amount + amount, "balance")
        session.flush()

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        _require_identity(recipient)
        checked_uint(amount, "transfer amount")
        with self.database.transaction() as session:
            self._move(session, sender, recipient, amount)

    def transfer_from(self, owner: str, spender: str, recipient: str, amount: int) -> None:
        """
        Move ``amount`` from ``owner`` to ``recipient`` using ``spender``'s allowance.

        Allowance is checked before balance, so a short allowance is reported
        even when the balance is short too.
        """
        _require_identity(recipient)
        checked_uint(amount, "transfer amount")
        with self.database.transaction() as session:
            allowance = session.get(AllowanceRow, (owner, spender))
            allowed = allowance.amount if allowance is not None else 0
            if allowed < amount:
                raise InsufficientAllowance(
                    f"{spender} may move {allowed} from {owner}, needs {amount}"
                )
            self._move(session, owner, recipient, amount)
            if amount:
                allowance.amount = allowed - amount
            session.flush()
