from __future__ import annotations

from typing import Protocol


class OwnershipLedger(Protocol):
    """Port: holder <-> asset-number association (the asset tokens)."""

    def mint(self, token_id: int, owner: str) -> None: ...
    def owner_of(self, token_id: int) -> str: ...
    def exists(self, token_id: int) -> bool: ...
    def balance_of(self, owner: str) -> int: ...
    def total_supply(self) -> int: ...
    def token_by_index(self, index: int) -> int: ...
    def token_of_owner_by_index(self, owner: str, index: int) -> int: ...

    def transfer(self, token_id: int, sender: str, recipient: str, *, operator: str) -> None: ...
    def safe_transfer(self, token_id: int, sender: str, recipient: str, *, operator: str) -> None: ...

    def approve(self, token_id: int, approved: str | None, *, caller: str) -> None: ...
    def get_approved(self, token_id: int) -> str | None: ...
    def set_approval_for_all(self, owner: str, operator: str, approved: bool) -> None: ...
    def is_approved_for_all(self, owner: str, operator: str) -> bool: ...
    def is_approved_or_owner(self, token_id: int, spender: str) -> bool: ...


class ValueLedger(Protocol):
    """Port: settlement-currency balances and spending allowances."""

    def mint(self, holder: str, amount: int) -> None: ...
    def balance_of(self, holder: str) -> int: ...
    def approve(self, owner: str, spender: str, amount: int) -> None: ...
    def allowance(self, owner: str, spender: str) -> int: ...
    def transfer(self, sender: str, recipient: str, amount: int) -> None: ...
    def transfer_from(self, owner: str, spender: str, recipient: str, amount: int) -> None: ...
