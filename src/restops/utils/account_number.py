"""Bank account number normalisation and matching."""

import re
from typing import Iterable, Optional

from restops.domain.entities import BankAccount

_NON_DIGITS = re.compile(r"\D")
_WHITESPACE = re.compile(r"\s+")

IBAN_SUFFIX_LENGTH = 10


def normalize_account_number(value: Optional[str]) -> str:
    """Keep only digits and drop leading zeros."""
    if value is None:
        return ""
    return _NON_DIGITS.sub("", str(value)).lstrip("0")


def compact(value: Optional[str]) -> str:
    """Remove all whitespace from an IBAN or account number."""
    if value is None:
        return ""
    return _WHITESPACE.sub("", str(value))


class AccountMatcher:
    """Match statement account numbers against the chart of bank accounts.

    Every account is indexed by its IBAN without spaces and, for IBANs longer
    than ten characters, by the last ten characters, which is the local
    account number most banks print on statements.
    """

    def __init__(self, accounts: Iterable[BankAccount]):
        self._index: dict[str, int] = {}
        for account in accounts:
            iban = compact(account.iban)
            if not iban:
                continue
            self._index[iban] = account.id
            if len(iban) > IBAN_SUFFIX_LENGTH:
                self._index[iban[-IBAN_SUFFIX_LENGTH:]] = account.id

    def __len__(self) -> int:
        return len(self._index)

    def match(self, account_number: Optional[str]) -> Optional[int]:
        """Return the matching bank account ID, or None.

        Tries the digit-normalised number, then the number without spaces,
        then containment in either direction. An empty number never matches.
        """
        normalized = normalize_account_number(account_number)
        compacted = compact(account_number)
        if not normalized and not compacted:
            return None

        for candidate in (normalized, compacted):
            if candidate and candidate in self._index:
                return self._index[candidate]

        for key, account_id in self._index.items():
            for candidate in (normalized, compacted):
                if candidate and (candidate in key or key in candidate):
                    return account_id
        return None
