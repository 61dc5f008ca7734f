"""Custom exceptions for yieldbook."""


class LedgerError(Exception):
    """Base exception for ledger consolidation errors."""


class MalformedRecordError(LedgerError):
    """Raised when an extracted record lacks a usable date or amount."""

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"Malformed record: unusable '{field}' ({value!r})")


class UnknownCurrencyError(LedgerError):
    """Raised when a currency code is not in the configured rate table."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Unknown currency: {code!r}")


class AmbiguousMatchError(LedgerError):
    """Raised when a product name fuzzily matches more than one ledger."""

    def __init__(self, product_name: str, candidate_ids: list[str]):
        self.product_name = product_name
        self.candidate_ids = candidate_ids
        super().__init__(
            f"Ambiguous match for '{product_name}': "
            f"{len(candidate_ids)} candidates ({', '.join(candidate_ids)})"
        )


class LedgerNotFoundError(LedgerError):
    """Raised when an explicit ledger id is not in the snapshot."""

    def __init__(self, ledger_id: str):
        self.ledger_id = ledger_id
        super().__init__(f"Ledger not found: {ledger_id}")


class TransactionNotFoundError(LedgerError):
    """Raised when a transaction id is not in a ledger's history."""

    def __init__(self, ledger_id: str, transaction_id: str):
        self.ledger_id = ledger_id
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found in ledger {ledger_id}")


class ExtractionError(LedgerError):
    """Raised when records cannot be extracted from a source file."""

    def __init__(self, file_path: str, message: str):
        self.file_path = file_path
        super().__init__(f"Extraction error for {file_path}: {message}")


class VisionExtractionError(ExtractionError):
    """Raised when the Claude Vision API extraction fails."""

    def __init__(self, file_path: str, message: str):
        super().__init__(file_path, f"Vision extraction failed: {message}")
