"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Validation (malformed input)
  2xxx: Authorization (wrong actor for the action)
  3xxx: State conflict (the world changed under the caller; refresh and retry)
  4xxx: Quota
  5xxx: Not found
  6xxx: Authentication
  9xxx: System
"""

from datetime import datetime


class AppError(Exception):
    """Base application error."""

    retryable: bool = False

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Validation ---

class ValidationError(AppError):
    def __init__(self, detail: str, code: int = 1001) -> None:
        super().__init__(code, detail, 422)


class PaymentMethodUnavailableError(ValidationError):
    def __init__(self, method: str) -> None:
        super().__init__(f"Payment method not available: {method}", 1002)


# --- 2xxx: Authorization ---

class AuthorizationError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 403)


class NotOwnerError(AuthorizationError):
    def __init__(self, item_id: str) -> None:
        super().__init__(2001, f"Only the seller can modify item {item_id}")


class NotSellerError(AuthorizationError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(2002, f"Only the seller can act on transaction {transaction_id}")


class SelfBidError(AuthorizationError):
    def __init__(self) -> None:
        super().__init__(2003, "You cannot bid on your own item")


class SelfPurchaseError(AuthorizationError):
    def __init__(self) -> None:
        super().__init__(2004, "You cannot buy your own item")


class SelfReportError(AuthorizationError):
    def __init__(self) -> None:
        super().__init__(2005, "You cannot report your own item")


class NotAdminError(AuthorizationError):
    def __init__(self) -> None:
        super().__init__(2006, "Admin access required")


class NotPartyError(AuthorizationError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(2007, f"Not a party to transaction {transaction_id}")


# --- 3xxx: State conflict ---

class StateConflictError(AppError):
    retryable = True

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 409)


class InvalidStateError(StateConflictError):
    def __init__(self, detail: str) -> None:
        super().__init__(3001, detail)


class AuctionEndedError(StateConflictError):
    def __init__(self, auction_id: str) -> None:
        super().__init__(3002, f"Auction has ended: {auction_id}")


class BidTooLowError(StateConflictError):
    def __init__(self, amount: int, current_price: int) -> None:
        super().__init__(
            3003,
            f"Bid must be higher than current price: bid {amount}, current {current_price}",
        )
        self.current_price = current_price


class ItemUnavailableError(StateConflictError):
    def __init__(self, item_id: str) -> None:
        super().__init__(3004, f"Item is not available: {item_id}")


class DuplicateReportError(StateConflictError):
    def __init__(self, item_id: str) -> None:
        super().__init__(3005, f"You have already reported item {item_id}")


# --- 4xxx: Quota ---

class QuotaExceededError(AppError):
    def __init__(self, limit: int, next_reset_at: datetime) -> None:
        super().__init__(
            4001,
            f"You have reached your limit of {limit} auctions this month. "
            f"Your limit will reset on {next_reset_at.date().isoformat()}.",
            429,
        )
        self.next_reset_at = next_reset_at


# --- 5xxx: Not found ---

class NotFoundError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class ItemNotFoundError(NotFoundError):
    def __init__(self, item_id: str) -> None:
        super().__init__(5001, f"Item not found: {item_id}")


class AuctionNotFoundError(NotFoundError):
    def __init__(self, auction_id: str) -> None:
        super().__init__(5002, f"Auction not found: {auction_id}")


class TransactionNotFoundError(NotFoundError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(5003, f"Transaction not found: {transaction_id}")


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str) -> None:
        super().__init__(5004, f"User not found: {user_id}")


# --- 6xxx: Authentication ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(6001, "Invalid or expired token", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(6002, "Account is disabled", 403)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
