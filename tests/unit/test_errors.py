"""Tests for dx_common.errors and dx_common.response."""

from datetime import UTC, datetime

from src.dx_common.errors import (
    AppError,
    AuctionEndedError,
    AuthorizationError,
    BidTooLowError,
    DuplicateReportError,
    ItemNotFoundError,
    ItemUnavailableError,
    NotFoundError,
    NotSellerError,
    PaymentMethodUnavailableError,
    QuotaExceededError,
    SelfBidError,
    StateConflictError,
    ValidationError,
)
from src.dx_common.response import error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500
        assert err.retryable is False

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1001, message="test"), Exception)


class TestTaxonomy:
    def test_validation(self) -> None:
        err = ValidationError("Title is required")
        assert err.code == 1001
        assert err.http_status == 422
        assert err.retryable is False

    def test_payment_method_unavailable_is_validation(self) -> None:
        err = PaymentMethodUnavailableError("CARD")
        assert isinstance(err, ValidationError)
        assert err.code == 1002

    def test_authorization_family(self) -> None:
        for err in (NotSellerError("txn-1"), SelfBidError()):
            assert isinstance(err, AuthorizationError)
            assert err.http_status == 403
            assert err.retryable is False

    def test_state_conflicts_are_retryable(self) -> None:
        for err in (
            AuctionEndedError("a-1"),
            BidTooLowError(1000, 1200),
            ItemUnavailableError("i-1"),
            DuplicateReportError("i-1"),
        ):
            assert isinstance(err, StateConflictError)
            assert err.http_status == 409
            assert err.retryable is True

    def test_bid_too_low_carries_current_price(self) -> None:
        err = BidTooLowError(amount=1000, current_price=1200)
        assert err.code == 3003
        assert err.current_price == 1200
        assert "1200" in err.message

    def test_quota_exceeded_carries_next_reset(self) -> None:
        reset = datetime(2026, 11, 3, tzinfo=UTC)
        err = QuotaExceededError(limit=2, next_reset_at=reset)
        assert err.code == 4001
        assert err.http_status == 429
        assert err.next_reset_at == reset
        assert "2026-11-03" in err.message

    def test_not_found(self) -> None:
        err = ItemNotFoundError("item-1")
        assert isinstance(err, NotFoundError)
        assert err.code == 5001
        assert err.http_status == 404


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"id": "abc"})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"id": "abc"}

    def test_error_carries_retryable_flag(self) -> None:
        resp = error_response(3003, "Bid too low", retryable=True)
        assert resp.code == 3003
        assert resp.data == {"retryable": True}

    def test_error_defaults_not_retryable(self) -> None:
        assert error_response(1001, "bad").data == {"retryable": False}

    def test_serialization(self) -> None:
        d = success_response({"amount": 1500}).model_dump()
        for key in ("code", "message", "data", "timestamp", "request_id"):
            assert key in d
