"""Tests for pm_common.errors and pm_common.response."""
from decimal import Decimal

from src.pm_common.errors import (
    AppError,
    BalanceNotFoundError,
    InsufficientBalanceError,
    InsufficientSharesError,
    InvalidBalanceError,
    InvalidOrderError,
    MarketNotActiveError,
    MarketNotFoundError,
    OrderNotFoundError,
    PriceAboveMaxError,
    PriceBelowMinError,
    SlippageExceededError,
    StorageError,
)
from src.pm_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_custom_http_status(self) -> None:
        err = AppError(code=4001, message="bad", http_status=400)
        assert err.http_status == 400

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1, message="test"), Exception)


class TestSpecificErrors:
    def test_insufficient_balance(self) -> None:
        err = InsufficientBalanceError(required=Decimal("100"), available=Decimal("30"))
        assert err.code == 2001
        assert err.http_status == 400
        assert err.kind == "InsufficientBalance"
        assert "100" in err.message
        assert "30" in err.message

    def test_not_found_errors_are_404(self) -> None:
        assert MarketNotFoundError("m").http_status == 404
        assert BalanceNotFoundError("u").http_status == 404
        assert OrderNotFoundError("o").http_status == 404

    def test_business_rule_errors_are_400(self) -> None:
        errors: list[AppError] = [
            InsufficientSharesError(Decimal("1"), Decimal("0")),
            InvalidOrderError("limit order requires limit_price"),
            PriceAboveMaxError(Decimal("0.6"), Decimal("0.5")),
            PriceBelowMinError(Decimal("0.4"), Decimal("0.5")),
            SlippageExceededError(Decimal("0.5"), Decimal("0.6"), Decimal("0.05")),
            MarketNotActiveError("m"),
            InvalidBalanceError(Decimal("-1")),
        ]
        assert all(e.http_status == 400 for e in errors)

    def test_storage_error_is_500(self) -> None:
        err = StorageError()
        assert err.http_status == 500
        assert err.kind == "StorageError"

    def test_kinds_are_unique(self) -> None:
        kinds = {
            cls.kind
            for cls in (
                MarketNotFoundError, BalanceNotFoundError, InsufficientBalanceError,
                InsufficientSharesError, InvalidOrderError, PriceAboveMaxError,
                PriceBelowMinError, SlippageExceededError, StorageError,
            )
        }
        assert len(kinds) == 9

    def test_slippage_message_shows_percent(self) -> None:
        err = SlippageExceededError(Decimal("0.5"), Decimal("0.6"), Decimal("0.05"))
        assert "5.0%" in err.message


class TestApiResponse:
    def test_success_response(self) -> None:
        resp = success_response({"key": "value"})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"key": "value"}
        assert resp.error_kind is None

    def test_error_response_carries_kind(self) -> None:
        resp = error_response(4002, "too high", "PriceAboveMax")
        assert resp.code == 4002
        assert resp.data is None
        assert resp.error_kind == "PriceAboveMax"

    def test_request_id_generated(self) -> None:
        resp = ApiResponse()
        assert resp.request_id.startswith("req_")
