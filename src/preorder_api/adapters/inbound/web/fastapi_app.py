from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from returns.result import Result, Success

from preorder_api.core.domain.model.aggregate import OrderAggregate, StatusChange
from preorder_api.core.domain.model.bank import Bank
from preorder_api.core.domain.model.errors import (
    AlreadyFinalized,
    BankNotAssigned,
    CancellationNotAllowed,
    InvalidBank,
    InvalidProof,
    InvalidTransition,
    InvariantViolation,
    NotFound,
    OrderCoreError,
    PaymentClosed,
    TransientFailure,
    ValidationError,
)
from preorder_api.core.domain.service.fee_apportionment import FeeApportionment
from preorder_api.core.ports.inbound.get_order import (
    GetOrderQuery,
    GetOrderUseCase,
    OrderAggregateView,
)
from preorder_api.core.ports.inbound.list_banks import ListBanksUseCase
from preorder_api.core.ports.inbound.order_actions import (
    AdvanceOrderCommand,
    CancelOrderCommand,
    OrderActionsUseCase,
)
from preorder_api.core.ports.inbound.payment_actions import (
    AssignBankCommand,
    PaymentActionsUseCase,
    RetryPaymentCommand,
    SubmitProofCommand,
)
from preorder_api.core.ports.inbound.place_order import (
    PlaceOrderCommand,
    PlaceOrderLine,
    PlaceOrderUseCase,
)
from preorder_api.core.ports.inbound.verify_payment import (
    RefundPaymentCommand,
    VerificationUseCase,
    VerifyPaymentCommand,
)

logger = logging.getLogger(__name__)

# ---- HTTP DTOs (adapter layer) ---------------------------------------------


class PlaceOrderLineIn(BaseModel):
    bundle_id: str = Field(min_length=1, examples=["bundle-1"])
    bundle_name: str = Field(min_length=1, examples=["Breakfast Box"])
    store_id: str = Field(min_length=1, examples=["store-a"])
    store_name: str = Field(min_length=1, examples=["Store A"])
    unit_price: Decimal = Field(gt=0, examples=["45000"])
    quantity: int = Field(gt=0, examples=[2])


class PlaceOrderRequest(BaseModel):
    customer_id: str = Field(min_length=1, examples=["c-1"])
    lines: list[PlaceOrderLineIn] = Field(min_length=1)
    pickup_date: date | None = None
    notes: str | None = None
    bank_id: str | None = Field(None, min_length=1, examples=["bca"])


class AssignBankRequest(BaseModel):
    bank_id: str = Field(min_length=1, examples=["bca"])
    actor: str = "customer"


class SubmitProofRequest(BaseModel):
    file_ref: str = Field(examples=["proofs/2024/abc.jpg"])
    content_type: str = Field(examples=["image/jpeg"])
    size_bytes: int = Field(examples=[204800])
    actor: str = "customer"


class VerifyPaymentRequest(BaseModel):
    outcome: str = Field(examples=["PAID"])
    note: str | None = None
    actor: str = "admin"


class RefundPaymentRequest(BaseModel):
    reason: str | None = None
    actor: str = "admin"


class AdvanceOrderRequest(BaseModel):
    target: str = Field(examples=["PROCESSING"])
    actor: str = "admin"


class BankOut(BaseModel):
    bank_id: str
    name: str
    code: str
    account_number: str
    account_name: str


class OrderReceiptResponse(BaseModel):
    order_id: str
    order_number: str
    payment_id: str
    subtotal: int
    service_fee: int
    total: int
    currency: str


class OrderItemOut(BaseModel):
    bundle_id: str
    bundle_name: str
    store_id: str
    store_name: str
    quantity: int
    unit_price: int
    total_price: int


class OrderOut(BaseModel):
    order_id: str
    order_number: str
    customer_id: str
    order_status: str
    pickup_status: str
    pickup_date: date | None
    notes: str | None
    bank_id: str | None
    subtotal_amount: int
    service_fee: int
    total_amount: int
    currency: str
    created_at: datetime
    updated_at: datetime
    items: list[OrderItemOut]


class PaymentOut(BaseModel):
    payment_id: str
    status: str
    method: str
    proof_url: str | None
    bank_id: str | None
    created_at: datetime
    updated_at: datetime


class DerivedOut(BaseModel):
    can_cancel: bool
    can_assign_bank: bool
    can_upload_proof: bool
    can_retry: bool
    can_refund: bool
    payment_deadline: datetime | None
    is_overdue: bool
    time_remaining_seconds: int | None
    deadline_urgency: str | None
    should_poll: bool
    poll_interval_seconds: int | None
    status_message: str


class OrderAggregateResponse(BaseModel):
    order: OrderOut
    payment: PaymentOut
    bank: BankOut | None
    derived: DerivedOut


class StoreShareOut(BaseModel):
    store_id: str
    store_name: str
    amount: int


class FeeApportionmentResponse(BaseModel):
    store_count: int
    service_fee: int
    currency: str
    shares: list[StoreShareOut]


class HistoryEntryOut(BaseModel):
    at: datetime
    kind: str
    from_value: str | None
    to_value: str | None
    actor: str
    note: str | None


class ErrorResponse(BaseModel):
    type: str
    message: str
    detail: str | list[dict[str, Any]] | None = None


def _status_for(err: OrderCoreError) -> int:
    if isinstance(err, NotFound):
        return 404
    if isinstance(err, ValidationError):
        return 400
    if isinstance(err, (InvalidBank, InvalidProof)):
        return 422
    if isinstance(
        err,
        (
            InvalidTransition,
            CancellationNotAllowed,
            PaymentClosed,
            BankNotAssigned,
            AlreadyFinalized,
            InvariantViolation,
        ),
    ):
        return 409
    if isinstance(err, TransientFailure):
        return 503
    return 500


def _map_error_to_http(err: OrderCoreError) -> tuple[int, ErrorResponse]:
    return _status_for(err), ErrorResponse(
        type=type(err).__name__, message=err.user_message, detail=str(err)
    )


# ---- view mapping ----------------------------------------------------------


def _bank_out(bank: Bank) -> BankOut:
    return BankOut(
        bank_id=bank.bank_id,
        name=bank.name,
        code=bank.code,
        account_number=bank.account_number,
        account_name=bank.account_name,
    )


def _aggregate_out(view: OrderAggregateView) -> OrderAggregateResponse:
    order = view.aggregate.order
    payment = view.aggregate.payment
    elig = view.eligibility
    return OrderAggregateResponse(
        order=OrderOut(
            order_id=str(order.order_id),
            order_number=order.order_number.value,
            customer_id=order.customer_id.value,
            order_status=order.order_status.value,
            pickup_status=order.pickup_status.value,
            pickup_date=order.pickup_date,
            notes=order.notes,
            bank_id=order.bank_id,
            subtotal_amount=order.subtotal_amount.amount,
            service_fee=order.service_fee.amount,
            total_amount=order.total_amount.amount,
            currency=order.total_amount.currency,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[
                OrderItemOut(
                    bundle_id=it.bundle_id,
                    bundle_name=it.bundle_name,
                    store_id=it.store.store_id,
                    store_name=it.store.name,
                    quantity=it.quantity,
                    unit_price=it.unit_price.amount,
                    total_price=it.total_price.amount,
                )
                for it in order.items
            ],
        ),
        payment=PaymentOut(
            payment_id=str(payment.payment_id),
            status=payment.status.value,
            method=payment.method.value,
            proof_url=payment.proof_url,
            bank_id=payment.bank_id,
            created_at=payment.created_at,
            updated_at=payment.updated_at,
        ),
        bank=_bank_out(view.aggregate.bank) if view.aggregate.bank else None,
        derived=DerivedOut(
            can_cancel=elig.can_cancel,
            can_assign_bank=elig.can_assign_bank,
            can_upload_proof=elig.can_upload_proof,
            can_retry=elig.can_retry,
            can_refund=elig.can_refund,
            payment_deadline=elig.payment_deadline,
            is_overdue=elig.is_overdue,
            time_remaining_seconds=(
                int(elig.time_remaining.total_seconds())
                if elig.time_remaining is not None
                else None
            ),
            deadline_urgency=(
                elig.deadline_urgency.value if elig.deadline_urgency else None
            ),
            should_poll=elig.should_poll,
            poll_interval_seconds=elig.poll_interval_seconds,
            status_message=elig.status_message,
        ),
    )


def _fees_out(fees: FeeApportionment) -> FeeApportionmentResponse:
    return FeeApportionmentResponse(
        store_count=fees.store_count,
        service_fee=fees.service_fee.amount,
        currency=fees.service_fee.currency,
        shares=[
            StoreShareOut(
                store_id=s.store.store_id,
                store_name=s.store.name,
                amount=s.amount.amount,
            )
            for s in fees.shares
        ],
    )


def _history_out(change: StatusChange) -> HistoryEntryOut:
    return HistoryEntryOut(
        at=change.at,
        kind=change.kind.value,
        from_value=change.from_value,
        to_value=change.to_value,
        actor=change.actor,
        note=change.note,
    )


_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    code: {"model": ErrorResponse} for code in (400, 404, 409, 422, 500, 503)
}


def create_app(
    place_order_uc: PlaceOrderUseCase,
    get_order_uc: GetOrderUseCase,
    payment_actions_uc: PaymentActionsUseCase,
    order_actions_uc: OrderActionsUseCase,
    verification_uc: VerificationUseCase,
    list_banks_uc: ListBanksUseCase,
) -> FastAPI:
    app = FastAPI(title="preorder_api")

    def respond(
        result: Result[OrderAggregate, OrderCoreError],
    ) -> OrderAggregateResponse:
        if isinstance(result, Success):
            return _aggregate_out(get_order_uc.describe(result.unwrap()))
        raise result.failure()

    # --- exception handlers --------------------------------------------------

    @app.exception_handler(OrderCoreError)
    async def handle_domain_error(_: Request, exc: OrderCoreError) -> JSONResponse:
        status, body = _map_error_to_http(exc)
        return JSONResponse(status_code=status, content=body.model_dump())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        body = ErrorResponse(
            type="RequestValidationError",
            message=ValidationError.user_message,
            detail=jsonable_encoder(exc.errors()),
        )
        return JSONResponse(status_code=400, content=body.model_dump())

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        body = ErrorResponse(type=type(exc).__name__, message="internal server error")
        return JSONResponse(status_code=500, content=body.model_dump())

    # --- routes --------------------------------------------------------------

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/banks", response_model=list[BankOut], responses=_ERROR_RESPONSES)
    def list_banks() -> Any:
        result = list_banks_uc.list_active_banks()
        if isinstance(result, Success):
            return [_bank_out(b) for b in result.unwrap()]
        raise result.failure()

    @app.post(
        "/orders",
        response_model=OrderReceiptResponse,
        status_code=201,
        responses=_ERROR_RESPONSES,
    )
    def place_order(req: PlaceOrderRequest, response: Response) -> Any:
        cmd = PlaceOrderCommand(
            customer_id=req.customer_id,
            pickup_date=req.pickup_date,
            notes=req.notes,
            bank_id=req.bank_id,
            lines=tuple(
                PlaceOrderLine(
                    bundle_id=ln.bundle_id,
                    bundle_name=ln.bundle_name,
                    store_id=ln.store_id,
                    store_name=ln.store_name,
                    unit_price=ln.unit_price,
                    quantity=ln.quantity,
                )
                for ln in req.lines
            ),
        )

        result = place_order_uc.place_order(cmd)

        if isinstance(result, Success):
            receipt = result.unwrap()
            order_id = str(receipt.order_id)
            response.headers["Location"] = f"/orders/{order_id}"
            return OrderReceiptResponse(
                order_id=order_id,
                order_number=receipt.order_number.value,
                payment_id=str(receipt.payment_id),
                subtotal=receipt.subtotal.amount,
                service_fee=receipt.service_fee.amount,
                total=receipt.total.amount,
                currency=receipt.total.currency,
            )

        raise result.failure()

    @app.get(
        "/orders/{order_id}",
        response_model=OrderAggregateResponse,
        responses=_ERROR_RESPONSES,
    )
    def get_order(order_id: str) -> Any:
        result = get_order_uc.get_order(GetOrderQuery(order_id=order_id))
        if isinstance(result, Success):
            return _aggregate_out(result.unwrap())
        raise result.failure()

    @app.get(
        "/orders/{order_id}/fees",
        response_model=FeeApportionmentResponse,
        responses=_ERROR_RESPONSES,
    )
    def get_fees(order_id: str) -> Any:
        result = get_order_uc.get_fees(GetOrderQuery(order_id=order_id))
        if isinstance(result, Success):
            return _fees_out(result.unwrap())
        raise result.failure()

    @app.get(
        "/orders/{order_id}/history",
        response_model=list[HistoryEntryOut],
        responses=_ERROR_RESPONSES,
    )
    def get_history(order_id: str) -> Any:
        result = get_order_uc.get_history(GetOrderQuery(order_id=order_id))
        if isinstance(result, Success):
            return [_history_out(c) for c in result.unwrap()]
        raise result.failure()

    @app.post(
        "/orders/{order_id}/bank",
        response_model=OrderAggregateResponse,
        responses=_ERROR_RESPONSES,
    )
    def assign_bank(order_id: str, req: AssignBankRequest) -> Any:
        return respond(
            payment_actions_uc.assign_bank(
                AssignBankCommand(
                    order_id=order_id, bank_id=req.bank_id, actor=req.actor
                )
            )
        )

    @app.post(
        "/orders/{order_id}/cancel",
        response_model=OrderAggregateResponse,
        responses=_ERROR_RESPONSES,
    )
    def cancel_order(order_id: str) -> Any:
        return respond(order_actions_uc.cancel_order(CancelOrderCommand(order_id)))

    @app.post(
        "/orders/{order_id}/status",
        response_model=OrderAggregateResponse,
        responses=_ERROR_RESPONSES,
    )
    def advance_order(order_id: str, req: AdvanceOrderRequest) -> Any:
        return respond(
            order_actions_uc.advance_order(
                AdvanceOrderCommand(
                    order_id=order_id, target=req.target, actor=req.actor
                )
            )
        )

    @app.post(
        "/payments/{payment_id}/proof",
        response_model=OrderAggregateResponse,
        responses=_ERROR_RESPONSES,
    )
    def submit_proof(payment_id: str, req: SubmitProofRequest) -> Any:
        return respond(
            payment_actions_uc.submit_proof(
                SubmitProofCommand(
                    payment_id=payment_id,
                    file_ref=req.file_ref,
                    content_type=req.content_type,
                    size_bytes=req.size_bytes,
                    actor=req.actor,
                )
            )
        )

    @app.post(
        "/payments/{payment_id}/retry",
        response_model=OrderAggregateResponse,
        responses=_ERROR_RESPONSES,
    )
    def retry_payment(payment_id: str) -> Any:
        return respond(
            payment_actions_uc.retry_payment(RetryPaymentCommand(payment_id))
        )

    @app.post(
        "/payments/{payment_id}/verify",
        response_model=OrderAggregateResponse,
        responses=_ERROR_RESPONSES,
    )
    def verify_payment(payment_id: str, req: VerifyPaymentRequest) -> Any:
        return respond(
            verification_uc.verify_payment(
                VerifyPaymentCommand(
                    payment_id=payment_id,
                    outcome=req.outcome,
                    actor=req.actor,
                    note=req.note,
                )
            )
        )

    @app.post(
        "/payments/{payment_id}/refund",
        response_model=OrderAggregateResponse,
        responses=_ERROR_RESPONSES,
    )
    def refund_payment(payment_id: str, req: RefundPaymentRequest) -> Any:
        return respond(
            verification_uc.refund_payment(
                RefundPaymentCommand(
                    payment_id=payment_id, actor=req.actor, reason=req.reason
                )
            )
        )

    return app
