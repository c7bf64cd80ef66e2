"""
Till (cash register) sessions: opening, reconciliation and closing.

The reconciliation summary is never stored. It is rebuilt from the orders
linked to a session every time it is requested (close preview, close
confirmation and history detail).
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload

from balcao.constants import (
    NON_LINKABLE_STATUSES,
    ChannelLabel,
    OrderStatus,
    PaymentBucket,
    PaymentLabel,
)
from balcao.datetime_utils import utcnow
from balcao.db import get_session
from balcao.errors import ConflictError, NotFoundError, RetrievalError, WriteError
from balcao.logging_config import LoggerAdapter, get_logger
from balcao.models import Order, TillSession
from balcao.validation import parse_amount

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProductTally:
    name: str
    quantity: int


@dataclass(frozen=True)
class PaymentTotal:
    method: str
    total: float


@dataclass(frozen=True)
class ChannelCount:
    source: str
    count: int


@dataclass(frozen=True)
class ReconciliationSummary:
    register_id: int
    products_sold: list[ProductTally]
    payment_method_totals: list[PaymentTotal]
    total_sales: float
    initial_amount: float
    loyalty_orders_count: int
    opened_at: datetime
    closed_at: datetime | None
    final_amount: float | None
    orders_by_source: list[ChannelCount]

    @property
    def is_open(self) -> bool:
        return self.closed_at is None

    @property
    def estimated_final_amount(self) -> float:
        """Opening amount plus sales. Display only, never persisted."""
        return self.initial_amount + self.total_sales

    def to_dict(self) -> dict[str, Any]:
        return {
            "register_id": self.register_id,
            "products_sold": [{"name": p.name, "quantity": p.quantity} for p in self.products_sold],
            "payment_method_totals": [
                {"method": p.method, "total": p.total} for p in self.payment_method_totals
            ],
            "total_sales": self.total_sales,
            "initial_amount": self.initial_amount,
            "loyalty_orders_count": self.loyalty_orders_count,
            "opened_at": self.opened_at.isoformat() if self.opened_at else None,
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
            "final_amount": self.final_amount,
            "estimated_final_amount": self.estimated_final_amount,
            "is_open": self.is_open,
            "orders_by_source": [
                {"source": c.source, "count": c.count} for c in self.orders_by_source
            ],
        }


def summarize_orders(till: TillSession, orders: Iterable[Order]) -> ReconciliationSummary:
    """
    Aggregate the orders of a till session.

    Cancelled orders are skipped entirely. Every other order adds to the grand
    total; its payment label decides at most one monetary bucket and,
    independently, whether it counts as a loyalty redemption.
    """
    channel_counts: Counter[ChannelLabel] = Counter()
    bucket_totals = {bucket: 0.0 for bucket in PaymentBucket}
    products: Counter[str] = Counter()
    loyalty_orders = 0
    total_sales = 0.0

    for order in orders:
        if order.is_cancelled:
            continue

        channel_counts[ChannelLabel.parse(order.source)] += 1

        order_total = float(order.total or 0)
        total_sales += order_total

        payment = PaymentLabel.parse(order.payment_method)
        if payment.is_loyalty:
            loyalty_orders += 1
        if order_total > 0 and payment.bucket is not None:
            bucket_totals[payment.bucket] += order_total

        for item in order.items:
            products[item.display_name] += item.quantity

    # Counter keeps first-seen insertion order
    return ReconciliationSummary(
        register_id=till.id,
        products_sold=[ProductTally(name, qty) for name, qty in products.items()],
        payment_method_totals=[
            PaymentTotal(bucket.display_name, value)
            for bucket, value in bucket_totals.items()
            if value > 0
        ],
        total_sales=total_sales,
        initial_amount=float(till.initial_amount or 0),
        loyalty_orders_count=loyalty_orders,
        opened_at=till.opened_at,
        closed_at=till.closed_at,
        final_amount=None if till.final_amount is None else float(till.final_amount),
        orders_by_source=[
            ChannelCount(label.display_name, count) for label, count in channel_counts.items()
        ],
    )


def _load_till(db, register_id: int, store_id: int | None) -> TillSession:
    till = db.get(TillSession, register_id)
    if till is None or (store_id is not None and till.store_id != store_id):
        raise NotFoundError("Caixa não encontrado")
    return till


def compute_summary(register_id: int, store_id: int | None = None) -> ReconciliationSummary:
    """
    Build the reconciliation summary of an open or closed till.

    Raises:
        NotFoundError: unknown till (or it belongs to another store)
        RetrievalError: the orders could not be loaded; no partial summary
    """
    try:
        with get_session() as db:
            till = _load_till(db, register_id, store_id)
            orders = (
                db.execute(
                    select(Order)
                    .options(selectinload(Order.items))
                    .where(Order.cash_register_id == register_id)
                    .order_by(Order.created_at, Order.id)
                )
                .scalars()
                .all()
            )
            return summarize_orders(till, orders)
    except SQLAlchemyError as exc:
        logger.error("Error loading orders for till %s: %s", register_id, exc)
        raise RetrievalError("Erro ao carregar pedidos do caixa") from exc


def get_session_detail(store_id: int, register_id: int) -> ReconciliationSummary:
    """History detail view; the same aggregation as the close preview."""
    return compute_summary(register_id, store_id)


def get_open_session(store_id: int) -> TillSession | None:
    """Newest till of the store that has not been closed yet."""
    try:
        with get_session() as db:
            return db.execute(
                select(TillSession)
                .where(TillSession.store_id == store_id, TillSession.closed_at.is_(None))
                .order_by(TillSession.opened_at.desc())
                .limit(1)
            ).scalar_one_or_none()
    except SQLAlchemyError as exc:
        logger.error("Error loading open till for store %s: %s", store_id, exc)
        raise RetrievalError("Erro ao carregar o caixa") from exc


def list_history(store_id: int) -> list[TillSession]:
    try:
        with get_session() as db:
            return list(
                db.execute(
                    select(TillSession)
                    .where(TillSession.store_id == store_id)
                    .order_by(TillSession.opened_at.desc())
                ).scalars()
            )
    except SQLAlchemyError as exc:
        logger.error("Error loading till history for store %s: %s", store_id, exc)
        raise RetrievalError("Erro ao carregar histórico de caixas") from exc


def open_session(store_id: int, initial_amount, opened_by: str | None = None) -> TillSession:
    """
    Open a till with the given opening cash amount.

    Checking that no other till is open is the caller's job (see
    `get_open_session`).
    """
    amount = parse_amount(initial_amount, "valor inicial")
    till = TillSession(
        store_id=store_id,
        opened_by=opened_by,
        opened_at=utcnow(),
        closed_at=None,
        initial_amount=amount,
        final_amount=None,
    )
    try:
        with get_session() as db:
            db.add(till)
            db.flush()
    except SQLAlchemyError as exc:
        logger.error("Error opening till for store %s: %s", store_id, exc)
        raise WriteError("Erro ao abrir caixa") from exc

    logger.info("Till %s opened for store %s with %.2f", till.id, store_id, amount)
    return till


def list_linkable_orders(store_id: int) -> list[Order]:
    """Reservations not yet attached to any till and not finished."""
    try:
        with get_session() as db:
            return list(
                db.execute(
                    select(Order)
                    .options(joinedload(Order.customer))
                    .where(
                        Order.store_id == store_id,
                        Order.cash_register_id.is_(None),
                        Order.status.not_in(NON_LINKABLE_STATUSES),
                    )
                    .order_by(Order.created_at.desc(), Order.id.desc())
                ).scalars()
            )
    except SQLAlchemyError as exc:
        logger.error("Error loading reservations for store %s: %s", store_id, exc)
        raise RetrievalError("Erro ao carregar reservas") from exc


def link_orders(store_id: int, register_id: int, order_ids: list[int]) -> int:
    """
    Attach the selected reservations to a till in one batch update.

    An empty selection means the operator declined; nothing is written. Orders
    already attached to a till, delivered or cancelled are left untouched.
    """
    if not order_ids:
        return 0

    try:
        with get_session() as db:
            till = _load_till(db, register_id, store_id)
            if not till.is_open:
                raise ConflictError("O caixa já está fechado")
            result = db.execute(
                update(Order)
                .where(
                    Order.id.in_(order_ids),
                    Order.store_id == store_id,
                    Order.cash_register_id.is_(None),
                    Order.status.not_in(NON_LINKABLE_STATUSES),
                )
                .values(cash_register_id=register_id)
            )
            linked = result.rowcount or 0
    except SQLAlchemyError as exc:
        logger.error("Error linking reservations to till %s: %s", register_id, exc)
        raise WriteError("Erro ao associar reservas") from exc

    logger.info("Linked %s reservation(s) to till %s", linked, register_id)
    return linked


STEP_OK = "ok"
STEP_FAILED = "failed"
STEP_SKIPPED = "skipped"


@dataclass
class StepOutcome:
    name: str
    status: str
    detail: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "status": self.status, "detail": self.detail}


@dataclass
class ClosePipelineResult:
    register_id: int
    summary: ReconciliationSummary
    steps: list[StepOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(step.status == STEP_OK for step in self.steps)

    def to_dict(self) -> dict[str, Any]:
        return {
            "register_id": self.register_id,
            "ok": self.ok,
            "steps": [step.to_dict() for step in self.steps],
            "summary": self.summary.to_dict(),
        }


class ClosePipeline:
    """
    Ordered close effects, each committed on its own.

    There is no rollback: when a step fails the earlier ones stay applied and
    the remaining ones are reported as skipped.
    """

    def __init__(self, summary: ReconciliationSummary):
        self.summary = summary
        self.register_id = summary.register_id
        self.closed_at: datetime | None = None
        self.order_ids: list[int] = []
        self.log = LoggerAdapter(logger, {"register_id": self.register_id})

    @property
    def steps(self) -> list[tuple[str, Callable[[], str | None]]]:
        return [
            ("close_register", self._close_register),
            ("collect_orders", self._collect_orders),
            ("mark_delivered", self._mark_delivered),
        ]

    def run(self) -> ClosePipelineResult:
        outcomes: list[StepOutcome] = []
        failed = False
        for name, step in self.steps:
            if failed:
                outcomes.append(StepOutcome(name, STEP_SKIPPED))
                continue
            try:
                detail = step()
            except (SQLAlchemyError, ConflictError) as exc:
                self.log.error("Close step %s failed for till %s: %s", name, self.register_id, exc)
                outcomes.append(StepOutcome(name, STEP_FAILED, str(exc)))
                failed = True
                continue
            outcomes.append(StepOutcome(name, STEP_OK, detail))

        summary = self.summary
        if self.closed_at is not None:
            summary = replace(summary, closed_at=self.closed_at, final_amount=summary.total_sales)
        return ClosePipelineResult(self.register_id, summary, outcomes)

    def _close_register(self) -> str | None:
        closed_at = utcnow()
        with get_session() as db:
            # The persisted closing amount is the sales total alone; the opening
            # amount is reported separately.
            result = db.execute(
                update(TillSession)
                .where(TillSession.id == self.register_id, TillSession.closed_at.is_(None))
                .values(closed_at=closed_at, final_amount=self.summary.total_sales)
            )
            if not result.rowcount:
                raise ConflictError("O caixa já está fechado")
        self.closed_at = closed_at
        return None

    def _collect_orders(self) -> str | None:
        with get_session() as db:
            self.order_ids = list(
                db.execute(
                    select(Order.id).where(
                        Order.cash_register_id == self.register_id,
                        Order.status != OrderStatus.CANCELLED.value,
                    )
                ).scalars()
            )
        return f"{len(self.order_ids)} pedido(s)"

    def _mark_delivered(self) -> str | None:
        if not self.order_ids:
            return "nenhum pedido"
        with get_session() as db:
            db.execute(
                update(Order)
                .where(Order.id.in_(self.order_ids))
                .values(status=OrderStatus.DELIVERED.value)
            )
        return f"{len(self.order_ids)} pedido(s) entregues"


def close_session(store_id: int, register_id: int) -> ClosePipelineResult:
    """
    Close an open till.

    The summary is computed first so the closing amount is known; then the
    close pipeline runs. Inspect `ClosePipelineResult.ok` and its steps for
    partial failures.
    """
    try:
        with get_session() as db:
            till = _load_till(db, register_id, store_id)
            is_open = till.is_open
    except SQLAlchemyError as exc:
        logger.error("Error loading till %s: %s", register_id, exc)
        raise RetrievalError("Erro ao carregar o caixa") from exc

    if not is_open:
        raise ConflictError("O caixa já está fechado")

    summary = compute_summary(register_id, store_id)
    result = ClosePipeline(summary).run()
    if result.ok:
        logger.info(
            "Till %s closed with total %.2f (%s)",
            register_id,
            summary.total_sales,
            result.steps[-1].detail,
        )
    else:
        logger.warning("Till %s close finished with failed steps", register_id)
    return result
