"""
Pricing service: active price resolution, report price calculation and
administration of settlement/container pricing rules.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, NamedTuple, Optional, Tuple, Union
from sqlalchemy.exc import IntegrityError, MultipleResultsFound, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from greenwaste.core.config import settings
from greenwaste.core.exceptions import (
    AmbiguousPricingError,
    ConflictError,
    InvalidVolumeError,
    NotFoundError,
    PricingNotFoundError,
    UpstreamError,
)
from greenwaste.core.utils import round_money
from greenwaste.models.container_type import ContainerType
from greenwaste.models.pricing import SettlementTankPricing
from greenwaste.models.settlement import Settlement
from greenwaste.schemas.pricing import PricingCreate, PricingUpdate

logger = logging.getLogger(__name__)


class ActivePrice(NamedTuple):
    """Resolved pricing rule with its container type and per-m³ rate."""
    pricing: SettlementTankPricing
    container_type: ContainerType
    unit_price: Decimal


@dataclass
class PriceCalculation:
    unit_price: Decimal
    total_price: Decimal
    currency: str
    pricing_id: str


def _active_pricing_query(settlement_id: str, container_type_id: str, db: Session):
    return db.query(SettlementTankPricing).filter(
        SettlementTankPricing.settlement_id == settlement_id,
        SettlementTankPricing.container_type_id == container_type_id,
        SettlementTankPricing.is_active.is_(True)
    )


def resolve_active_price(
    settlement_id: str,
    container_type_id: str,
    db: Session,
    strict: Optional[bool] = None
) -> ActivePrice:
    """
    Resolve the active price for a settlement and container type.

    If several active rows exist for the pair, the most recently created one
    wins (ties on ``created_at`` go to the highest id) and a warning is
    logged. With ``strict`` (default from ``PRICING_STRICT_UNIQUENESS``) the
    duplicate is reported as AmbiguousPricingError instead.

    Raises:
        PricingNotFoundError: no active pricing is configured for the pair
        AmbiguousPricingError: more than one active row in strict mode
        UpstreamError: the database query failed
    """
    if strict is None:
        strict = settings.PRICING_STRICT_UNIQUENESS

    query = _active_pricing_query(settlement_id, container_type_id, db).options(
        joinedload(SettlementTankPricing.container_type)
    )

    try:
        if strict:
            pricing = query.one_or_none()
        else:
            candidates = query.order_by(
                SettlementTankPricing.created_at.desc(),
                SettlementTankPricing.id.desc()
            ).limit(2).all()
            if len(candidates) > 1:
                logger.warning(
                    f"Multiple active prices for settlement={settlement_id} "
                    f"container_type={container_type_id}: using {candidates[0].id}, "
                    f"also active: {candidates[1].id}"
                )
            pricing = candidates[0] if candidates else None
    except MultipleResultsFound:
        logger.error(
            f"Ambiguous active pricing for settlement={settlement_id} "
            f"container_type={container_type_id}"
        )
        raise AmbiguousPricingError()
    except SQLAlchemyError as e:
        logger.error(f"Pricing lookup failed: {e}", exc_info=True)
        raise UpstreamError("שגיאה בחיפוש תמחור")

    if not pricing or not pricing.container_type:
        raise PricingNotFoundError()

    container_type = pricing.container_type
    size = Decimal(container_type.size)
    if size <= 0:
        logger.error(f"Container type {container_type.id} has non-positive size {size}")
        raise PricingNotFoundError()

    unit_price = Decimal(pricing.price) / size
    return ActivePrice(pricing=pricing, container_type=container_type, unit_price=unit_price)


def calculate_total_price(
    settlement_id: str,
    container_type_id: str,
    volume: Union[Decimal, float, int],
    db: Session
) -> PriceCalculation:
    """
    Calculate the cost of a pickup: ``volume * unit_price`` rounded to 2 places
    (half away from zero).

    Resolver errors propagate unchanged.
    """
    if not isinstance(volume, Decimal):
        volume = Decimal(str(volume))
    if volume <= 0:
        raise InvalidVolumeError()

    active = resolve_active_price(settlement_id, container_type_id, db)
    total_price = round_money(volume * active.unit_price)

    return PriceCalculation(
        unit_price=active.unit_price,
        total_price=total_price,
        currency=active.pricing.currency,
        pricing_id=active.pricing.id
    )


def get_settlement_pricing(settlement_id: str, db: Session) -> List[SettlementTankPricing]:
    """All active pricing rules of a settlement, newest first."""
    return db.query(SettlementTankPricing).options(
        joinedload(SettlementTankPricing.container_type)
    ).filter(
        SettlementTankPricing.settlement_id == settlement_id,
        SettlementTankPricing.is_active.is_(True)
    ).order_by(SettlementTankPricing.created_at.desc()).all()


def get_pricing(pricing_id: str, db: Session) -> SettlementTankPricing:
    pricing = db.query(SettlementTankPricing).filter(SettlementTankPricing.id == pricing_id).first()
    if not pricing:
        raise NotFoundError("תמחור לא נמצא")
    return pricing


def list_pricing(
    db: Session,
    settlement_id: Optional[str] = None,
    container_type_id: Optional[str] = None,
    is_active: Optional[bool] = None,
    currency: Optional[str] = None,
    page: int = 1,
    limit: int = 10
) -> Tuple[List[SettlementTankPricing], int]:
    """List pricing rules with optional filters. Returns (items, total)."""
    query = db.query(SettlementTankPricing)
    if settlement_id:
        query = query.filter(SettlementTankPricing.settlement_id == settlement_id)
    if container_type_id:
        query = query.filter(SettlementTankPricing.container_type_id == container_type_id)
    if is_active is not None:
        query = query.filter(SettlementTankPricing.is_active.is_(is_active))
    if currency:
        query = query.filter(SettlementTankPricing.currency == currency.upper())

    total = query.count()
    items = query.options(
        joinedload(SettlementTankPricing.settlement),
        joinedload(SettlementTankPricing.container_type)
    ).order_by(
        SettlementTankPricing.created_at.desc()
    ).offset((page - 1) * limit).limit(limit).all()
    return items, total


def _lock_settlement(settlement_id: str, db: Session) -> Settlement:
    """
    Lock the settlement row for the rest of the transaction.

    Pricing writes for the same settlement serialize on this lock, which makes
    the active-price check and the write that follows it atomic.
    """
    settlement = db.query(Settlement).filter(
        Settlement.id == settlement_id
    ).with_for_update().first()
    if not settlement:
        db.rollback()
        raise NotFoundError("יישוב לא נמצא")
    return settlement


def _ensure_container_type(container_type_id: str, db: Session) -> ContainerType:
    container_type = db.query(ContainerType).filter(ContainerType.id == container_type_id).first()
    if not container_type:
        db.rollback()
        raise NotFoundError("סוג מכל לא נמצא")
    return container_type


def _commit(db: Session, conflict_message: Optional[str] = None):
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Pricing write rejected by database constraint: {e.orig}")
        raise ConflictError(conflict_message)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Pricing write failed: {e}", exc_info=True)
        raise UpstreamError("שגיאה בשמירת התמחור")


def create_pricing(data: PricingCreate, db: Session) -> SettlementTankPricing:
    """
    Create a pricing rule.

    An active rule for the same pair raises ConflictError unless
    ``data.supersede`` is set, in which case the existing active rule is
    deactivated in the same transaction.
    """
    _lock_settlement(data.settlement_id, db)
    _ensure_container_type(data.container_type_id, db)

    if data.is_active:
        existing = _active_pricing_query(data.settlement_id, data.container_type_id, db).all()
        if existing and not data.supersede:
            db.rollback()
            logger.info(
                f"Rejected pricing for settlement={data.settlement_id} "
                f"container_type={data.container_type_id}: active pricing {existing[0].id} exists"
            )
            raise ConflictError()
        for row in existing:
            logger.info(f"Superseding active pricing {row.id}")
            row.is_active = False

    pricing = SettlementTankPricing(
        settlement_id=data.settlement_id,
        container_type_id=data.container_type_id,
        price=data.price,
        currency=data.currency,
        is_active=data.is_active
    )
    db.add(pricing)
    _commit(db)
    db.refresh(pricing)
    return pricing


def update_pricing(pricing_id: str, data: PricingUpdate, db: Session) -> SettlementTankPricing:
    """Update a pricing rule, re-checking the single-active-price rule when needed."""
    pricing = get_pricing(pricing_id, db)
    changes = data.model_dump(exclude_unset=True)

    settlement_id = changes.get("settlement_id") or pricing.settlement_id
    container_type_id = changes.get("container_type_id") or pricing.container_type_id
    will_be_active = changes.get("is_active", pricing.is_active)
    pair_changed = (
        settlement_id != pricing.settlement_id
        or container_type_id != pricing.container_type_id
    )

    if will_be_active and (pair_changed or not pricing.is_active):
        _lock_settlement(settlement_id, db)
        if container_type_id != pricing.container_type_id:
            _ensure_container_type(container_type_id, db)
        conflict = _active_pricing_query(settlement_id, container_type_id, db).filter(
            SettlementTankPricing.id != pricing.id
        ).first()
        if conflict:
            db.rollback()
            logger.info(f"Rejected update of pricing {pricing_id}: active pricing {conflict.id} exists")
            raise ConflictError()

    for field, value in changes.items():
        if value is not None:
            setattr(pricing, field, value)

    _commit(db)
    db.refresh(pricing)
    return pricing


def delete_pricing(pricing_id: str, db: Session):
    pricing = get_pricing(pricing_id, db)
    db.delete(pricing)
    _commit(db, conflict_message="לא ניתן למחוק תמחור שמשויך לדיווחים")
