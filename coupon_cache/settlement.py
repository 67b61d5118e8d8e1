"""
Checkout settlement: applies the rule of the selected coupon template to the
goods in a cart. Rule kinds are a tagged enum dispatched through a table of
pure functions.
"""
import enum
import logging
from dataclasses import dataclass, field, replace
from typing import List

logger = logging.getLogger(__name__)

# A settled cost never goes below this amount
MIN_COST = 0.1


class RuleFlag(enum.Enum):
    MANJIAN = "manjian"   # threshold reduction: spend `base`, save `quota`
    ZHEKOU = "zhekou"     # percentage: pay `quota` percent
    LIJIAN = "lijian"     # flat reduction of `quota`


@dataclass(frozen=True)
class GoodsInfo:
    type: int
    price: float
    count: int


@dataclass(frozen=True)
class CouponAndTemplate:
    coupon_id: int
    rule: RuleFlag
    quota: float
    base: float = 0.0
    goods_types: tuple = ()


@dataclass(frozen=True)
class SettlementInfo:
    user_id: int
    goods_infos: List[GoodsInfo]
    coupon_and_templates: List[CouponAndTemplate] = field(default_factory=list)
    employ: bool = False
    cost: float = 0.0


def retain_2_decimal(value):
    return round(value, 2)


def goods_cost_sum(goods_infos):
    return sum(g.price * g.count for g in goods_infos)


def _goods_type_not_satisfied(settlement, goods_sum):
    """
    The template must cover every goods type in the cart (an empty list covers
    all). Returns the unchanged settlement
    (no coupon applied) when it doesn't, else None.
    """
    template = settlement.coupon_and_templates[0]
    cart_types = {g.type for g in settlement.goods_infos}
    if not template.goods_types or cart_types <= set(template.goods_types):
        return None
    logger.debug("%s template does not match goods types %s", template.rule.name, sorted(cart_types))
    return replace(settlement, cost=goods_sum, coupon_and_templates=[])


def _manjian(settlement, goods_sum):
    template = settlement.coupon_and_templates[0]
    if goods_sum < template.base:
        logger.debug("Goods sum %s below MANJIAN base %s", goods_sum, template.base)
        return replace(settlement, cost=goods_sum, coupon_and_templates=[])
    return replace(settlement, cost=max(retain_2_decimal(goods_sum - template.quota), MIN_COST))


def _zhekou(settlement, goods_sum):
    template = settlement.coupon_and_templates[0]
    return replace(settlement, cost=max(retain_2_decimal(goods_sum * template.quota / 100.0), MIN_COST))


def _lijian(settlement, goods_sum):
    template = settlement.coupon_and_templates[0]
    return replace(settlement, cost=max(retain_2_decimal(goods_sum - template.quota), MIN_COST))


RULE_EXECUTORS = {
    RuleFlag.MANJIAN: _manjian,
    RuleFlag.ZHEKOU: _zhekou,
    RuleFlag.LIJIAN: _lijian,
}


def compute_rule(settlement):
    """
    Computes the cost of `settlement` with its single selected coupon.
    Without a coupon the cost is the plain goods sum.
    """
    goods_sum = retain_2_decimal(goods_cost_sum(settlement.goods_infos))
    if not settlement.coupon_and_templates:
        return replace(settlement, cost=goods_sum)
    if len(settlement.coupon_and_templates) > 1:
        raise ValueError("Only one coupon per settlement is supported")

    unmatched = _goods_type_not_satisfied(settlement, goods_sum)
    if unmatched is not None:
        return unmatched

    rule = settlement.coupon_and_templates[0].rule
    result = RULE_EXECUTORS[rule](settlement, goods_sum)
    logger.debug("Use %s coupon: goods cost %s -> %s", rule.name, goods_sum, result.cost)
    return result
