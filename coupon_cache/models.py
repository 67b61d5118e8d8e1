import enum
import json
from dataclasses import dataclass, field, asdict
from typing import Optional

from .exceptions import InvalidStatus

# Reserved hash field marking a partition as "checked and empty".
INVALID_COUPON_ID = -1


class CouponStatus(enum.IntEnum):
    USABLE = 1
    USED = 2
    EXPIRED = 3

    @classmethod
    def of(cls, value):
        """Accepts a CouponStatus, its integer code or its name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise InvalidStatus(value) from None
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise InvalidStatus(value) from None
        raise InvalidStatus(value)


@dataclass
class Coupon:
    """
    Denormalized copy of a user's coupon as held in the cache.

    `template` carries the template-derived rule data (discount quota, base,
    goods types...). The cache never interprets it.
    """
    id: int
    template_id: int
    user_id: Optional[int] = None
    coupon_code: Optional[str] = None
    assign_time: Optional[str] = None
    status: CouponStatus = CouponStatus.USABLE
    template: dict = field(default_factory=dict)

    def __post_init__(self):
        self.status = CouponStatus.of(self.status)

    @classmethod
    def invalid_coupon(cls):
        return cls(id=INVALID_COUPON_ID, template_id=INVALID_COUPON_ID)

    def to_payload(self):
        data = asdict(self)
        data["status"] = int(self.status)
        return json.dumps(data, sort_keys=True)

    @classmethod
    def from_payload(cls, payload):
        """Raises ValueError/KeyError/TypeError on a malformed payload."""
        data = json.loads(payload)
        if not isinstance(data, dict):
            raise ValueError("payload is not a JSON object")
        return cls(
            id=int(data["id"]),
            template_id=int(data["template_id"]),
            user_id=data.get("user_id"),
            coupon_code=data.get("coupon_code"),
            assign_time=data.get("assign_time"),
            status=CouponStatus.of(data.get("status", CouponStatus.USABLE)),
            template=data.get("template") or {},
        )
