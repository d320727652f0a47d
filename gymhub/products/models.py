"""Schémas du catalogue produits (corps de la fonction create-product)."""
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from gymhub.validation.forms import validate_billing_period

ProductType = Literal["membership", "service", "product"]
IntervalUnit = Literal["day", "week", "month", "year"]


class ProductCreate(BaseModel):
    """
    Corps attendu: {name, description, price, type, currency, intervalUnit?, intervalCount?, createPaymentLink?}
    - Prix récurrent si intervalUnit est fourni (intervalCount vaut 1 par défaut).
    """
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=250)
    description: str = ""
    price: float = Field(gt=0, allow_inf_nan=False)
    type: ProductType = "product"
    currency: str = "usd"
    interval_unit: Optional[IntervalUnit] = Field(default=None, alias="intervalUnit")
    interval_count: Optional[int] = Field(default=None, ge=1, alias="intervalCount")
    create_payment_link: bool = Field(default=True, alias="createPaymentLink")

    @field_validator("currency")
    @classmethod
    def currency_code(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if len(v) != 3 or not v.isalpha():
            raise ValueError("Devise invalide (code ISO à 3 lettres attendu)")
        return v

    @model_validator(mode="after")
    def billing_period(self) -> "ProductCreate":
        if self.interval_unit is None:
            if self.interval_count is not None:
                raise ValueError("intervalCount fourni sans intervalUnit")
            return self
        if self.interval_count is None:
            self.interval_count = 1
        validate_billing_period(self.interval_unit, self.interval_count)
        return self

    @property
    def is_recurring(self) -> bool:
        return self.interval_unit is not None


def first_error_message(exc: ValidationError) -> str:
    """Premier message lisible d'une ValidationError pydantic (sans le préfixe 'Value error, ')."""
    errors = exc.errors()
    if not errors:
        return "Données invalides"
    err = errors[0]
    msg = str(err.get("msg") or "Données invalides")
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    loc = [str(p) for p in err.get("loc", ()) if p != "body"]
    if loc and err.get("type") != "value_error":
        return f"{'.'.join(loc)}: {msg}"
    return msg
