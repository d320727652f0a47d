"""
Validation et mise en forme des saisies (fonctions pures, sans DB ni Stripe).
Les erreurs sont des FormValidationError (ValueError) pour pouvoir être
réutilisées telles quelles dans les field_validator pydantic.
"""
import calendar
import re
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

ZIP_CODE_RE = re.compile(r"^\d{5}(-\d{4})?$")

INTERVAL_UNITS = ("day", "week", "month", "year")
MIN_BILLING_PERIOD_DAYS = 1
MAX_BILLING_PERIOD_DAYS = 1095

# Devises sans sous-unité côté Stripe (montant déjà exprimé en unités mineures)
ZERO_DECIMAL_CURRENCIES = frozenset({
    "bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga",
    "pyg", "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf",
})


class FormValidationError(ValueError):
    """Saisie invalide: la soumission est bloquée, aucun appel réseau."""


def _digits(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")


def format_phone_number(value: Optional[str]) -> str:
    """
    Formate progressivement un numéro: "555" -> "555", "5551" -> "(555) 1",
    "5551234567" -> "(555) 123-4567". Au-delà de 10 chiffres, le surplus est ignoré.
    """
    digits = _digits(value)
    if len(digits) <= 3:
        return digits
    if len(digits) <= 6:
        return f"({digits[:3]}) {digits[3:]}"
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:10]}"


def clean_phone_number(value: Optional[str]) -> str:
    """Chiffres seuls, forme stockée en base."""
    return _digits(value)


def format_card_number(value: Optional[str]) -> str:
    """Groupes de 4 chiffres (16 max); renvoie la saisie brute si moins de 4 chiffres."""
    digits = _digits(value)[:16]
    if len(digits) < 4:
        return value or ""
    return " ".join(digits[i:i + 4] for i in range(0, len(digits), 4))


def format_expiry_date(value: Optional[str]) -> str:
    digits = _digits(value)
    if len(digits) >= 2:
        return f"{digits[:2]}/{digits[2:4]}"
    return digits


def validate_zip_code(value: Optional[str]) -> str:
    if not ZIP_CODE_RE.match(value or ""):
        raise FormValidationError("Veuillez saisir un code postal valide")
    return value


def validate_address(
    street: Optional[str],
    city: Optional[str],
    state: Optional[str],
    zip_code: Optional[str],
) -> None:
    fields = [(f or "").strip() for f in (street, city, state, zip_code)]
    if any(fields) and not all(fields):
        raise FormValidationError("Renseignez tous les champs de l'adresse ou laissez-les tous vides")


def require_contact(email: Optional[str], phone: Optional[str]) -> None:
    if not (email or "").strip() and not (phone or "").strip():
        raise FormValidationError("Un email ou un numéro de téléphone est requis")


def validate_member_form(
    first_name: Optional[str],
    last_name: Optional[str],
    email: Optional[str],
    phone: Optional[str],
    street: Optional[str] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    zip_code: Optional[str] = None,
) -> None:
    """Règles du formulaire membre, dans l'ordre d'affichage: la première erreur l'emporte."""
    if not (first_name or "").strip():
        raise FormValidationError("Le prénom est requis")
    if not (last_name or "").strip():
        raise FormValidationError("Le nom est requis")
    require_contact(email, phone)
    validate_address(street, city, state, zip_code)
    if zip_code:
        validate_zip_code(zip_code)


def _add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def add_interval(start: date, unit: str, count: int) -> date:
    """
    Addition calendaire: les mois et années respectent la longueur réelle
    (31 janvier + 1 mois = 28/29 février, 29 février + 1 an = 28 février).
    """
    if unit == "day":
        return start + timedelta(days=count)
    if unit == "week":
        return start + timedelta(weeks=count)
    if unit == "month":
        return _add_months(start, count)
    if unit == "year":
        return _add_months(start, 12 * count)
    raise FormValidationError(f"Unité d'intervalle inconnue: {unit}")


BILLING_PERIOD_ERROR = "La période de facturation doit être comprise entre 1 jour et 3 ans"


def billing_period_days(unit: str, count: int, now: Optional[Union[date, datetime]] = None) -> int:
    start = now or datetime.now()
    if isinstance(start, datetime):
        start = start.date()
    try:
        end = add_interval(start, unit, count)
    except FormValidationError:
        raise
    except (OverflowError, ValueError) as e:
        # date hors de [date.min, date.max]
        raise FormValidationError(BILLING_PERIOD_ERROR) from e
    return (end - start).days


def validate_billing_period(unit: str, count: int, now: Optional[Union[date, datetime]] = None) -> int:
    """
    Vérifie que la période de facturation (depuis `now`) couvre entre 1 et 1095 jours.
    Retourne la durée en jours.
    """
    if unit not in INTERVAL_UNITS:
        raise FormValidationError(f"Unité d'intervalle inconnue: {unit}")
    days = billing_period_days(unit, int(count), now)
    if days < MIN_BILLING_PERIOD_DAYS or days > MAX_BILLING_PERIOD_DAYS:
        raise FormValidationError(BILLING_PERIOD_ERROR)
    return days


def is_zero_decimal(currency: str) -> bool:
    return (currency or "").lower() in ZERO_DECIMAL_CURRENCIES


def to_minor_units(price: Union[int, float, str, Decimal], currency: str) -> int:
    """
    Convertit un prix en unités mineures Stripe (arrondi au plus proche, demi vers le haut).
    - 19.99 USD -> 1999
    - 500 JPY -> 500
    """
    amount = Decimal(str(price))
    if not is_zero_decimal(currency):
        amount = amount * 100
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
