"""
Currencies traded on the marketplace and the payment method they belong to.
"""
from django.db import models


class Currency(models.TextChoices):
    RUB = "RUB", "Russian Ruble"
    USD = "USD", "US Dollar"
    EUR = "EUR", "Euro"
    KZT = "KZT", "Kazakhstani Tenge"
    UAH = "UAH", "Ukrainian Hryvnia"
    TON = "TON", "Toncoin"
    STARS = "STARS", "Stars"


# Currencies a bank card can be denominated in
FIAT_CURRENCIES = (
    Currency.RUB,
    Currency.USD,
    Currency.EUR,
    Currency.KZT,
    Currency.UAH,
)

FIAT_CHOICES = [(currency.value, currency.label) for currency in FIAT_CURRENCIES]
