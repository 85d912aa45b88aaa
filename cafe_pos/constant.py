"""Editable static business data: tables, tax, extras, seed menu and staff."""

from __future__ import annotations

TABLE_COUNT = 15

GST_RATE_BY_PAYMENT_METHOD: dict[str, float] = {
    "cash": 0.16,
    "card": 0.05,
}

# Minor currency units per extra, regardless of item or size.
EXTRA_PRICE = 350

AVAILABLE_EXTRAS: list[str] = ["Espresso Shot", "Flavour Syrup", "Whipped Cream"]

CURRENCY_PREFIX = "Rs."

ORDER_NUMBER_PREFIX = "GJC"

SESSION_TTL_SECONDS = 24 * 60 * 60

COMPLETED_ORDER_LIMIT = 1000

ALL_CATEGORY = "All"

RECEIPT_TITLE = "GLORIA JEAN'S COFFEES"
RECEIPT_SUBTITLE = "Point of Sale"
RECEIPT_FOOTER = ["Thank you for visiting!", "Gloria Jean's Coffees POS"]
RECEIPT_WIDTH = 32

# Demo convenience logins; not a security boundary.
QUICK_LOGIN_STAFF: dict[str, dict[str, str]] = {
    "admin": {
        "id": "00000000-0000-0000-0000-000000000001",
        "email": "admin@gloriapos.com",
        "password": "7890",
    },
    "cashier": {
        "id": "00000000-0000-0000-0000-000000000002",
        "email": "cashier@gloriapos.com",
        "password": "1111",
    },
}

# Seed menu used when the remote store is not configured or unreachable.
MENU_SEED: list[dict[str, object]] = [
    {
        "id": "cappuccino",
        "name": "Cappuccino",
        "category": "Hot Coffee",
        "sizes": ["Regular", "Large"],
        "prices": {"Regular": 795, "Large": 950},
    },
    {
        "id": "caffe_latte",
        "name": "Caffé Latté",
        "category": "Hot Coffee",
        "sizes": ["Regular", "Large"],
        "prices": {"Regular": 795, "Large": 950},
    },
    {
        "id": "caramel_latte",
        "name": "Caramel Latté",
        "category": "Hot Coffee",
        "sizes": ["Regular", "Large"],
        "prices": {"Regular": 895, "Large": 1050},
    },
    {
        "id": "mocha",
        "name": "Mocha",
        "category": "Hot Coffee",
        "sizes": ["Regular", "Large"],
        "prices": {"Regular": 895, "Large": 1050},
    },
    {
        "id": "americano",
        "name": "Americano",
        "category": "Hot Coffee",
        "sizes": ["Regular", "Large"],
        "prices": {"Regular": 650, "Large": 750},
    },
    {
        "id": "espresso",
        "name": "Espresso",
        "category": "Hot Coffee",
        "sizes": ["Single", "Double"],
        "prices": {"Single": 450, "Double": 600},
    },
    {
        "id": "iced_latte",
        "name": "Iced Latté",
        "category": "Iced Coffee",
        "sizes": ["Regular", "Large"],
        "prices": {"Regular": 850, "Large": 995},
    },
    {
        "id": "iced_mocha",
        "name": "Iced Mocha",
        "category": "Iced Coffee",
        "sizes": ["Regular", "Large"],
        "prices": {"Regular": 925, "Large": 1075},
    },
    {
        "id": "mocha_chiller",
        "name": "Mocha Chiller",
        "category": "Chillers",
        "sizes": ["Regular", "Large"],
        "prices": {"Regular": 1095, "Large": 1250},
    },
    {
        "id": "caramel_chiller",
        "name": "Caramel Chiller",
        "category": "Chillers",
        "sizes": ["Regular", "Large"],
        "prices": {"Regular": 1095, "Large": 1250},
    },
    {
        "id": "chai_latte",
        "name": "Chai Latté",
        "category": "Tea",
        "sizes": ["Regular", "Large"],
        "prices": {"Regular": 750, "Large": 895},
    },
    {
        "id": "english_breakfast",
        "name": "English Breakfast Tea",
        "category": "Tea",
        "sizes": ["Regular"],
        "prices": {"Regular": 550},
    },
    {
        "id": "blueberry_muffin",
        "name": "Blueberry Muffin",
        "category": "Bakery",
        "sizes": ["Each"],
        "prices": {"Each": 495},
        "description": "Baked fresh every morning.",
    },
    {
        "id": "chocolate_croissant",
        "name": "Chocolate Croissant",
        "category": "Bakery",
        "sizes": ["Each"],
        "prices": {"Each": 550},
    },
]
