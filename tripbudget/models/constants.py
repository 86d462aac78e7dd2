"""Currency lists and storage keys shared by the app and the widgets.

Keys must stay stable: both processes read the same shared store.
"""

from typing import List

# Currencies offered by the converter pickers and the widget configuration.
CURRENCIES: List[str] = [
    "PLN",
    "USD",
    "EUR",
    "GBP",
    "CHF",
    "JPY",
    "CZK",
    "NOK",
    "SEK",
    "CAD",
    "AUD",
    "THB",
    "HUF",
    "DKK",
]

# Shared store keys
EXPENSES_KEY = "savedExpensesList"
ARCHIVE_KEY = "archivedTrips"
TRIP_NAME_KEY = "tripName"
TRIP_BUDGET_KEY = "tripTotalBudget"
TRIP_CURRENCY_KEY = "tripBudgetCurrency"
TRIP_SECONDARY_CURRENCY_KEY = "tripSecondaryCurrency"
TRIP_START_KEY = "tripStartDate"
TRIP_END_KEY = "tripEndDate"
TRIP_BUDGET_SET_KEY = "isBudgetSet"
RATE_CACHE_RATE_KEY = "cachedRate"
RATE_CACHE_FROM_KEY = "cachedRateFrom"
RATE_CACHE_TO_KEY = "cachedRateTo"
RATE_CACHE_FETCHED_AT_KEY = "cachedRateFetchedAt"
WIDGET_AMOUNT_KEY = "widgetCustomAmount"
WIDGET_RELOAD_KEY = "widgetReloadRequestedAt"
