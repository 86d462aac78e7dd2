"""Smoke script for the trip budget flow.

Configures a 7 day trip, records a few THB expenses with the static provider,
prints today's budget card and the daily history, then archives the trip and
restores it again.

NOTE: This is a lightweight diagnostic and not a formal test.
"""

import json
import tempfile
from datetime import date, timedelta
from pathlib import Path

from fastapi.testclient import TestClient

from tripbudget.core.config import Settings
from tripbudget.main import create_app


def run():
    with tempfile.TemporaryDirectory() as d:
        settings = Settings(data_dir=Path(d), exchange_rate_provider="static")
        settings.init_post_load()
        client = TestClient(create_app(settings_override=settings))

        start = date.today() - timedelta(days=2)
        client.put(
            "/trip/settings",
            json={
                "name": "Bangkok",
                "total_budget": 700,
                "budget_currency": "PLN",
                "secondary_currency": "THB",
                "start_date": start.isoformat(),
                "end_date": (start + timedelta(days=6)).isoformat(),
            },
        )
        for offset, amount in ((0, 500), (1, 1500), (2, 250)):
            day = start + timedelta(days=offset)
            client.post(
                "/expenses/",
                json={
                    "amount": amount,
                    "currency": "THB",
                    "target_currency": "PLN",
                    "date": f"{day.isoformat()}T12:00:00",
                },
            )

        out = {
            "stats": client.get("/trip/stats").json(),
            "history": client.get("/trip/history").json(),
            "budget_widget": client.get("/widget/budget").json(),
        }
        finished = client.post("/trip/finish").json()
        out["archive"] = client.get("/archive/").json()
        out["restore"] = client.post(f"/archive/{finished['id']}/restore").json()
        print(json.dumps(out, indent=2))


if __name__ == "__main__":
    run()
