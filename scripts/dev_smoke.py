"""
Dev smoke script:
- Calls Flask app using test_client (no external server needed)
- GET /api/health, POST /api/notes, POST /api/notes/<id>/analyze and /search
- Writes responses to dev_health.json and dev_smoke.json (in repo root)
Note: with the default "openai" backend the analyze/search calls hit the real API using
your .env OPENAI_API_KEY. Set WRITING_ASSISTANT_AI_BACKEND=canned to stay offline.
"""

from __future__ import annotations

import json
from pathlib import Path

from writing_assistant.app import create_app
from writing_assistant.storage import MemoryStorage


def main() -> int:
    app = create_app(storage=MemoryStorage())

    root = Path(".")
    health_path = root / "dev_health.json"
    smoke_path = root / "dev_smoke.json"

    with app.test_client() as c:
        # Health
        h = c.get("/api/health")
        health_path.write_text(h.get_data(as_text=True), encoding="utf-8")

        # Add a note, then analyze and search it
        added = c.post("/api/notes", json={"content": "Voltaire and tolerance"})
        note_id = added.get_json()["note"]["id"]
        a = c.post(f"/api/notes/{note_id}/analyze")
        s = c.post(f"/api/notes/{note_id}/search")
        smoke_path.write_text(
            json.dumps({"analyze": a.get_json(), "search": s.get_json()}, indent=2),
            encoding="utf-8",
        )

        print(f"Health status: {h.status_code} -> {health_path}")
        print(f"Analyze status: {a.status_code}, search status: {s.status_code} -> {smoke_path}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
