from __future__ import annotations

BASE_URL = "https://api.example.com"
