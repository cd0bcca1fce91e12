"""
Create weather_cache table.

One row per location id ("lat,lon" or municipality code) holding the
canonical weather document as JSON. Staleness is checked against updated_at
at read time.
"""

from yoyo import step

steps = [
    step(
        """
        CREATE TABLE IF NOT EXISTS weather_cache (
            location_id TEXT PRIMARY KEY,
            data TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """,
        "DROP TABLE IF EXISTS weather_cache",
    ),
    step(
        """
        CREATE INDEX IF NOT EXISTS idx_weather_cache_updated_at
        ON weather_cache(updated_at)
        """,
        "DROP INDEX IF EXISTS idx_weather_cache_updated_at",
    ),
]
