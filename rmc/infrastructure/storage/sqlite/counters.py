"""
Sequential human-readable codes (RM001, RES001, ...).

Counters live in ``app_counters`` and are advanced inside the caller's
transaction, so a rolled back insert does not consume a number.
"""

import aiosqlite

RAW_MATERIAL_COUNTER = "raw_material"
RECIPE_COUNTER = "recipe"


async def next_code(conn: aiosqlite.Connection, counter: str, prefix: str) -> str:
    """Advance ``counter`` and format it as ``{prefix}{n:03d}``."""
    await conn.execute(
        """
        INSERT INTO app_counters (name, value) VALUES (?, 1)
        ON CONFLICT(name) DO UPDATE SET value = value + 1
        """,
        (counter,),
    )
    cursor = await conn.execute("SELECT value FROM app_counters WHERE name = ?", (counter,))
    row = await cursor.fetchone()
    return f"{prefix}{row['value']:03d}"
