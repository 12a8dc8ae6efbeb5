"""
SPRINGANIM - DATABASE ENGINE
============================

Async SQLite storage for spring presets and generated animations.

Key Features:
- Named spring presets (stiffness, damping, mass)
- Append-only log of generated animations
- WAL mode for concurrent reads
- Context managers for safe transactions
"""
from __future__ import annotations

import aiosqlite
import time
from pathlib import Path
from typing import List, Dict, Any, Optional
from contextlib import asynccontextmanager


class SpringDB:
    """
    Database engine for presets and animation records.

    Every call opens its own connection; aiosqlite runs SQLite on a
    background thread so the event loop never blocks.
    """

    def __init__(self, db_path: str = "data/springanim.db"):
        """
        Initialize database engine.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    async def initialize(self) -> None:
        """
        Apply schema (idempotent) and performance settings.

        Must be called before any queries.
        """
        schema_path = Path(__file__).parent / "schema.sql"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema file not found: {schema_path}")

        with open(schema_path, 'r', encoding='utf-8') as f:
            schema_sql = f.read()

        async with aiosqlite.connect(self.db_path) as db:
            await db.executescript(schema_sql)

            await db.execute("PRAGMA journal_mode=WAL")
            await db.execute("PRAGMA synchronous=NORMAL")

            await db.commit()

        print(f"[SpringDB] Initialized at {self.db_path}")

    @asynccontextmanager
    async def connection(self):
        """
        Context manager for database connections.

        Usage:
            async with db.connection() as conn:
                cursor = await conn.execute("SELECT ...")
        """
        async with aiosqlite.connect(self.db_path) as conn:
            conn.row_factory = aiosqlite.Row
            await conn.execute("PRAGMA foreign_keys=ON")
            yield conn

    # ========================================================================
    # PRESETS
    # ========================================================================

    async def get_preset(self, preset_name: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve a spring preset.

        Args:
            preset_name: Preset identifier (e.g., "wobbly")

        Returns:
            Dict with keys: preset_name, description, stiffness, damping,
            mass, is_default. None if not found.
        """
        async with self.connection() as conn:
            cursor = await conn.execute(
                """
                SELECT preset_name, description, stiffness, damping, mass, is_default
                FROM presets
                WHERE preset_name = ?
                """,
                (preset_name,)
            )
            row = await cursor.fetchone()

            if row:
                preset = dict(row)
                preset['is_default'] = bool(preset['is_default'])
                return preset
            return None

    async def list_presets(self) -> List[Dict[str, Any]]:
        """
        List all presets, default first.

        Returns:
            List of preset dicts
        """
        async with self.connection() as conn:
            cursor = await conn.execute(
                """
                SELECT preset_name, description, stiffness, damping, mass, is_default
                FROM presets
                ORDER BY is_default DESC, preset_name ASC
                """
            )
            rows = await cursor.fetchall()

            presets = []
            for row in rows:
                preset = dict(row)
                preset['is_default'] = bool(preset['is_default'])
                presets.append(preset)
            return presets

    async def upsert_preset(
        self,
        preset_name: str,
        stiffness: float,
        damping: float,
        mass: float = 1.0,
        description: str = "",
        is_default: bool = False
    ) -> None:
        """
        Create or replace a preset.

        Making a preset the default clears the flag on all others.

        Raises:
            ValueError: If stiffness/damping < 0 or mass <= 0
        """
        if stiffness < 0 or damping < 0:
            raise ValueError("stiffness and damping must be >= 0")
        if mass <= 0:
            raise ValueError(f"mass must be > 0, got {mass}")

        async with self.connection() as conn:
            if is_default:
                await conn.execute("UPDATE presets SET is_default = 0")

            await conn.execute(
                """
                INSERT INTO presets (preset_name, description, stiffness, damping, mass, is_default, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(preset_name) DO UPDATE SET
                    description = excluded.description,
                    stiffness = excluded.stiffness,
                    damping = excluded.damping,
                    mass = excluded.mass,
                    is_default = excluded.is_default
                """,
                (preset_name, description, stiffness, damping, mass, int(is_default), time.time())
            )
            await conn.commit()

    # ========================================================================
    # ANIMATION LOG
    # ========================================================================

    async def log_animation(
        self,
        name: str,
        stiffness: float,
        damping: float,
        mass: float,
        frame_count: int,
        duration_ms: float,
        fps: float,
        css: str,
        preset_name: Optional[str] = None
    ) -> int:
        """
        Record a generated animation.

        Returns:
            animation_id: Auto-incremented ID

        Raises:
            aiosqlite.IntegrityError: If the name is already taken
        """
        async with self.connection() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO animations (
                    name, preset_name, stiffness, damping, mass,
                    frame_count, duration_ms, fps, css, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    name,
                    preset_name,
                    stiffness,
                    damping,
                    mass,
                    frame_count,
                    duration_ms,
                    fps,
                    css,
                    time.time()
                )
            )
            await conn.commit()
            return cursor.lastrowid

    async def get_animation(self, name: str) -> Optional[Dict[str, Any]]:
        """Retrieve a logged animation by name (None if unknown)."""
        async with self.connection() as conn:
            cursor = await conn.execute(
                """
                SELECT animation_id, name, preset_name, stiffness, damping, mass,
                       frame_count, duration_ms, fps, css, created_at
                FROM animations
                WHERE name = ?
                """,
                (name,)
            )
            row = await cursor.fetchone()
            return dict(row) if row else None

    async def animation_name_exists(self, name: str) -> bool:
        async with self.connection() as conn:
            cursor = await conn.execute(
                "SELECT 1 FROM animations WHERE name = ?",
                (name,)
            )
            return await cursor.fetchone() is not None

    # ========================================================================
    # UTILITIES
    # ========================================================================

    async def get_stats(self) -> Dict[str, Any]:
        """
        Get database statistics.

        Returns:
            Dict with row counts and file size
        """
        async with self.connection() as conn:
            stats: Dict[str, Any] = {}

            for table in ['presets', 'animations']:
                cursor = await conn.execute(f"SELECT COUNT(*) FROM {table}")
                count = await cursor.fetchone()
                stats[table] = count[0]

            stats['db_size_mb'] = self.db_path.stat().st_size / (1024 * 1024) if self.db_path.exists() else 0

            return stats

    async def vacuum(self) -> None:
        """Reclaim space and refresh query planner statistics."""
        async with self.connection() as conn:
            await conn.execute("VACUUM")
            await conn.execute("ANALYZE")
            await conn.commit()

        print("[SpringDB] Database optimized (VACUUM + ANALYZE)")


# ============================================================================
# SINGLETON INSTANCE
# ============================================================================

_db_instance: Optional[SpringDB] = None


async def get_db(db_path: str = "data/springanim.db") -> SpringDB:
    """
    Get or create database instance (singleton pattern).

    Usage:
        db = await get_db()
        preset = await db.get_preset("wobbly")
    """
    global _db_instance

    if _db_instance is None:
        _db_instance = SpringDB(db_path)
        await _db_instance.initialize()

    return _db_instance


async def close_db() -> None:
    """Forget the singleton (call on shutdown)."""
    global _db_instance
    _db_instance = None
    print("[SpringDB] Connection closed")
