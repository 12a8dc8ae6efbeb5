#!/usr/bin/env python3
"""
SPRINGANIM - CSV TO SQLITE PRESET IMPORT
========================================

Loads spring presets from a CSV file into the database, then checks that
every preset actually settles.

Usage:
    python -m springanim.scripts.seed_presets --presets presets.csv

CSV Format:
    name,stiffness,damping,mass,description
    snappy,0.8,0.12,1.0,Snappy UI spring
    floaty,0.3,0.06,,Slow and floaty
"""
from __future__ import annotations

import argparse
import asyncio
import math
import sys
import time
from pathlib import Path
from typing import Dict, List

import pandas as pd

from springanim.core.physics import SpringDidNotConverge, sample
from springanim.database.engine import SpringDB


REQUIRED_COLUMNS = {'name', 'stiffness', 'damping'}


def read_presets_csv(presets_csv: str) -> List[Dict]:
    """
    Parse and validate a presets CSV.

    Missing mass -> 1.0, missing description -> "".

    Raises:
        ValueError: Missing columns, duplicate names or out-of-range values
    """
    df = pd.read_csv(presets_csv)

    if not REQUIRED_COLUMNS.issubset(df.columns):
        raise ValueError(
            f"Missing columns in {presets_csv}. Expected: {REQUIRED_COLUMNS}, Got: {set(df.columns)}"
        )

    if 'mass' not in df.columns:
        df['mass'] = 1.0
    if 'description' not in df.columns:
        df['description'] = ''

    df['mass'] = df['mass'].fillna(1.0)
    df['description'] = df['description'].fillna('')

    duplicates = df['name'][df['name'].duplicated()].tolist()
    if duplicates:
        raise ValueError(f"Duplicate preset names: {', '.join(map(str, duplicates))}")

    presets = []
    for _, row in df.iterrows():
        stiffness = float(row['stiffness'])
        damping = float(row['damping'])
        mass = float(row['mass'])

        if not (math.isfinite(stiffness) and math.isfinite(damping) and math.isfinite(mass)):
            raise ValueError(f"Preset '{row['name']}' has non-numeric values")
        if stiffness < 0 or damping < 0 or mass <= 0:
            raise ValueError(
                f"Preset '{row['name']}' out of range "
                f"(stiffness={stiffness}, damping={damping}, mass={mass})"
            )

        presets.append({
            'preset_name': str(row['name']),
            'stiffness': stiffness,
            'damping': damping,
            'mass': mass,
            'description': str(row['description'])
        })

    return presets


async def seed_presets(db: SpringDB, presets_csv: str) -> int:
    """
    Import presets.csv -> presets table.

    Returns:
        Number of presets written
    """
    print(f"\n[1/2] Importing presets from {presets_csv}...")

    presets = read_presets_csv(presets_csv)

    for preset in presets:
        await db.upsert_preset(**preset)

    print(f"✅ Upserted {len(presets)} presets")
    return len(presets)


async def verify_presets(db: SpringDB, x: float = 100.0, max_steps: int = 10_000) -> List[str]:
    """
    Sample every stored preset from displacement x.

    Returns:
        Names of presets that do not settle within max_steps
    """
    print(f"\n[2/2] Checking that presets settle from x={x}...")

    unstable = []
    for preset in await db.list_presets():
        start = time.time()
        try:
            points = sample(x, 0.0, preset['mass'], preset['stiffness'], preset['damping'], max_steps=max_steps)
        except SpringDidNotConverge as e:
            print(f"  ⚠️  {preset['preset_name']}: {e}")
            unstable.append(preset['preset_name'])
            continue

        elapsed_ms = (time.time() - start) * 1000
        print(f"  • {preset['preset_name']}: {len(points)} frames ({elapsed_ms:.2f}ms)")

    return unstable


async def main():
    """Import workflow."""
    parser = argparse.ArgumentParser(
        description="Import spring presets from CSV into SQLite",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m springanim.scripts.seed_presets --presets presets.csv

  # Custom database
  python -m springanim.scripts.seed_presets --presets presets.csv --output custom.db
        """
    )

    parser.add_argument(
        '--presets',
        required=True,
        help='Path to presets CSV file'
    )

    parser.add_argument(
        '--output',
        default='data/springanim.db',
        help='SQLite database path (default: data/springanim.db)'
    )

    parser.add_argument(
        '--strict',
        action='store_true',
        help='Exit non-zero if any preset does not settle'
    )

    args = parser.parse_args()

    presets_path = Path(args.presets)
    if not presets_path.exists():
        print(f"❌ Error: presets file not found at {presets_path}")
        sys.exit(1)

    print("=" * 80)
    print(" SPRINGANIM - PRESET IMPORT")
    print("=" * 80)
    print(f"Input:    {presets_path}")
    print(f"Database: {args.output}")
    print("=" * 80)

    db = SpringDB(args.output)
    await db.initialize()

    try:
        await seed_presets(db, str(presets_path))
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)

    unstable = await verify_presets(db)

    stats = await db.get_stats()
    print("\nDatabase statistics:")
    for key, value in stats.items():
        print(f"  • {key}: {value}")

    if unstable:
        print(f"\n⚠️  Presets that never settle: {', '.join(unstable)}")
        if args.strict:
            sys.exit(2)
    else:
        print("\n✅ All presets settle")


if __name__ == "__main__":
    asyncio.run(main())
