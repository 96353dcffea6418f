"""Seeded RNG factory for reproducible simulations.

Uses NumPy's SeedSequence → PCG64 hierarchy to guarantee:
  - Statistical independence between the seeding and per-disease streams
  - Bit-exact replay with the same master seed
  - Adding/removing diseases doesn't affect other diseases' streams
"""

from __future__ import annotations

from typing import Dict, Sequence

import numpy as np


def create_rng_hierarchy(
    master_seed: int,
    disease_ids: Sequence[int],
) -> Dict[str, np.random.Generator]:
    """Create independent RNG streams for seeding and for each disease.

    Streams created:
      - 'seeding':      Advancement offsets of seed infections
      - 'disease_<id>': Per-disease stream for immune-memory and fatality draws

    Per-disease streams are spawned at position 1 + id, so a disease's
    stream depends only on the master seed and its id.

    Args:
        master_seed: Master RNG seed (non-negative integer).
        disease_ids: Ids of the configured diseases (non-negative).

    Returns:
        Dictionary mapping stream names to numpy Generator instances.

    Example:
        >>> rngs = create_rng_hierarchy(42, disease_ids=[0, 1])
        >>> rngs['disease_1'].random()  # reproducible
    """
    ss = np.random.SeedSequence(master_seed)
    n_children = 1 + (max(disease_ids) + 1 if len(disease_ids) > 0 else 0)
    child_seeds = ss.spawn(n_children)

    rngs: Dict[str, np.random.Generator] = {
        'seeding': np.random.Generator(np.random.PCG64(child_seeds[0])),
    }
    for disease_id in disease_ids:
        rngs[f'disease_{disease_id}'] = np.random.Generator(
            np.random.PCG64(child_seeds[1 + disease_id])
        )

    return rngs


def get_disease_rng(
    rngs: Dict[str, np.random.Generator],
    disease_id: int,
) -> np.random.Generator:
    """Get the RNG stream for a specific disease.

    Raises:
        KeyError: If disease_id doesn't have a stream.
    """
    key = f'disease_{disease_id}'
    if key not in rngs:
        available = sorted(
            int(k.split('_')[1]) for k in rngs if k.startswith('disease_')
        )
        raise KeyError(
            f"No RNG stream for disease {disease_id}. "
            f"Available diseases: {available}"
        )
    return rngs[key]
