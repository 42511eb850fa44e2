"""Gymnasium environments for blockfall."""

from __future__ import annotations

from gymnasium.envs.registration import register

# Register the falling-block environment (one intent per step)
register(
    id="FallingBlock-20x20-v0",
    entry_point="blockfall.env.falling_block_env:FallingBlockEnv",
)

__all__ = ["FallingBlock-20x20-v0"]
