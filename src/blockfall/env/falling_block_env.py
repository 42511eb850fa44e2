from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from blockfall.game import Engine, GameConfig, Intent, TileColor
from blockfall.visualization.palette import color_for_tile


class FallingBlockEnv(gym.Env):
    """One engine session per episode; one input intent per step.

    Reward is the number of rows cleared by the step. The episode terminates
    on loss and is truncated after ``max_episode_steps`` steps.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 max_episode_steps: int = 5000) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.render_mode = render_mode
        self.max_episode_steps = int(max_episode_steps)
        self.game = Engine(self.config)

        h, w = self.config.height, self.config.width
        self.observation_space = spaces.Box(low=0, high=int(max(TileColor)), shape=(h, w), dtype=np.int8)
        self.action_space = spaces.Discrete(len(Intent))

        self._steps = 0

    def _get_obs(self) -> np.ndarray:
        return self.game.get_state()

    def _get_info(self) -> Dict[str, Any]:
        piece = self.game.piece
        return {
            "score": self.game.score.value,
            "steps": self._steps,
            "piece": None if piece is None else piece.kind.name,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is None:
            seed = int(self.np_random.integers(0, 2**31 - 1))
        config = replace(self.config, random_seed=seed)
        self.game = Engine(config)
        self.game.start()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        result = self.game.step(Intent(int(action)))
        self._steps += 1
        terminated = bool(result.lost)
        truncated = self._steps >= self.max_episode_steps and not terminated
        info = self._get_info()
        info["collided"] = result.collided
        info["rows_cleared"] = result.rows_cleared
        return self._get_obs(), float(result.rows_cleared), terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            grid = self.game.get_state()
            cell = 12
            h, w = grid.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color_for_tile(int(grid[y, x]))
            return img
        return None

    def close(self) -> None:
        pass
