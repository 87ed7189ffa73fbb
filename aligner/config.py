import os
from dataclasses import dataclass

import tomli
import tomli_w


@dataclass
class SolverConfig:
    thumb_height: int = 80
    padding: int = 16
    background_color: int = 0xFFEEEEEE
    dark_threshold: int = 64
    min_component_size: int = 24
    cache_path: str = "offsets.toml"

    @classmethod
    def from_dict(cls, data):
        compositor = data.get("compositor", {})
        scorer = data.get("scorer", {})
        cache = data.get("cache", {})
        defaults = cls()
        return cls(
            thumb_height=compositor.get("thumb_height", defaults.thumb_height),
            padding=compositor.get("padding", defaults.padding),
            background_color=compositor.get("background_color", defaults.background_color),
            dark_threshold=scorer.get("dark_threshold", defaults.dark_threshold),
            min_component_size=scorer.get("min_component_size", defaults.min_component_size),
            cache_path=cache.get("path", defaults.cache_path),
        )


def load_config(path="config.toml"):
    if not os.path.exists(path):
        if os.path.exists("config.example.toml"):
            print(f"Config {path} not found, using config.example.toml")
            path = "config.example.toml"
        else:
            return SolverConfig()

    with open(path, "rb") as f:
        return SolverConfig.from_dict(tomli.load(f))


class OffsetCache:
    """
    Internal search offsets of solved captchas, keyed by challenge id.
    Feeding a cached offset back as custom_offset replays the same result.
    """

    def __init__(self, path="offsets.toml"):
        self.path = path
        self.offsets = {}
        if os.path.exists(path):
            with open(path, "rb") as f:
                self.offsets = dict(tomli.load(f).get("offsets", {}))

    def get(self, challenge):
        return self.offsets.get(challenge)

    def put(self, challenge, offset):
        self.offsets[challenge] = int(offset)

    def save(self):
        with open(self.path, "wb") as f:
            tomli_w.dump({"offsets": self.offsets}, f)

    def __contains__(self, challenge):
        return challenge in self.offsets

    def __len__(self):
        return len(self.offsets)
