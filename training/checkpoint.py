# training/checkpoint.py
from __future__ import annotations
import json, os
from typing import Protocol, Dict, Any

class Checkpointable(Protocol):
    """Objects that can round-trip their state as pure-Python/JSON-serializable dicts."""
    def get_state(self) -> Dict[str, Any]: ...
    def set_state(self, state: Dict[str, Any]) -> None: ...

class CheckpointManager:
    """Saves/loads a named bundle of components. Each component must be Checkpointable."""
    def __init__(self, root_dir: str):
        self.root_dir = root_dir

    def path_for(self, tag: str) -> str:
        return os.path.join(self.root_dir, f"{tag}.ckpt.json")

    def exists(self, tag: str) -> bool:
        return os.path.exists(self.path_for(tag))

    def save(self, tag: str, components: Dict[str, Checkpointable]) -> str:
        path = self.path_for(tag)
        bundle = {name: comp.get_state() for name, comp in components.items()}
        os.makedirs(self.root_dir, exist_ok=True)
        with open(path, "w") as f:
            json.dump(bundle, f)
        return path

    def load(self, tag: str, components: Dict[str, Checkpointable]) -> None:
        with open(self.path_for(tag), "r") as f:
            bundle = json.load(f)
        for name, comp in components.items():
            if name in bundle:
                comp.set_state(bundle[name])
