import json
import time
from pathlib import Path
from typing import Any, Dict, Optional


def log_step(output_dir: Optional[Path], step: str, payload: Dict[str, Any]) -> None:
    if output_dir is None:
        return
    output_dir.mkdir(parents=True, exist_ok=True)
    log_path = output_dir / "run.log"
    entry = {"ts": time.time(), "step": step, "payload": payload}
    with open(log_path, "a", encoding="utf-8") as f:
        f.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")
