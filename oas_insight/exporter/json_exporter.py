"""JSON exporter."""
import json
from pathlib import Path
from datetime import datetime
from typing import Any, Dict, Optional, Union


class JsonExporter:
    """Export reduce results and schema descriptions to JSON."""

    def __init__(self, output_dir: Optional[str] = None):
        # Relative output files are written under output_dir
        self.output_dir = Path(output_dir) if output_dir else None

    def export(
        self,
        output_file: Union[str, Path],
        payload: Dict[str, Any],
        kind: str,
    ) -> Path:
        """Export to JSON file."""
        output_file = Path(output_file)
        if self.output_dir is not None and not output_file.is_absolute():
            output_file = self.output_dir / output_file
        output_file.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "metadata": {
                "created_at": datetime.now().isoformat(),
                "kind": kind,  # "reduce" or "schema"
            },
            "result": payload,
        }

        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str, ensure_ascii=False)
        return output_file
