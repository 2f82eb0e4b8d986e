from pathlib import Path
import json

_CONTRACTS_DIR = Path(__file__).resolve().parent / "schemas" / "contracts"


def load_schema(name: str):
    schema_path = _CONTRACTS_DIR / name
    if not schema_path.exists():
        raise FileNotFoundError(f"Missing canonical schema: {schema_path}")
    return json.loads(schema_path.read_text(encoding="utf-8"))
