import jsonschema

from .schema_loader import load_schema
from .schemas.shotplan_v1 import plan_to_dict


def validate_script_analysis(data: dict) -> None:
    """Validate a raw ScriptAnalysis dict against ScriptAnalysis.v1.json.

    Raises jsonschema.ValidationError if non-conformant.
    """
    jsonschema.validate(data, load_schema("ScriptAnalysis.v1.json"))


def validate_shotplan(data: dict) -> None:
    """Validate a ShotPlan dict against the canonical ShotPlan.v1.json contract.

    Raises jsonschema.ValidationError if non-conformant.
    """
    jsonschema.validate(data, load_schema("ShotPlan.v1.json"))


def validate_plan_model(plan) -> None:
    """Validate a ShotPlan model by projecting it to its camelCase JSON form.

    Raises jsonschema.ValidationError if the projected artifact is non-conformant.
    """
    validate_shotplan(plan_to_dict(plan))
