"""Logic components: validator, transformer, condition."""

from __future__ import annotations

from imortal.application.components.definition import (
    BuiltinComponent,
    ComponentDefinition,
    data_in,
    data_out,
    field_def,
    option,
    trigger_in,
    trigger_out,
)
from imortal.domain.enums import ComponentCategory
from imortal.domain.types import ANY, BOOL, JSON, STRING, TEXT, array

CONDITION_OPERATORS = (
    "custom",
    "equals",
    "not_equals",
    "greater_than",
    "less_than",
    "contains",
    "is_empty",
    "is_not_empty",
)


def validator() -> ComponentDefinition:
    return ComponentDefinition(
        id=BuiltinComponent.LOGIC_VALIDATOR.value,
        name="Validator",
        category=ComponentCategory.LOGIC,
        description="Validate data against a set of rules",
        icon="check-circle",
        fields=(field_def("rules_json", TEXT, label="Rules (JSON)"),),
        inputs=(
            data_in("data", ANY, required=True),
            trigger_in("validate"),
            data_in("rules", JSON),
        ),
        outputs=(
            data_out("data", ANY),
            data_out("is_valid", BOOL),
            data_out("errors", array(STRING)),
            data_out("field_errors", JSON),
            trigger_out("valid"),
            trigger_out("invalid"),
        ),
        config=(
            option("fail_fast", False),
            option("trim_strings", True),
            option("allow_unknown_fields", True),
            option("error_format", "both", options=("list", "map", "both")),
        ),
        tags=("logic", "validation"),
    )


def transformer() -> ComponentDefinition:
    return ComponentDefinition(
        id=BuiltinComponent.LOGIC_TRANSFORMER.value,
        name="Transformer",
        category=ComponentCategory.LOGIC,
        description="Map input data to a new shape",
        icon="shuffle",
        fields=(
            field_def("mapping", TEXT),
            field_def("expression", TEXT),
        ),
        inputs=(
            data_in("input", ANY, required=True),
            trigger_in("transform"),
            data_in("context", JSON),
        ),
        outputs=(
            data_out("output", ANY),
            trigger_out("success"),
            trigger_out("error"),
            data_out("error_message", STRING),
        ),
        config=(
            option("mode", "mapping", options=("mapping", "expression", "template")),
            option("preserve_unmapped", False),
            option("null_on_missing", True),
            option("output_type", "infer", options=("infer", "object", "array", "string")),
            option("deep_clone", True),
        ),
        tags=("logic", "transform", "map"),
    )


def condition() -> ComponentDefinition:
    return ComponentDefinition(
        id=BuiltinComponent.LOGIC_CONDITION.value,
        name="Condition",
        category=ComponentCategory.LOGIC,
        description="Branch on a boolean expression",
        icon="git-branch",
        fields=(field_def("expression", STRING, required=True, default_value="value"),),
        inputs=(
            data_in("value", ANY, required=True),
            trigger_in("evaluate"),
            data_in("context", JSON),
        ),
        outputs=(
            trigger_out("true"),
            trigger_out("false"),
            data_out("value", ANY),
            data_out("result", BOOL),
        ),
        config=(
            option("operator", "custom", options=CONDITION_OPERATORS),
            option("compare_value", ""),
            option("case_sensitive", True),
            option("coerce_types", False),
        ),
        tags=("logic", "condition", "branch", "if"),
    )


def logic_definitions() -> list[ComponentDefinition]:
    return [validator(), transformer(), condition()]
