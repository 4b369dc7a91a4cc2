"""Name conversion for GitHub Actions variables."""

import re

_LOWER_OR_DIGIT_THEN_UPPER = re.compile(r"([a-z\d])([A-Z])")
_UPPER_RUN_THEN_WORD = re.compile(r"([A-Z]+)([A-Z][a-z])")


def to_upper_snake_case(name: str) -> str:
    """Convert a camelCase or PascalCase name to UPPER_SNAKE_CASE.

    Examples:
        myVariableName -> MY_VARIABLE_NAME
        awsAccountId -> AWS_ACCOUNT_ID
        APIKey -> API_KEY
    """
    converted = _LOWER_OR_DIGIT_THEN_UPPER.sub(r"\1_\2", name)
    converted = _UPPER_RUN_THEN_WORD.sub(r"\1_\2", converted)
    return converted.upper()
