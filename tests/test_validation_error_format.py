from core.validation_errors import format_validation_error_details


def test_missing_required_field_summary_is_readable():
    errors = [
        {
            "type": "missing",
            "loc": ("body", "managerName"),
            "msg": "Field required",
            "input": {
                "displayName": "Tasty Bites",
                "username": "tasty",
                "password": "secret123",
            },
        }
    ]

    details = format_validation_error_details(errors)

    assert details["summary"] == "Validation failed: missing required field: managerName."
    assert details["missingFields"] == ["managerName"]
    assert details["fieldErrors"] == [
        {
            "path": "managerName",
            "location": "body",
            "message": "Field required",
            "errorType": "missing",
        }
    ]
    assert "errors" not in details


def test_invalid_enum_value_has_field_error_without_missing_summary():
    errors = [
        {
            "type": "enum",
            "loc": ("body", "duration"),
            "msg": "Input should be 'THREE_MONTH', 'SIX_MONTH' or 'ONE_YEAR'",
            "input": "TWO_WEEK",
        }
    ]

    details = format_validation_error_details(errors)

    assert details["summary"] == "Validation failed for 1 field."
    assert details["missingFields"] == []
    assert details["fieldErrors"][0]["path"] == "duration"
    assert details["fieldErrors"][0]["errorType"] == "enum"
    assert details["fieldErrors"][0]["input"] == "TWO_WEEK"


def test_credential_inputs_are_never_echoed():
    errors = [
        {
            "type": "string_too_short",
            "loc": ("body", "newPassword"),
            "msg": "String should have at least 6 characters",
            "input": "abc",
        },
        {
            "type": "string_type",
            "loc": ("body", "refreshToken"),
            "msg": "Input should be a valid string",
            "input": 42,
        },
    ]

    details = format_validation_error_details(errors)

    assert details["summary"] == "Validation failed for 2 fields."
    assert all("input" not in entry for entry in details["fieldErrors"])


def test_nested_item_path_and_query_location():
    errors = [
        {
            "type": "greater_than",
            "loc": ("body", "items", 0, "quantity"),
            "msg": "Input should be greater than 0",
            "input": 0,
        },
        {
            "type": "bool_parsing",
            "loc": ("query", "activeOnly"),
            "msg": "Input should be a valid boolean",
            "input": "maybe",
        },
    ]

    details = format_validation_error_details(errors)

    assert details["fieldErrors"][0]["path"] == "items.0.quantity"
    assert details["fieldErrors"][1]["location"] == "query"
    assert details["fieldErrors"][1]["path"] == "activeOnly"


def test_multiple_missing_fields_are_deduplicated_and_listed():
    errors = [
        {"type": "missing", "loc": ("body", "customerName"), "msg": "Field required", "input": {}},
        {"type": "missing", "loc": ("body", "customerNumber"), "msg": "Field required", "input": {}},
        {"type": "missing", "loc": ("body", "customerName"), "msg": "Field required", "input": {}},
    ]

    details = format_validation_error_details(errors)

    assert details["summary"] == "Validation failed: missing required fields: customerName, customerNumber."
    assert details["missingFields"] == ["customerName", "customerNumber"]
