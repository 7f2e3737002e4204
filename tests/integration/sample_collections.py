"""Collection declarations used by the CLI and app loading tests."""

from docgate.domain.entities import CollectionOptions, CollectionSchema, enum_rule, string_rule

COLLECTIONS = [
    CollectionSchema(
        name="tasks",
        fields={
            "title": string_rule(1, 100, required=True),
            "state": enum_rule(["todo", "done"], default="todo"),
        },
        options=CollectionOptions(allow_user_delete=True),
    ),
    {
        "name": "comments",
        "full_crud": False,
        "fields": {
            "taskId": {"type": "string", "reference": "tasks", "required": True},
            "body": {"type": "string", "min_length": 1, "max_length": 500, "required": True},
        },
        "options": {"is_public_get": True},
    },
]
