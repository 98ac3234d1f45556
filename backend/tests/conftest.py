import sys
from pathlib import Path

import pytest

here = Path(__file__).resolve()
root = here.parent.parent
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from dynaform.catalog import FieldCatalog

DATA_DIR = root.parent / "data"

MARRIED_ONLY = [{"relation": "notEqual", "fields": [{"name": "maritalStatus", "value": "Married"}]}]

PERSONAL_FIELDS = [
    {"name": "firstName", "label": "First Name", "type": "text", "validation": {"required": True}},
    {
        "name": "email",
        "label": "Email",
        "type": "email",
        "validation": {"required": True, "isEmail": True},
    },
    {"name": "maritalStatus", "label": "Marital Status", "type": "radio", "values": ["Single", "Married"]},
    {
        "name": "spouseName",
        "label": "Spouse's Name",
        "type": "text",
        "validation": {"required": True},
        "hideWhen": MARRIED_ONLY,
    },
    {
        "name": "children",
        "label": "Do you have children?",
        "type": "radio",
        "values": ["Yes", "No"],
        "defaultChecked": "No",
        "hideWhen": MARRIED_ONLY,
        "dynamicList": {
            "itemLabel": "Child {n} Name",
            "itemPlaceholder": "Enter name of child {n}",
            "validation": {"required": True},
        },
    },
    {
        "name": "gender",
        "label": "Gender",
        "type": "select",
        "values": [{"label": "Female", "value": "female"}, {"label": "Male", "value": "male"}],
    },
    {"name": "phone", "label": "Phone", "type": "phone"},
    {"name": "newsletter", "label": "Newsletter", "type": "checkbox"},
]


@pytest.fixture
def personal_catalog() -> FieldCatalog:
    return FieldCatalog.from_data(PERSONAL_FIELDS)


@pytest.fixture
def email_catalog() -> FieldCatalog:
    return FieldCatalog.from_data(
        [{"name": "email", "type": "email", "validation": {"required": True, "isEmail": True}}]
    )
